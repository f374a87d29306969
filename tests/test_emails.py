import pytest

from impactserver.emails import is_valid_email


@pytest.mark.parametrize("email", ["someone@example.com", "a.b+c@mail.example.com", "a@b"])
def test_valid(email):
    assert is_valid_email(email) is True


@pytest.mark.parametrize(
    "email",
    ["", "a@", "no-at-sign", "someone@example.com\n", "x" * 250 + "@example.com", "a@-bad.example.com"],
)
def test_invalid(email):
    assert is_valid_email(email) is False