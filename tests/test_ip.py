from werkzeug.test import EnvironBuilder

from impactserver.ip import real_ip_best_guess, real_ip_if_unambiguous


def make(forwarded=None):
    headers = {"X-Forwarded-For": forwarded} if forwarded is not None else {}
    return EnvironBuilder(headers=headers, environ_base={"REMOTE_ADDR": "10.0.0.9"}).get_request()


def test_unambiguous_two_entries():
    assert real_ip_if_unambiguous(make("1.2.3.4, 5.6.7.8")) == "1.2.3.4"


def test_ambiguous_returns_empty():
    assert real_ip_if_unambiguous(make("a, b, c")) == ""
    assert real_ip_if_unambiguous(make()) == ""


def test_best_guess():
    assert real_ip_best_guess(make("a, b , c")) == "b"
    assert real_ip_best_guess(make()) == "10.0.0.9"