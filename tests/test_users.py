import uuid

import pytest

from impactserver.users import (
    DEFAULT_ROLE_TEMPLATES,
    ROLES,
    SPECIAL_CASES,
    Edition,
    User,
    UserInfo,
    get_roles_sorted,
    new_user_info,
    role_from_id,
)

LEIJURV = uuid.UUID("51dcd870-d33b-40e9-9fc1-aecdcff96081")
CATGORL = uuid.UUID("2c3174fc-0c6b-4cfb-bb2b-0069bf7294d1")
PEPSI_ICON = "https://files.impactclient.net/img/texture/pepsi_v2_128.png"
PEPSI_CAPE = "https://files.impactclient.net/img/texture/pepsi_cape_elytra.png"
PREMIUM_CAPE = "https://files.impactclient.net/img/texture/premium_cape_elytra.png"
SPECKLES = "https://files.impactclient.net/img/texture/speckles128.png"


def roles(*ids):
    return [role_from_id(i) for i in ids]


def test_role_from_id_known():
    role = role_from_id("pepsi")
    assert role == ROLES["pepsi"]
    assert role.legacy_list is True


def test_role_from_id_unknown_raises():
    with pytest.raises(ValueError, match="unable to find role with id nope"):
        role_from_id("nope")


def test_get_roles_sorted_orders_by_rank_without_mutating():
    original = roles("premium", "staff", "pepsi", "spawnmason", "developer")
    before = list(original)
    result = get_roles_sorted(original)
    assert [r.id for r in result] == ["spawnmason", "pepsi", "developer", "staff", "premium"]
    assert original == before
    assert [r.rank for r in result] == sorted(r.rank for r in result)


def test_role_ids_legacy_filter():
    user = User(roles=roles("spawnmason", "pepsi"))
    assert user.role_ids(False) == ["spawnmason", "pepsi"]
    assert user.role_ids(True) == ["pepsi"]


def test_has_role_with_id():
    user = User(roles=roles("staff"))
    assert user.has_role_with_id("staff")
    assert not user.has_role_with_id("premium")


def test_full_account_and_password():
    password = "password"
    partial = User(password_hash=password)
    assert not partial.is_full_account()
    assert not partial.check_password(password)

    full = User(email="someone@example.com", password_hash=password)
    assert full.is_full_account()
    assert full.check_password(password)
    assert not full.check_password("secret")


def test_edition_concatenates_role_texts():
    user = User(roles=roles("premium", "pepsi"))
    edition = user.edition()
    assert edition.text == "Pepsi Premium Edition"
    assert edition.icon == PEPSI_ICON
    assert edition.text_color == "#FFC9002B"


def test_edition_none_without_edition_templates():
    assert User(roles=roles("developer", "spawnmason")).edition() is None
    assert User().edition() is None


def test_edition_special_case_icon_with_role_text():
    user = User(minecraft_id=LEIJURV, roles=roles("staff"))
    edition = user.edition()
    assert edition.icon == SPECKLES
    assert edition.text == "Staff Edition"
    assert edition.text_color == "#FF7734EB"


def test_edition_special_case_alone_has_no_text():
    edition = User(minecraft_id=LEIJURV).edition()
    assert edition == Edition(icon=SPECKLES)


def test_new_user_info_priority_order():
    info = new_user_info(User(roles=roles("premium", "pepsi")))
    assert info.cape == PEPSI_CAPE
    assert info.icon == PEPSI_ICON
    assert info.text_color == "BLUE"
    assert info.background_color == "#50FFFFFF"
    assert info.border_color == "#FFC9002B"


def test_new_user_info_special_case_takes_precedence():
    info = new_user_info(User(minecraft_id=CATGORL, roles=roles("premium")))
    assert info.text_color == "LIGHT_PURPLE"
    assert info.cape == PREMIUM_CAPE


def test_new_user_info_does_not_mutate_special_case():
    user = User(minecraft_id=CATGORL, roles=roles("pepsi"))
    first = new_user_info(user)
    second = new_user_info(user)
    assert first == second
    assert SPECIAL_CASES[CATGORL].info == UserInfo(text_color="LIGHT_PURPLE")


def test_apply_defaults_keeps_existing_fields():
    info = UserInfo(cape="mine")
    role_from_id("developer").apply_defaults(info)
    assert info.cape == "mine"
    empty = UserInfo()
    role_from_id("developer").apply_defaults(empty)
    assert empty.cape == DEFAULT_ROLE_TEMPLATES["developer"].info.cape


def test_features_public_and_private():
    user = User(roles=roles("premium"), user_info=UserInfo(cape=PREMIUM_CAPE, text_color="GOLD"))
    features = user.features()
    assert features.private == ["edition"]
    assert features.public == ["nametag", "cape"]


def test_features_none_when_nothing():
    assert User(roles=roles("developer"), user_info=UserInfo()).features() is None


def test_features_to_dict_omits_empty():
    user = User(user_info=UserInfo(icon=SPECKLES))
    assert user.features().to_dict() == {"public": ["icon"]}


def test_user_to_dict():
    user = User(
        email="someone@example.com",
        minecraft_id=CATGORL,
        roles=roles("staff", "premium"),
        user_info=UserInfo(text_color="GOLD", background_color="RED"),
    )
    data = user.to_dict()
    assert data["roles"] == ["staff", "premium"]
    assert data["minecraft"] == "2c3174fc-0c6b-4cfb-bb2b-0069bf7294d1"
    assert data["user_info"] == {"text_color": "GOLD", "bg_color": "RED"}
    assert "password_hash" not in data


def test_user_to_dict_without_info():
    data = User().to_dict()
    assert data["user_info"] is None
    assert data["minecraft"] is None
    assert data["roles"] == []


def test_edition_to_dict_omits_empty():
    assert Edition(text="Staff").to_dict() == {"text": "Staff"}