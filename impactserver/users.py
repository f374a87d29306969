"""User accounts, roles, nametag customisation and editions."""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field, replace
from typing import Optional

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Role:
    """A role a user can hold; a lower rank takes priority."""

    id: str
    rank: int
    legacy_list: bool

    def apply_defaults(self, info: UserInfo) -> None:
        """Fill the empty fields of info from this role's default template."""
        template = DEFAULT_ROLE_TEMPLATES.get(self.id)
        if template is None:
            logger.error("no default template for role %s", self.id)
            return
        if template.info is None:
            return
        defaults = template.info
        for name in ("icon", "cape", "text_color", "background_color", "border_color"):
            value = getattr(defaults, name)
            if value and not getattr(info, name):
                setattr(info, name, value)


@dataclass
class Edition:
    """How a user's client edition is shown, e.g. "Pepsi Premium Edition"."""

    icon: str = ""
    text: str = ""
    text_color: str = ""

    def to_dict(self) -> dict[str, str]:
        data = {"icon": self.icon, "text": self.text, "text_color": self.text_color}
        return {k: v for k, v in data.items() if v}


@dataclass
class UserInfo:
    """Public nametag information about a user, hidden when incognito."""

    icon: str = ""
    cape: str = ""
    text_color: str = ""
    background_color: str = ""
    border_color: str = ""

    def to_dict(self) -> dict[str, str]:
        data = {
            "icon": self.icon,
            "cape": self.cape,
            "text_color": self.text_color,
            "bg_color": self.background_color,
            "border_color": self.border_color,
        }
        return {k: v for k, v in data.items() if v}


@dataclass
class Features:
    """Features a user has; public ones are listed unless the user is incognito."""

    public: list[str] = field(default_factory=list)
    private: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, list[str]]:
        data = {"public": self.public, "private": self.private}
        return {k: list(v) for k, v in data.items() if v}


@dataclass(frozen=True)
class RoleTemplate:
    info: Optional[UserInfo] = None
    edition: Optional[Edition] = None


ROLES: dict[str, Role] = {
    "pepsi": Role("pepsi", 1, True),
    "spawnmason": Role("spawnmason", 0, False),
    "developer": Role("developer", 2, True),
    "staff": Role("staff", 3, True),
    "premium": Role("premium", 4, True),
}

_FILES = "https://files.impactclient.net/img/texture/"

DEFAULT_ROLE_TEMPLATES: dict[str, RoleTemplate] = {
    "developer": RoleTemplate(info=UserInfo(cape=_FILES + "developer_cape_elytra.png")),
    "staff": RoleTemplate(
        info=UserInfo(cape=_FILES + "staff_cape_elytra.png"),
        edition=Edition(text="Staff", text_color="#FF7734EB"),
    ),
    "pepsi": RoleTemplate(
        info=UserInfo(
            icon=_FILES + "pepsi_v2_128.png",
            cape=_FILES + "pepsi_cape_elytra.png",
            text_color="BLUE",
            background_color="#50FFFFFF",
            border_color="#FFC9002B",
        ),
        edition=Edition(icon=_FILES + "pepsi_v2_128.png", text="Pepsi", text_color="#FFC9002B"),
    ),
    "spawnmason": RoleTemplate(
        info=UserInfo(
            icon=_FILES + "spawnmason128.png",
            cape=_FILES + "spawnmason_cape_elytra.png",
            text_color="GOLD",
            background_color="#90404040",
            border_color="RED",
        ),
    ),
    "premium": RoleTemplate(
        info=UserInfo(cape=_FILES + "premium_cape_elytra.png"),
        edition=Edition(text="Premium", text_color="GOLD"),
    ),
}

_SPECKLES = _FILES + "speckles128.png"
_POPSTONIA = _FILES + "popstonia.png"

SPECIAL_CASES: dict[uuid.UUID, RoleTemplate] = {
    uuid.UUID("2c3174fc-0c6b-4cfb-bb2b-0069bf7294d1"): RoleTemplate(
        info=UserInfo(text_color="LIGHT_PURPLE"),
    ),
    uuid.UUID("51dcd870-d33b-40e9-9fc1-aecdcff96081"): RoleTemplate(
        info=UserInfo(text_color="RED", icon=_SPECKLES),
        edition=Edition(icon=_SPECKLES),
    ),
    uuid.UUID("7b9c005b-011e-42de-bfb4-c0003f5c3a77"): RoleTemplate(
        info=UserInfo(text_color="RED", icon=_SPECKLES),
        edition=Edition(icon=_SPECKLES),
    ),
    uuid.UUID("8e563236-c7f5-4c82-aa27-c95bf3f4c322"): RoleTemplate(
        info=UserInfo(icon=_POPSTONIA),
    ),
    uuid.UUID("342fc44b-1fd1-4272-a4c3-a98a2df98abc"): RoleTemplate(
        info=UserInfo(icon=_POPSTONIA),
    ),
    uuid.UUID("e97ff4c0-48bf-4c98-be34-248fdde2ffd3"): RoleTemplate(
        info=UserInfo(
            text_color="RED",
            icon="https://i.imgur.com/aKt1g4H.jpg",
            cape="https://i.imgur.com/bvhC1Xk.png",
        ),
        edition=Edition(icon="https://i.imgur.com/aKt1g4H.jpg"),
    ),
    uuid.UUID("9d913c0a-3d57-4ce9-8b7d-689973312856"): RoleTemplate(
        info=UserInfo(text_color="ORANGE"),
    ),
}


def role_from_id(role_id: str) -> Role:
    """Look up a role by its id; raises ValueError for unknown ids."""
    try:
        return ROLES[role_id]
    except KeyError:
        raise ValueError(f"unable to find role with id {role_id}") from None


def get_roles_sorted(roles: list[Role]) -> list[Role]:
    """A new list of roles, highest priority (lowest rank) first."""
    return sorted(roles, key=lambda role: role.rank)


@dataclass
class User:
    id: uuid.UUID = field(default_factory=uuid.uuid4)
    email: str = ""
    minecraft_id: Optional[uuid.UUID] = None
    discord_id: str = ""
    password_hash: str = ""
    stripe_id: str = ""
    legacy_enabled: bool = False
    incognito: bool = False
    legacy: bool = False
    roles: list[Role] = field(default_factory=list)
    user_info: Optional[UserInfo] = None

    def _special(self) -> Optional[RoleTemplate]:
        if self.minecraft_id is None:
            return None
        return SPECIAL_CASES.get(self.minecraft_id)

    def role_ids(self, legacy_only: bool = False) -> list[str]:
        return [role.id for role in self.roles if role.legacy_list or not legacy_only]

    def has_role_with_id(self, role_id: str) -> bool:
        return any(role.id == role_id for role in self.roles)

    def is_full_account(self) -> bool:
        """True if the user is a full account, i.e. has an e-mail address."""
        return self.email != ""

    def check_password(self, password: str) -> bool:
        if not self.is_full_account():
            return False
        return self.password_hash == password

    def edition(self) -> Optional[Edition]:
        """The combined edition from special cases and roles, or None."""
        editions: list[Edition] = []
        special = self._special()
        if special is not None and special.edition is not None:
            editions.append(special.edition)
        for role in get_roles_sorted(self.roles):
            template = DEFAULT_ROLE_TEMPLATES.get(role.id)
            if template is not None and template.edition is not None:
                editions.append(template.edition)

        if not editions:
            return None

        text = " ".join(e.text for e in editions if e.text)
        return Edition(
            icon=next((e.icon for e in editions if e.icon), ""),
            text=f"{text} Edition" if text else "",
            text_color=next((e.text_color for e in editions if e.text_color), ""),
        )

    def _private_features(self) -> list[str]:
        return ["edition"] if self.edition() is not None else []

    def _public_features(self) -> list[str]:
        info = self.user_info
        features: list[str] = []
        if info is not None:
            if info.background_color or info.border_color or info.text_color:
                features.append("nametag")
            if info.cape:
                features.append("cape")
            if info.icon:
                features.append("icon")
        return features

    def features(self) -> Optional[Features]:
        private = self._private_features()
        public = self._public_features()
        if private or public:
            return Features(public=public, private=private)
        return None

    def to_dict(self) -> dict:
        """The user's public JSON representation."""
        return {
            "email": self.email,
            "minecraft": str(self.minecraft_id) if self.minecraft_id is not None else None,
            "discord": self.discord_id,
            "legacy_enabled": self.legacy_enabled,
            "incognito": self.incognito,
            "legacy": self.legacy,
            "roles": [role.id for role in self.roles],
            "user_info": self.user_info.to_dict() if self.user_info is not None else None,
        }


def new_user_info(user: User) -> UserInfo:
    """Build a UserInfo from the user's special case and role defaults."""
    special = user._special()
    info = replace(special.info) if special is not None and special.info is not None else UserInfo()
    for role in get_roles_sorted(user.roles):
        role.apply_defaults(info)
    return info