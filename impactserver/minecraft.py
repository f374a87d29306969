"""Looking up Minecraft profiles and verifying server joins."""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from typing import Mapping, Optional
from urllib.parse import quote

import requests

from .framework import HTTPError
from .httpclient import get_request

URL_HAS_JOINED = "https://sessionserver.mojang.com/session/minecraft/hasJoined"
URL_NAMES = "https://api.mojang.com/user/profiles/<UUID>/names"
URL_PROFILE = "https://api.mojang.com/users/profiles/minecraft/<name>"


@dataclass(frozen=True)
class Profile:
    """A Minecraft account's id and current name."""

    id: uuid.UUID
    name: str

    @classmethod
    def from_dict(cls, data: Mapping) -> "Profile":
        """Parse a profile; raises ValueError if it is malformed."""
        if not isinstance(data, Mapping):
            raise ValueError("profile must be a JSON object")
        raw_id = data.get("id")
        profile_id = uuid.UUID(int=0) if raw_id is None else uuid.UUID(str(raw_id))
        name = data.get("name") or ""
        return cls(profile_id, str(name))


def has_joined_server(username: str, server_hash: str) -> Profile:
    """Ask the session server whether username joined with server_hash."""
    request = get_request(URL_HAS_JOINED)
    request.set_query("username", username)
    request.set_query("serverId", "0" + server_hash)
    profile = Profile.from_dict(request.do().json())
    if username.casefold() != profile.name.casefold():
        raise ValueError("invalid username")
    return profile


def _fetch(url: str, bad: HTTPError):
    try:
        response = get_request(url).do()
    except requests.RequestException as err:
        bad.internal = err
        raise bad from err
    if not response.ok:
        raise bad
    return response


def get_profile(minecraft: str) -> Optional[Profile]:
    """Resolve a Minecraft name or UUID to a full profile.

    Returns None if the account has no name history.
    """
    text = minecraft.strip()
    try:
        minecraft_id: Optional[uuid.UUID] = uuid.UUID(text)
    except ValueError:
        minecraft_id = None

    if minecraft_id is not None:
        bad = HTTPError(400, "bad minecraft uuid")
        url = URL_NAMES.replace("<UUID>", quote(minecraft_id.hex, safe=""), 1)
        names = _fetch(url, bad).json()
        if not isinstance(names, list):
            raise ValueError("name history must be a JSON list")
        if not names:
            return None
        newest = max(names, key=lambda entry: int(entry.get("changedToAt") or 0))
        return Profile(minecraft_id, str(newest.get("name") or ""))

    bad = HTTPError(400, "bad minecraft username")
    url = URL_PROFILE.replace("<name>", quote(text, safe=""), 1)
    response = _fetch(url, bad)
    try:
        data = response.json()
        if not isinstance(data, Mapping) or data.get("id") is None:
            raise ValueError("profile has no id")
        return Profile.from_dict(data)
    except ValueError as err:
        bad.internal = err
        raise bad from err