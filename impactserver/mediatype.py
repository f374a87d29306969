"""Media types used in Accept and Content-Type headers."""

from enum import Enum


class MediaType(str, Enum):
    JSON = "application/json"
    XML = "application/xml"
    FORM = "application/x-www-form-urlencoded"

    def __str__(self) -> str:
        return self.value