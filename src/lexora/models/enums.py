"""Shared enums for models."""

from enum import Enum


class AuthType(str, Enum):
    """How a user account was first established."""

    LOCAL = "local"
    MAGIC_LINK = "magic-link"
    GOOGLE = "google"
    MICROSOFT = "microsoft"
