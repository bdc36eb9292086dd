"""Enum definitions for account models."""

import enum


def enum_values(enum_cls):
    """Return persistent DB values for SAEnum mappings."""
    return [member.value for member in enum_cls]


class UserRole(str, enum.Enum):
    USER = "user"
    ADMIN = "admin"
