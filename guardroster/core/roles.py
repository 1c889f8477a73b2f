"""Closed set of account roles."""

from enum import Enum


class Role(str, Enum):
    ADMIN = "ADMIN"
    USER = "USER"
