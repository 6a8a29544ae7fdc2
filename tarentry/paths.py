import os
import sys
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

PlatformFamily = Literal["posix", "windows", "netware"]


class Platform(BaseModel):
    """Describes how native paths look on a given operating system."""

    model_config = ConfigDict(frozen=True)

    separator: str = Field(default="/", min_length=1, max_length=1)
    family: PlatformFamily = "posix"

    @classmethod
    def current(cls) -> "Platform":
        """Descriptor for the running interpreter."""
        if sys.platform.startswith("win"):
            family = "windows"
        elif "netware" in sys.platform:
            family = "netware"
        else:
            family = "posix"
        return cls(separator=os.sep, family=family)


POSIX = Platform(separator="/", family="posix")
WINDOWS = Platform(separator="\\", family="windows")
NETWARE = Platform(separator="\\", family="netware")


def _has_drive_letter(path: str) -> bool:
    if len(path) <= 2 or path[1] != ":":
        return False
    first = path[0]
    return ("a" <= first <= "z") or ("A" <= first <= "Z")


def normalize_name(
    path: str,
    preserve_leading_slashes: bool = False,
    platform: Platform = POSIX,
) -> str:
    """
    Turns a native path into a portable archive name.

    1. Strips a Windows drive letter ("C:").
    2. Strips a NetWare volume ("SYS:").
    3. Replaces the native separator with '/'.
    4. Strips every leading '/' (absolute and UNC paths) unless asked
       to preserve them.
    """
    name = path

    if platform.family == "windows" and _has_drive_letter(name):
        name = name[2:]
    elif platform.family == "netware":
        colon = name.find(":")
        if colon != -1:
            name = name[colon + 1 :]

    name = name.replace(platform.separator, "/")

    if not preserve_leading_slashes:
        name = name.lstrip("/")

    return name
