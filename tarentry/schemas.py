import time
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .constants import (
    DEFAULT_DIR_MODE,
    DEFAULT_FILE_MODE,
    GNU_LONGLINK,
    GNU_TMAGIC,
    LF_DIR,
    LF_GNUTYPE_LONGNAME,
    LF_NORMAL,
    MILLIS_PER_SECOND,
    TMAGIC,
)
from .paths import Platform, normalize_name


class DiskEntryStats(BaseModel):
    """The facts the filesystem supplies about a single path."""

    exists: bool
    path: str = ""
    is_dir: bool = False
    size: int = 0
    mtime: int = 0


class TarEntry(BaseModel):
    """
    One archive member and the metadata of its 512-byte header.

    An entry is created in one of three ways:
    1. ``from_name``: built "by hand", every field defaulted.
    2. ``from_path``: filled from a file on disk, keeps a reference to it.
    3. ``from_header`` / ``decode_header``: parsed from header bytes.

    Two entries with the same name are equal, whatever their other fields.
    """

    model_config = ConfigDict(validate_assignment=True)

    name: str = ""
    mode: int = Field(default=DEFAULT_FILE_MODE, ge=0)
    owner_id: int = Field(default=0, ge=0)
    group_id: int = Field(default=0, ge=0)
    size: int = Field(default=0, ge=0)
    mod_time: int = Field(default=0, ge=0)
    link_flag: bytes = LF_NORMAL
    link_name: str = ""
    magic: str = TMAGIC
    owner_name: str = ""
    group_name: str = ""
    device_major: int = Field(default=0, ge=0)
    device_minor: int = Field(default=0, ge=0)

    # Live path on disk, only for entries built with from_path.
    file_ref: Optional[Path] = Field(default=None, exclude=True)

    @field_validator("link_flag")
    @classmethod
    def check_link_flag(cls, value: bytes) -> bytes:
        if len(value) != 1:
            raise ValueError(f"link_flag must be exactly one byte, got {value!r}")
        return value

    @classmethod
    def from_name(
        cls,
        name: str,
        link_flag: Optional[bytes] = None,
        preserve_leading_slashes: bool = False,
        platform: Optional[Platform] = None,
    ) -> "TarEntry":
        """Builds an entry from a name only; the caller fills in the rest."""
        normalized = normalize_name(
            name, preserve_leading_slashes, platform or Platform.current()
        )
        is_dir = normalized.endswith("/")

        entry = cls(
            name=normalized,
            mode=DEFAULT_DIR_MODE if is_dir else DEFAULT_FILE_MODE,
            link_flag=LF_DIR if is_dir else LF_NORMAL,
            mod_time=int(time.time()),
        )

        if link_flag is not None:
            entry.link_flag = link_flag
            if link_flag == LF_GNUTYPE_LONGNAME:
                entry.magic = GNU_TMAGIC

        return entry

    @classmethod
    def from_path(
        cls, path: Union[str, Path], platform: Optional[Platform] = None
    ) -> "TarEntry":
        """Builds an entry from a file or directory on disk."""
        from tarentry.factory import EntryFactory

        return EntryFactory.create_entry(Path(path), platform or Platform.current())

    @classmethod
    def from_header(cls, block: bytes) -> "TarEntry":
        from tarentry.header import decode_header

        return decode_header(block)

    def to_header(self) -> bytes:
        from tarentry.header import encode_header

        return encode_header(self)

    def set_name(
        self,
        name: str,
        preserve_leading_slashes: bool = False,
        platform: Optional[Platform] = None,
    ):
        """Replaces the name, normalizing it like the constructors do."""
        self.name = normalize_name(
            name, preserve_leading_slashes, platform or Platform.current()
        )

    def set_ids(self, owner_id: int, group_id: int):
        self.owner_id = owner_id
        self.group_id = group_id

    def set_names(self, owner_name: str, group_name: str):
        self.owner_name = owner_name
        self.group_name = group_name

    @property
    def mod_datetime(self) -> datetime:
        return datetime.fromtimestamp(self.mod_time, tz=timezone.utc)

    def set_mod_datetime(self, when: datetime):
        """Naive datetimes are taken as local time, like datetime.timestamp()."""
        self.mod_time = int(when.timestamp())

    def set_mod_time_millis(self, millis: int):
        """Milliseconds since the epoch, truncated to whole seconds."""
        self.mod_time = millis // MILLIS_PER_SECOND

    def is_directory(self) -> bool:
        """
        Ordered fallback:
        1. The live file on disk, when there is one.
        2. The directory link flag.
        3. A trailing '/' on the name.
        """
        if self.file_ref is not None:
            return self.file_ref.is_dir()

        if self.link_flag == LF_DIR:
            return True

        return self.name.endswith("/")

    def is_gnu_long_name_entry(self) -> bool:
        """True for the extension header that carries a GNU long name."""
        return self.link_flag == LF_GNUTYPE_LONGNAME and self.name == GNU_LONGLINK

    def list_children(self, platform: Optional[Platform] = None) -> List["TarEntry"]:
        """
        One entry per direct child of the referenced directory.

        Returns an empty list when there is no file reference or it is not
        a directory. The directory is listed again on every call.
        """
        if self.file_ref is None or not self.file_ref.is_dir():
            return []

        from tarentry.factory import EntryFactory

        return EntryFactory.list_children(
            self.file_ref, platform or Platform.current()
        )

    def is_descendant(self, other: "TarEntry") -> bool:
        """
        True when other's name starts with this entry's name.

        This is a plain string prefix test: "ab" counts as a parent
        of "abc".
        """
        return other.name.startswith(self.name)

    def same_entry(self, other: "TarEntry") -> bool:
        return self.name == other.name

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, TarEntry):
            return False
        return self.same_entry(other)

    def __hash__(self) -> int:
        return hash(self.name)
