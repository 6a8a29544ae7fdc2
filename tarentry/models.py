from typing import cast

from peewee import BlobField, IntegerField, Model

from tarentry.database import db_proxy
from tarentry.schemas import TarEntry


def to_blob(text: str) -> bytes:
    """Text as the raw bytes it had in the header; surrogate escapes included."""
    return text.encode("utf-8", errors="surrogateescape")


def from_blob(raw) -> str:
    return bytes(raw).decode("utf-8", errors="surrogateescape")


class BaseModel(Model):
    class Meta:
        database = db_proxy


class EntryRecord(BaseModel):
    """One catalogued entry; every header field except the checksum.

    Text fields are stored as raw bytes so names that are not valid UTF-8
    survive the trip through SQLite.
    """

    name = cast(bytes, BlobField(primary_key=True))

    mode = cast(int, IntegerField())
    owner_id = cast(int, IntegerField(default=0))
    group_id = cast(int, IntegerField(default=0))
    size = cast(int, IntegerField(default=0))
    mod_time = cast(int, IntegerField(default=0))
    link_flag = cast(int, IntegerField())  # raw byte value
    link_name = cast(bytes, BlobField(default=b""))
    magic = cast(bytes, BlobField())
    owner_name = cast(bytes, BlobField(default=b""))
    group_name = cast(bytes, BlobField(default=b""))
    device_major = cast(int, IntegerField(default=0))
    device_minor = cast(int, IntegerField(default=0))

    @classmethod
    def from_entry(cls, entry: TarEntry) -> "EntryRecord":
        return cls(
            name=to_blob(entry.name),
            mode=entry.mode,
            owner_id=entry.owner_id,
            group_id=entry.group_id,
            size=entry.size,
            mod_time=entry.mod_time,
            link_flag=entry.link_flag[0],
            link_name=to_blob(entry.link_name),
            magic=to_blob(entry.magic),
            owner_name=to_blob(entry.owner_name),
            group_name=to_blob(entry.group_name),
            device_major=entry.device_major,
            device_minor=entry.device_minor,
        )

    def to_entry(self) -> TarEntry:
        """Rebuilds the entry. The file reference is never stored."""
        return TarEntry(
            name=from_blob(self.name),
            mode=self.mode,
            owner_id=self.owner_id,
            group_id=self.group_id,
            size=self.size,
            mod_time=self.mod_time,
            link_flag=bytes([self.link_flag]),
            link_name=from_blob(self.link_name),
            magic=from_blob(self.magic),
            owner_name=from_blob(self.owner_name),
            group_name=from_blob(self.group_name),
            device_major=self.device_major,
            device_minor=self.device_minor,
        )
