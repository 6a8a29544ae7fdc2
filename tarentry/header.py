import logging
from typing import Tuple, Union

from .constants import (
    CHECKSUM_FIELD,
    DEVMAJOR_FIELD,
    DEVMINOR_FIELD,
    GID_FIELD,
    GNAME_FIELD,
    HEADER_END,
    LINKFLAG_OFFSET,
    LINKNAME_FIELD,
    MAGIC_FIELD,
    MODE_FIELD,
    MTIME_FIELD,
    NAME_FIELD,
    SIZE_FIELD,
    TAR_BLOCK_SIZE,
    UID_FIELD,
    UNAME_FIELD,
)
from .fields import (
    compute_checksum,
    decode_name,
    decode_octal,
    encode_checksum,
    encode_long_octal,
    encode_name,
    encode_octal,
)
from .schemas import TarEntry

logger = logging.getLogger(__name__)

FieldSpec = Tuple[int, int]


class MalformedHeaderError(ValueError):
    """Exception thrown when a header block cannot be parsed."""

    pass


class TarHeader:
    """
    Low-level builder and parser for the 512-byte entry header.

    Layout (offset, width):
    name(0,100) mode(100,8) uid(108,8) gid(116,8) size(124,12)
    mtime(136,12) chksum(148,8) linkflag(156,1) linkname(157,100)
    magic(257,8) uname(265,32) gname(297,32) devmajor(329,8)
    devminor(337,8), then zeros up to 512.

    Values too large for their field are truncated, never rejected.
    The checksum is not verified when parsing.
    """

    def __init__(self, buffer: Union[bytes, bytearray, None] = None):
        self.buffer = bytearray(buffer) if buffer is not None else bytearray(TAR_BLOCK_SIZE)

    def set_string(self, field: FieldSpec, value: str):
        offset, width = field
        self.buffer[offset : offset + width] = encode_name(value, width)

    def set_octal(self, field: FieldSpec, value: int):
        offset, width = field
        self.buffer[offset : offset + width] = encode_octal(value, width)

    def set_long_octal(self, field: FieldSpec, value: int):
        offset, width = field
        self.buffer[offset : offset + width] = encode_long_octal(value, width)

    def set_bytes(self, offset: int, value: bytes):
        """Writes raw bytes at a specific offset."""
        if offset + len(value) > TAR_BLOCK_SIZE:
            raise ValueError(f"Write overflow at offset {offset}")

        self.buffer[offset : offset + len(value)] = value

    def get_string(self, field: FieldSpec) -> str:
        offset, width = field
        return decode_name(self.buffer[offset : offset + width], width)

    def get_octal(self, field: FieldSpec) -> int:
        offset, width = field
        return decode_octal(self.buffer[offset : offset + width])

    def calculate_checksum(self) -> int:
        """
        Calculates and writes the header checksum.

        TAR rules:
        - The checksum field is treated as 8 ASCII spaces during the sum.
        - Every other byte, padding included, must already be in place.
        - The value is stored as 6 octal digits, a NULL byte and a space.
        """
        offset, width = CHECKSUM_FIELD
        self.buffer[offset : offset + width] = b" " * width

        total_sum = compute_checksum(self.buffer)
        self.buffer[offset : offset + width] = encode_checksum(total_sum, width)
        return total_sum

    def build(self, entry: TarEntry) -> bytes:
        """Writes every field of the entry and returns the finished block."""
        self.set_string(NAME_FIELD, entry.name)
        self.set_octal(MODE_FIELD, entry.mode)
        self.set_octal(UID_FIELD, entry.owner_id)
        self.set_octal(GID_FIELD, entry.group_id)
        self.set_long_octal(SIZE_FIELD, entry.size)
        self.set_long_octal(MTIME_FIELD, entry.mod_time)

        # Blank now, filled by calculate_checksum() once everything is written
        offset, width = CHECKSUM_FIELD
        self.set_bytes(offset, b" " * width)

        self.set_bytes(LINKFLAG_OFFSET, entry.link_flag)
        self.set_string(LINKNAME_FIELD, entry.link_name)
        self.set_string(MAGIC_FIELD, entry.magic)
        self.set_string(UNAME_FIELD, entry.owner_name)
        self.set_string(GNAME_FIELD, entry.group_name)
        self.set_octal(DEVMAJOR_FIELD, entry.device_major)
        self.set_octal(DEVMINOR_FIELD, entry.device_minor)

        self.buffer[HEADER_END:TAR_BLOCK_SIZE] = bytes(TAR_BLOCK_SIZE - HEADER_END)

        self.calculate_checksum()
        header = bytes(self.buffer)
        if len(header) != TAR_BLOCK_SIZE:
            raise ValueError("Header is not 512 bytes long.")
        return header

    def parse(self) -> TarEntry:
        """Reads every field back into a new entry with no file reference."""
        if len(self.buffer) < TAR_BLOCK_SIZE:
            raise MalformedHeaderError(
                f"Header block too short: {len(self.buffer)} < {TAR_BLOCK_SIZE} bytes"
            )

        return TarEntry(
            name=self.get_string(NAME_FIELD),
            mode=self.get_octal(MODE_FIELD),
            owner_id=self.get_octal(UID_FIELD),
            group_id=self.get_octal(GID_FIELD),
            size=self.get_octal(SIZE_FIELD),
            mod_time=self.get_octal(MTIME_FIELD),
            link_flag=bytes(self.buffer[LINKFLAG_OFFSET : LINKFLAG_OFFSET + 1]),
            link_name=self.get_string(LINKNAME_FIELD),
            magic=self.get_string(MAGIC_FIELD),
            owner_name=self.get_string(UNAME_FIELD),
            group_name=self.get_string(GNAME_FIELD),
            device_major=self.get_octal(DEVMAJOR_FIELD),
            device_minor=self.get_octal(DEVMINOR_FIELD),
        )


def encode_header(entry: TarEntry) -> bytes:
    """Serializes an entry into a fresh 512-byte header block."""
    header = TarHeader().build(entry)
    logger.debug(f"Encoded header for '{entry.name}'")
    return header


def decode_header(block: Union[bytes, bytearray]) -> TarEntry:
    """
    Parses the first 512 bytes of block into an entry.
    Raises MalformedHeaderError if fewer than 512 bytes are given.
    """
    entry = TarHeader(block[:TAR_BLOCK_SIZE]).parse()
    logger.debug(f"Decoded header for '{entry.name}'")
    return entry


def read_checksum(block: Union[bytes, bytearray]) -> int:
    """The checksum value stored in a header block."""
    offset, width = CHECKSUM_FIELD
    return decode_octal(block[offset : offset + width])


def header_checksum(block: Union[bytes, bytearray]) -> int:
    """Recomputes the checksum of a block with its checksum field blanked."""
    offset, width = CHECKSUM_FIELD
    blanked = bytearray(block[:TAR_BLOCK_SIZE])
    blanked[offset : offset + width] = b" " * width
    return compute_checksum(blanked)
