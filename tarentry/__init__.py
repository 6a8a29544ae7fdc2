import logging

from .catalog import EntryCatalog, EntryNotFoundError
from .factory import EntryFactory, EntryReadError
from .fields import (
    compute_checksum,
    decode_name,
    decode_octal,
    encode_checksum,
    encode_long_octal,
    encode_name,
    encode_octal,
)
from .header import (
    MalformedHeaderError,
    TarHeader,
    decode_header,
    encode_header,
    header_checksum,
    read_checksum,
)
from .paths import NETWARE, POSIX, WINDOWS, Platform, normalize_name
from .schemas import DiskEntryStats, TarEntry

__version__ = "0.1.0"

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "DiskEntryStats",
    "EntryCatalog",
    "EntryFactory",
    "EntryNotFoundError",
    "EntryReadError",
    "MalformedHeaderError",
    "NETWARE",
    "POSIX",
    "Platform",
    "TarEntry",
    "TarHeader",
    "WINDOWS",
    "compute_checksum",
    "decode_header",
    "decode_name",
    "decode_octal",
    "encode_checksum",
    "encode_header",
    "encode_long_octal",
    "encode_name",
    "encode_octal",
    "header_checksum",
    "normalize_name",
    "read_checksum",
]
