TAR_BLOCK_SIZE = 512

# Header layout: (offset, width)
NAME_FIELD = (0, 100)
MODE_FIELD = (100, 8)
UID_FIELD = (108, 8)
GID_FIELD = (116, 8)
SIZE_FIELD = (124, 12)
MTIME_FIELD = (136, 12)
CHECKSUM_FIELD = (148, 8)
LINKFLAG_OFFSET = 156
LINKNAME_FIELD = (157, 100)
MAGIC_FIELD = (257, 8)
UNAME_FIELD = (265, 32)
GNAME_FIELD = (297, 32)
DEVMAJOR_FIELD = (329, 8)
DEVMINOR_FIELD = (337, 8)
HEADER_END = 345  # zero padding runs from here to TAR_BLOCK_SIZE

# Link flags
LF_OLDNORM = b"\0"
LF_NORMAL = b"0"
LF_LINK = b"1"
LF_SYMLINK = b"2"
LF_CHR = b"3"
LF_BLK = b"4"
LF_DIR = b"5"
LF_FIFO = b"6"
LF_CONTIG = b"7"
LF_GNUTYPE_LONGNAME = b"L"

TMAGIC = "ustar"
GNU_TMAGIC = "ustar  "
GNU_LONGLINK = "././@LongLink"

DEFAULT_DIR_MODE = 0o40755
DEFAULT_FILE_MODE = 0o100644

MAX_USERNAME_LEN = 31
MILLIS_PER_SECOND = 1000

CATALOG_PRAGMAS = {"journal_mode": "wal", "cache_size": -1024 * 64}
CATALOG_TIMEOUT = 10
