import logging
import os
from pathlib import Path
from typing import List

from tarentry.constants import (
    DEFAULT_DIR_MODE,
    DEFAULT_FILE_MODE,
    LF_DIR,
    LF_NORMAL,
    MAX_USERNAME_LEN,
)
from tarentry.paths import Platform, normalize_name
from tarentry.schemas import DiskEntryStats, TarEntry

try:
    import pwd
except ImportError:
    pwd = None


logger = logging.getLogger(__name__)


class EntryReadError(OSError):
    """Raised when the filesystem cannot list a referenced directory."""

    pass


class EntryFactory:
    """
    Exclusively responsible for reading the file system
    and building TarEntry objects from it.

    Only five facts are ever read: the path, whether it is a directory,
    its length, its modification time and the names of its children.
    """

    @staticmethod
    def inspect(path: Path) -> DiskEntryStats:
        """
        Single point of file inspection on the system.
        """
        try:
            is_dir = path.is_dir()
            st = path.stat()
        except FileNotFoundError:
            return DiskEntryStats(exists=False, path=str(path))

        return DiskEntryStats(
            exists=True,
            path=str(path),
            is_dir=is_dir,
            size=0 if is_dir else st.st_size,
            mtime=int(st.st_mtime),
        )

    @staticmethod
    def current_user_name() -> str:
        """Name of the user running the process, cut to the header limit."""
        uname = ""
        if pwd:
            uid = os.getuid()
            try:
                uname = pwd.getpwuid(uid).pw_name  # type: ignore
            except (KeyError, AttributeError):
                uname = str(uid)
        return uname[:MAX_USERNAME_LEN]

    @classmethod
    def create_entry(cls, source_path: Path, platform: Platform) -> TarEntry:
        """
        Analyzes a path and creates a TarEntry that keeps a reference to it.
        Raises FileNotFoundError if the path does not exist.
        """
        stats = cls.inspect(source_path)
        if not stats.exists:
            raise FileNotFoundError(f"Cannot build an entry, path missing: {source_path}")

        name = normalize_name(stats.path, False, platform)

        if stats.is_dir:
            if not name.endswith("/"):
                name += "/"
            mode, link_flag = DEFAULT_DIR_MODE, LF_DIR
        else:
            mode, link_flag = DEFAULT_FILE_MODE, LF_NORMAL

        logger.debug(f"Inspected {source_path}: dir={stats.is_dir} size={stats.size}")

        return TarEntry(
            name=name,
            mode=mode,
            link_flag=link_flag,
            size=stats.size,
            mod_time=stats.mtime,
            owner_name=cls.current_user_name(),
            file_ref=source_path,
        )

    @classmethod
    def list_children(cls, directory: Path, platform: Platform) -> List[TarEntry]:
        """
        One non-recursive listing; every child becomes an entry.

        A child that disappears between the listing and its inspection
        fails the whole call with the same EntryReadError.
        """
        try:
            names = os.listdir(directory)
            return [cls.create_entry(directory / name, platform) for name in names]
        except OSError as e:
            logger.error(f"Cannot list directory: {directory}")
            raise EntryReadError(f"Cannot list directory: {directory}") from e
