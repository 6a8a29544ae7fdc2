import logging
from pathlib import Path
from typing import Iterable, List, Union

import peewee

from .database import DatabaseSession
from .header import decode_header, encode_header
from .models import EntryRecord, to_blob
from .schemas import TarEntry

logger = logging.getLogger(__name__)


class EntryNotFoundError(KeyError):
    """Exception thrown when a name is not in the catalog."""

    pass


class EntryCatalog:
    """
    A persistent index of entry metadata, keyed by entry name.

    Entries are stored field by field; the file reference of an entry
    built from disk is not kept.
    """

    def __init__(self, db_path: Union[str, Path] = ":memory:"):
        self.path = db_path
        self.session = DatabaseSession(db_path)

    def add(self, entry: TarEntry) -> TarEntry:
        """Stores an entry, replacing any previous one with the same name."""
        record = EntryRecord.from_entry(entry)
        with self.session.bound():
            EntryRecord.insert(**record.__data__).on_conflict_replace().execute()
        logger.debug(f"Catalogued '{entry.name}'")
        return entry

    def add_header(self, block: bytes) -> TarEntry:
        """Decodes a header block and stores the resulting entry."""
        return self.add(decode_header(block))

    def get(self, name: str) -> TarEntry:
        try:
            with self.session.bound():
                record = EntryRecord.get(EntryRecord.name == to_blob(name))
        except EntryRecord.DoesNotExist:  # type: ignore
            raise EntryNotFoundError(name)
        return record.to_entry()

    def header_of(self, name: str) -> bytes:
        return encode_header(self.get(name))

    def remove(self, name: str) -> bool:
        with self.session.bound():
            deleted = (
                EntryRecord.delete().where(EntryRecord.name == to_blob(name)).execute()
            )
        return deleted > 0

    def entries(self) -> List[TarEntry]:
        """Returns all entries sorted by name."""
        with self.session.bound():
            query: Iterable[EntryRecord] = EntryRecord.select().order_by(EntryRecord.name)
            return [record.to_entry() for record in query]

    def descendants_of(self, entry: TarEntry) -> List[TarEntry]:
        """
        Entries whose name starts with the given entry's name, the
        entry itself included. Same literal prefix rule as
        TarEntry.is_descendant, compared on the stored bytes.
        """
        prefix = to_blob(entry.name)
        with self.session.bound():
            query: Iterable[EntryRecord] = (
                EntryRecord.select()
                .where(peewee.fn.substr(EntryRecord.name, 1, len(prefix)) == prefix)
                .order_by(EntryRecord.name)
            )
            return [record.to_entry() for record in query]

    def __len__(self) -> int:
        with self.session.bound():
            return EntryRecord.select().count()

    def open(self) -> "EntryCatalog":
        logger.info(f"Opening entry catalog: {self.path}")
        self.session.connect()
        return self

    def close(self):
        """Close the connection to the catalog database."""
        self.session.close()

    def __enter__(self):
        return self.open()

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
