from pathlib import Path
from typing import Literal, Union

import peewee

from tarentry.constants import CATALOG_PRAGMAS, CATALOG_TIMEOUT

# Default binding for the models. Sessions never initialize it; every query
# runs inside DatabaseSession.bound() so several catalogs can be open at once.
db_proxy = peewee.Proxy()


class DatabaseSession:
    """Context manager for one catalog database. Encapsulates the initialization, creation of tables and their closure."""

    def __init__(self, db_path: Union[Union[str, Path], Literal[":memory:"]]):
        self.db_path = Path(db_path) if db_path != ":memory:" else db_path
        self.db = None

    def __enter__(self):
        if self.db is not None and not self.db.is_closed():
            return self.db

        if isinstance(self.db_path, Path):
            self.db_path.parent.mkdir(parents=True, exist_ok=True)

        self.db = peewee.SqliteDatabase(
            str(self.db_path),
            pragmas=CATALOG_PRAGMAS,
            timeout=CATALOG_TIMEOUT,
        )
        self.db.connect()

        with self.bound():
            self.db.create_tables(self._models(), safe=True)
        return self.db

    def __exit__(self, exc_type, exc_val, exc_tb):
        if self.db and not self.db.is_closed():
            self.db.close()

    @staticmethod
    def _models():
        from tarentry.models import EntryRecord

        return [EntryRecord]

    def bound(self):
        """Binds the models to this session's database for a block of queries."""
        if self.db is None or self.db.is_closed():
            raise RuntimeError(f"Catalog database is not open: {self.db_path}")
        return self.db.bind_ctx(self._models())

    def connect(self):
        return self.__enter__()

    def close(self):
        return self.__exit__(None, None, None)
