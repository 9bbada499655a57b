"""Applied-seed ledger: the table recording which seed files have run."""

import logging

from seedkeeper.backends.base import Storage
from seedkeeper.exceptions import LedgerSchemaError

logger = logging.getLogger(__name__)

DEFAULT_TABLE = "schema_seeds"
DEFAULT_COLUMN = "filename"


class SeedLedger:
    """
    Single-column table of applied seed filenames (lower-cased).

    Filenames are the primary key, so a concurrent double application
    surfaces as a unique violation from the storage.
    """

    def __init__(
        self,
        storage: Storage,
        table: str = DEFAULT_TABLE,
        column: str = DEFAULT_COLUMN,
    ):
        self.storage = storage
        self.table = table
        self.column = column

    def ensure_table(self) -> None:
        """
        Create the ledger table if absent.

        Raises:
            LedgerSchemaError: If the table exists without the ledger column
        """
        if not self.storage.table_exists(self.table):
            logger.info(f"Creating seed ledger table {self.table}")
            self.storage.create_table(self.table, self.column)
        elif self.column not in self.storage.columns_of(self.table):
            raise LedgerSchemaError(self.table, self.column)

    def read_all(self) -> list[str]:
        """Return applied filenames in ascending order."""
        return list(self.storage.select_ordered(self.table, self.column))

    def record(self, filename: str) -> None:
        """Record a seed file as applied."""
        self.storage.insert(self.table, self.column, filename.lower())
