"""Seeder: apply pending seed files exactly once.

To apply seeds:

    >>> from seedkeeper import PostgresStorage, apply
    >>> apply(PostgresStorage(conn), "db/seeds", {"environment": "development"})

A run reconciles the ledger with the files on disk, loads every seed file
not yet applied, and applies each one together with its ledger row. Seeds
are not directional: once a filename is in the ledger it is never applied
again, whatever later happens to the file's content.
"""

import logging
import time
from collections.abc import Iterator
from contextlib import contextmanager
from functools import cached_property
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field

from seedkeeper.backends.base import Storage
from seedkeeper.exceptions import (
    InvalidPathError,
    NoSeederAvailableError,
    ReconciliationError,
)
from seedkeeper.ledger import DEFAULT_COLUMN, DEFAULT_TABLE, SeedLedger
from seedkeeper.loader import MINIMUM_TIMESTAMP, SeedLoader, SeedTuple, discover
from seedkeeper.registry import SeedRegistry

logger = logging.getLogger(__name__)


class SeederOptions(BaseModel):
    """Options recognized by the seeder."""

    table: str | None = Field(
        default=None, description="Ledger table name, optionally schema-qualified"
    )
    column: str | None = Field(default=None, description="Ledger column name")
    use_transactions: bool | None = Field(
        default=None,
        description="Wrap each seed in a transaction (None: ask the storage)",
    )
    allow_missing_seed_files: bool = Field(
        default=False, description="Tolerate ledger entries with no file on disk"
    )
    environment: str | None = Field(
        default=None, description="Active environment label for seed filtering"
    )


OptionsLike = SeederOptions | dict[str, Any] | None


def _coerce_options(options: OptionsLike) -> SeederOptions:
    if options is None:
        return SeederOptions()
    if isinstance(options, SeederOptions):
        return options
    return SeederOptions(**options)


class Seeder:
    """
    Base seeder: picks a concrete seeder for a directory and holds shared state.

    Construction fails fast (before any seed runs) on a missing directory,
    a malformed ledger table, or ledger entries whose files are gone.
    """

    DEFAULT_TABLE = DEFAULT_TABLE
    DEFAULT_COLUMN = DEFAULT_COLUMN

    @classmethod
    def apply(
        cls, storage: Storage, directory: str | Path, options: OptionsLike = None
    ) -> None:
        """Apply all pending seeds in directory."""
        seeder_class = cls.seeder_class(directory)
        seeder_class(storage, directory, options).run()

    @classmethod
    def seeder_class(cls, directory: str | Path) -> type["Seeder"]:
        """
        Return the seeder class able to handle the files in directory.

        Called on a subclass, returns that subclass unchanged.

        Raises:
            InvalidPathError: If directory does not exist
            NoSeederAvailableError: If no timestamped seed file is found
        """
        if cls is not Seeder:
            return cls

        directory = Path(directory)
        if not directory.is_dir():
            raise InvalidPathError(directory)

        for seed_file in discover(directory):
            if seed_file.version > MINIMUM_TIMESTAMP:
                return TimestampSeeder

        raise NoSeederAvailableError(directory, MINIMUM_TIMESTAMP)

    def __init__(
        self,
        storage: Storage,
        directory: str | Path,
        options: OptionsLike = None,
        registry: SeedRegistry | None = None,
    ):
        """
        Initialize seeder.

        Args:
            storage: Storage holding the ledger and seeded data
            directory: Directory containing seed files
            options: SeederOptions or equivalent dict
            registry: Registry to load seeds into (defaults to a new one
                for options.environment)

        Raises:
            InvalidPathError: If directory does not exist
            LedgerSchemaError: If the ledger table lacks the ledger column
        """
        directory = Path(directory)
        if not directory.is_dir():
            raise InvalidPathError(directory)

        self.storage = storage
        self.directory = directory
        self.options = _coerce_options(options)
        self.files = discover(directory)
        self.table = self.options.table or self.DEFAULT_TABLE
        self.column = self.options.column or self.DEFAULT_COLUMN
        if registry is None:
            registry = SeedRegistry(environment=self.options.environment)
        self.registry = registry
        self.loader = SeedLoader(self.registry)

        self.ledger = SeedLedger(storage, self.table, self.column)
        self.ledger.ensure_table()

    @property
    def uses_transactions(self) -> bool:
        if self.options.use_transactions is None:
            return self.storage.supports_transactional_ddl()
        return self.options.use_transactions

    @contextmanager
    def checked_transaction(self) -> Iterator[None]:
        """Run the enclosed block in a transaction if the policy says so."""
        if self.uses_transactions:
            with self.storage.transaction():
                yield
        else:
            yield

    def run(self) -> None:
        raise NotImplementedError


class TimestampSeeder(Seeder):
    """
    Seeder for timestamped seed files (``20240101120000_users.py``).

    Example:
        >>> seeder = TimestampSeeder(MemoryStorage(), "db/seeds", {"environment": "test"})
        >>> [f for _, f in seeder.pending_tuples]
        ['20240101120000_users.py']
        >>> seeder.run()
    """

    def __init__(
        self,
        storage: Storage,
        directory: str | Path,
        options: OptionsLike = None,
        registry: SeedRegistry | None = None,
    ):
        super().__init__(storage, directory, options, registry)
        self.applied_seeds = self.ledger.read_all()
        self.missing_seed_files = self._reconcile()
        # Ledger provisioning and reads are not part of any seed's unit
        self.storage.commit()

    def _reconcile(self) -> list[str]:
        on_disk = {f.key for f in self.files}
        missing = [name for name in self.applied_seeds if name not in on_disk]
        if missing and not self.options.allow_missing_seed_files:
            raise ReconciliationError(missing)
        if missing:
            logger.warning(
                f"Applied seed files not in file system: {', '.join(missing)}"
            )
        return missing

    @cached_property
    def pending_tuples(self) -> list[SeedTuple]:
        """Seeds on disk, not yet applied, and registered for this environment."""
        return self.loader.load_pending(self.files, set(self.applied_seeds))

    def run(self) -> None:
        """
        Apply each pending seed and record it in the ledger.

        With transactions, a seed body and its ledger row commit or roll back
        together. Without, a failing body may leave partial changes behind.
        The first error aborts the run; seeds applied before it stay applied.
        """
        for definition, filename in self.pending_tuples:
            started = time.perf_counter()
            logger.info(f"Begin applying seed {filename}")

            with self.checked_transaction():
                definition.apply(self.storage)
                self.ledger.record(filename)
            self.storage.commit()

            elapsed = time.perf_counter() - started
            logger.info(f"Finished applying seed {filename}, took {elapsed:0.6f} seconds")


def apply(storage: Storage, directory: str | Path, options: OptionsLike = None) -> None:
    """
    Apply all pending seeds in directory using the matching seeder.

    Args:
        storage: Storage holding the ledger and seeded data
        directory: Directory containing seed files
        options: SeederOptions or equivalent dict
    """
    Seeder.apply(storage, directory, options)
