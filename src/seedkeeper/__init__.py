"""
seedkeeper - One-time database seeds, applied exactly once.

Provides:
- Discovery of timestamped seed files (Python scripts, JSON, YAML)
- Environment-filtered seed registration
- A ledger table recording applied seeds
- Transactional application of each pending seed with its ledger row
"""

from seedkeeper.backends import MemoryStorage, PostgresStorage, Storage
from seedkeeper.exceptions import (
    InvalidPathError,
    LedgerSchemaError,
    NoSeederAvailableError,
    ReconciliationError,
    SeedFileError,
    SeedKeeperError,
)
from seedkeeper.ledger import SeedLedger
from seedkeeper.loader import SeedFile, SeedLoader, SeedTuple, discover
from seedkeeper.registry import SeedDefinition, SeedRegistry
from seedkeeper.seeder import Seeder, SeederOptions, TimestampSeeder, apply

__version__ = "0.1.0"

__all__ = [
    "InvalidPathError",
    "LedgerSchemaError",
    "MemoryStorage",
    "NoSeederAvailableError",
    "PostgresStorage",
    "ReconciliationError",
    "SeedDefinition",
    "SeedFile",
    "SeedFileError",
    "SeedKeeperError",
    "SeedLedger",
    "SeedLoader",
    "SeedRegistry",
    "SeedTuple",
    "Seeder",
    "SeederOptions",
    "Storage",
    "TimestampSeeder",
    "__version__",
    "apply",
    "discover",
]
