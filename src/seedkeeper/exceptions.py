"""Custom exceptions with helpful error messages."""

from pathlib import Path


class SeedKeeperError(Exception):
    """Base exception for seedkeeper errors."""

    pass


class InvalidPathError(SeedKeeperError):
    """Seed directory does not exist."""

    def __init__(self, directory: str | Path):
        self.directory = Path(directory)
        super().__init__(
            f"Must supply a valid seed path: '{directory}' is not a directory.\n\n"
            f"Suggestions:\n"
            f"1. Check the directory spelling\n"
            f"2. Create it: mkdir -p {directory}\n"
            f"3. Set [seeds] directory in seedkeeper.toml"
        )


class LedgerSchemaError(SeedKeeperError):
    """Ledger table exists but lacks the expected column."""

    def __init__(self, table: str, column: str):
        self.table = table
        self.column = column
        super().__init__(
            f"Seeder table '{table}' does not contain column '{column}'.\n\n"
            f"Suggestions:\n"
            f"1. Point the seeder at another table: [ledger] table = \"...\"\n"
            f"2. Use the existing column name: [ledger] column = \"...\"\n"
            f"3. Drop the table if it is not a seed ledger"
        )


class ReconciliationError(SeedKeeperError):
    """Ledger references seed files that are no longer on disk."""

    def __init__(self, missing: list[str]):
        self.missing = list(missing)
        super().__init__(
            f"Applied seed files not in file system: {', '.join(self.missing)}\n\n"
            f"Suggestions:\n"
            f"1. Restore the files from version control\n"
            f"2. Pass allow_missing_seed_files=True (--allow-missing-seed-files)"
        )


class NoSeederAvailableError(SeedKeeperError):
    """Directory holds no seed files a seeder can handle."""

    def __init__(self, directory: str | Path, minimum: int):
        self.directory = Path(directory)
        super().__init__(
            f"Seeder not available for files in '{directory}'.\n\n"
            f"Suggestions:\n"
            f"1. Name seed files <timestamp>_<name>.py, e.g. 20240101120000_users.py\n"
            f"2. Timestamps must be greater than {minimum}\n"
            f"3. Supported extensions: .py, .json, .yaml, .yml"
        )


class SeedFileError(SeedKeeperError):
    """Structured seed file could not be interpreted."""

    def __init__(self, path: str | Path, reason: str):
        self.path = Path(path)
        super().__init__(
            f"Invalid seed file '{self.path.name}': {reason}\n\n"
            f"Expected a mapping of table name to a list of rows, e.g.\n"
            f"  environments: [test]\n"
            f"  tb_user:\n"
            f"    - name: Alice"
        )


class DuplicateKeyError(SeedKeeperError):
    """Primary key value already present in table."""

    def __init__(self, table: str, column: str, value: object):
        self.table = table
        self.column = column
        self.value = value
        super().__init__(
            f"Duplicate key value violates primary key on '{table}': "
            f"{column}={value!r} already exists"
        )
