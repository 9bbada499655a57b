"""
Configuration management for seedkeeper.

Loads and validates configuration from seedkeeper.toml files using Pydantic.
Environment variables prefixed with SEEDKEEPER_ supply values the file leaves out
(nested with ``__``, e.g. SEEDKEEPER_SEEDS__ENVIRONMENT=test).
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Optional

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from seedkeeper.ledger import DEFAULT_COLUMN, DEFAULT_TABLE
from seedkeeper.seeder import SeederOptions

CONFIG_FILENAME = "seedkeeper.toml"


class DatabaseConfig(BaseModel):
    """Database connection configuration."""

    url: str = Field(
        default="postgresql://localhost/myproject_local",
        description="PostgreSQL connection URL",
    )


class SeedsConfig(BaseModel):
    """Seed file configuration."""

    directory: str = Field(default="db/seeds", description="Directory containing seed files")
    environment: str = Field(
        default="development", description="Active environment for seed filtering"
    )


class LedgerConfig(BaseModel):
    """Applied-seed ledger configuration."""

    table: str = Field(default=DEFAULT_TABLE, description="Ledger table (schema-qualified allowed)")
    column: str = Field(default=DEFAULT_COLUMN, description="Ledger filename column")


class ApplyConfig(BaseModel):
    """Seed application configuration."""

    use_transactions: Optional[bool] = Field(
        default=None,
        description="Wrap each seed in a transaction (unset: ask the database)",
    )
    allow_missing_seed_files: bool = Field(
        default=False, description="Tolerate applied seeds whose files were deleted"
    )


class Config(BaseSettings):
    """Main configuration for seedkeeper."""

    model_config = SettingsConfigDict(
        env_prefix="SEEDKEEPER_",
        env_nested_delimiter="__",
    )

    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    seeds: SeedsConfig = Field(default_factory=SeedsConfig)
    ledger: LedgerConfig = Field(default_factory=LedgerConfig)
    apply: ApplyConfig = Field(default_factory=ApplyConfig)

    @classmethod
    def from_toml(cls, path: Path | str) -> Config:
        """
        Load configuration from TOML file.

        Args:
            path: Path to seedkeeper.toml file

        Returns:
            Config instance

        Raises:
            FileNotFoundError: If config file doesn't exist
            ValueError: If config file is invalid
        """
        config_path = Path(path)
        if not config_path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")

        with open(config_path, "rb") as f:
            data = tomllib.load(f)

        return cls(**data)

    @classmethod
    def find_and_load(cls, start_dir: Optional[Path] = None) -> Config:
        """
        Find and load configuration from seedkeeper.toml.

        Searches for seedkeeper.toml starting from start_dir and walking up
        parent directories until found or reaching filesystem root.

        Args:
            start_dir: Directory to start search (defaults to current directory)

        Returns:
            Config instance

        Raises:
            FileNotFoundError: If no config file found
        """
        if start_dir is None:
            start_dir = Path.cwd()

        current = Path(start_dir).resolve()

        while True:
            config_path = current / CONFIG_FILENAME
            if config_path.exists():
                return cls.from_toml(config_path)

            parent = current.parent
            if parent == current:
                break
            current = parent

        raise FileNotFoundError(
            f"No {CONFIG_FILENAME} found in {start_dir} or parent directories. "
            f"Run 'seedkeeper init' to create one."
        )

    def to_toml(self, path: Path | str) -> None:
        """
        Write configuration to TOML file.

        Args:
            path: Path to write seedkeeper.toml
        """
        config_path = Path(path)

        if self.apply.use_transactions is None:
            use_transactions = "# use_transactions = true  # unset: ask the database"
        else:
            use_transactions = f"use_transactions = {str(self.apply.use_transactions).lower()}"

        toml_content = f"""# seedkeeper configuration

[database]
url = "{self.database.url}"

[seeds]
directory = "{self.seeds.directory}"
environment = "{self.seeds.environment}"

[ledger]
table = "{self.ledger.table}"
column = "{self.ledger.column}"

[apply]
{use_transactions}
allow_missing_seed_files = {str(self.apply.allow_missing_seed_files).lower()}
"""

        config_path.write_text(toml_content)

    def get_seed_dir(self) -> Path:
        """Get the seed directory as a Path object."""
        return Path(self.seeds.directory)

    def to_seeder_options(self) -> SeederOptions:
        """Build seeder options from this configuration."""
        return SeederOptions(
            table=self.ledger.table,
            column=self.ledger.column,
            use_transactions=self.apply.use_transactions,
            allow_missing_seed_files=self.apply.allow_missing_seed_files,
            environment=self.seeds.environment,
        )
