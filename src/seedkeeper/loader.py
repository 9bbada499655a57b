"""Seed file discovery and loading.

Seed files live in a single directory and are named
``<numeric-prefix>_<name>.<ext>``:

- ``.py`` scripts declare a seed with the injected ``seed`` decorator
- ``.json`` / ``.yaml`` / ``.yml`` files declare rows to insert per table

Files are loaded strictly in order, so the definition most recently
registered while loading a file is attributed to that file.
"""

import json
import logging
import re
import runpy
from dataclasses import dataclass
from functools import partial
from pathlib import Path
from typing import Any, NamedTuple

from seedkeeper.exceptions import SeedFileError
from seedkeeper.registry import SeedDefinition, SeedRegistry

logger = logging.getLogger(__name__)

SEED_FILE_PATTERN = re.compile(r"\A(\d+)_.+\.(py|json|ya?ml)\Z", re.IGNORECASE)
SEED_SPLITTER = "_"
MINIMUM_TIMESTAMP = 20000101

# Reserved key in structured seed files
ENVIRONMENTS_KEY = "environments"


@dataclass(frozen=True)
class SeedFile:
    """A seed file found on disk."""

    path: Path
    name: str
    version: int

    @property
    def key(self) -> str:
        """Case-normalized basename, as stored in the ledger."""
        return self.name.lower()

    @property
    def extension(self) -> str:
        return self.path.suffix.lower()

    @classmethod
    def from_path(cls, path: Path) -> "SeedFile | None":
        """Build a SeedFile if the basename matches the naming convention."""
        match = SEED_FILE_PATTERN.match(path.name)
        if not match:
            return None
        return cls(path=path.resolve(), name=path.name, version=int(match.group(1)))


class SeedTuple(NamedTuple):
    """A pending (definition, filename) pair."""

    definition: SeedDefinition
    filename: str


def seed_version_from_file(filename: str) -> int:
    """Extract the numeric prefix from a seed filename."""
    return int(filename.split(SEED_SPLITTER, 1)[0])


def discover(directory: str | Path) -> list[SeedFile]:
    """
    Find seed files in directory, sorted by numeric prefix then basename.

    Args:
        directory: Directory containing seed files

    Returns:
        Sorted list of seed files

    Raises:
        NotADirectoryError: If directory is not a directory
    """
    directory = Path(directory)
    if not directory.is_dir():
        raise NotADirectoryError(f"Not a seed directory: {directory}")

    files = []
    for entry in directory.iterdir():
        if not entry.is_file():
            continue
        seed_file = SeedFile.from_path(entry)
        if seed_file is not None:
            files.append(seed_file)

    return sorted(files, key=lambda f: (f.version, f.name))


class SeedLoader:
    """Load seed files into a registry and pair definitions with filenames."""

    def __init__(self, registry: SeedRegistry):
        self.registry = registry

    def load_file(self, seed_file: SeedFile) -> None:
        """
        Load a seed file, registering zero or more definitions.

        Args:
            seed_file: File to load

        Raises:
            SeedFileError: If a structured seed file is malformed
        """
        if seed_file.extension == ".py":
            self._load_script(seed_file)
        else:
            self._load_data(seed_file)

    def load_pending(
        self,
        files: list[SeedFile],
        already_applied: set[str],
    ) -> list[SeedTuple]:
        """
        Load every file not yet applied and collect pending seed tuples.

        The registry is cleared first. Files registering no definition
        (environment mismatch, empty file) are skipped.

        Args:
            files: Discovered seed files, in application order
            already_applied: Case-normalized basenames recorded in the ledger

        Returns:
            Ordered list of (definition, filename) tuples
        """
        self.registry.clear()
        tuples: list[SeedTuple] = []

        for seed_file in files:
            if seed_file.key in already_applied:
                continue

            before = len(self.registry)
            self.load_file(seed_file)
            if len(self.registry) == before:
                logger.debug(f"Seed file {seed_file.name} registered no seed, skipping")
                continue

            pending = SeedTuple(self.registry.last(), seed_file.name)
            if pending not in tuples:
                tuples.append(pending)

        return tuples

    def _load_script(self, seed_file: SeedFile) -> None:
        runpy.run_path(
            str(seed_file.path),
            init_globals={"seed": partial(self.registry.seed, source=seed_file.path)},
            run_name=f"seedkeeper.seeds.{seed_file.path.stem}",
        )

    def _load_data(self, seed_file: SeedFile) -> None:
        content = seed_file.path.read_text()
        if seed_file.extension == ".json":
            try:
                data = json.loads(content) if content.strip() else None
            except json.JSONDecodeError as e:
                raise SeedFileError(seed_file.path, f"invalid JSON ({e})") from e
        else:
            import yaml

            try:
                data = yaml.safe_load(content)
            except yaml.YAMLError as e:
                raise SeedFileError(seed_file.path, f"invalid YAML ({e})") from e

        if data is None:
            return

        labels, tables = parse_data_seed(seed_file.path, data)
        self.registry.register(labels, DataSeed(tables), source=seed_file.path)


def parse_data_seed(
    path: Path, data: Any
) -> tuple[list[str], dict[str, list[dict[str, Any]]]]:
    """
    Split structured seed content into environment labels and table rows.

    Args:
        path: Source file (for error messages)
        data: Parsed JSON/YAML document

    Returns:
        (labels, {table: rows})

    Raises:
        SeedFileError: If the document does not have the expected shape
    """
    if not isinstance(data, dict):
        raise SeedFileError(path, "top level must be a mapping")

    labels = data.get(ENVIRONMENTS_KEY) or []
    if isinstance(labels, str):
        labels = [labels]
    if not isinstance(labels, list):
        raise SeedFileError(path, f"'{ENVIRONMENTS_KEY}' must be a string or a list")

    tables = {}
    for table, rows in data.items():
        if table == ENVIRONMENTS_KEY:
            continue
        if not isinstance(rows, list) or not all(isinstance(r, dict) for r in rows):
            raise SeedFileError(path, f"table '{table}' must map to a list of rows")
        tables[str(table)] = rows

    return [str(label) for label in labels], tables


class DataSeed:
    """Seed body inserting rows declared in a structured seed file."""

    def __init__(self, tables: dict[str, list[dict[str, Any]]]):
        self.tables = tables
        self.__name__ = "data_seed"

    def __call__(self, storage: Any) -> None:
        for table, rows in self.tables.items():
            if rows:
                storage.insert_rows(table, rows)
