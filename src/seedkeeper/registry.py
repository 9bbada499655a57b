"""Seed registry for seed definitions declared by seed files."""

from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

SeedBody = Callable[[Any], Any]


@dataclass(eq=False)
class SeedDefinition:
    """
    A registered seed: a single ``run`` action taking the storage.

    Definitions compare by identity; the loader pairs each one with the
    filename that registered it.
    """

    body: SeedBody
    labels: tuple[str, ...] = ()
    source: Path | None = None

    @property
    def name(self) -> str:
        return getattr(self.body, "__name__", repr(self.body))

    def apply(self, storage: Any) -> None:
        """Run the seed body against storage."""
        self.body(storage)


@dataclass
class SeedRegistry:
    """
    Ordered registry of seed definitions for one environment.

    A definition declaring environment labels is registered only when the
    registry's environment is among them; a definition declaring none is
    always registered.

    Example:
        >>> registry = SeedRegistry(environment="test")
        >>> @registry.seed("test")
        ... def run(db):
        ...     db.insert_rows("tb_user", [{"name": "Alice"}])
        >>> len(registry)
        1
    """

    environment: str | None = None
    _definitions: list[SeedDefinition] = field(default_factory=list, repr=False)

    def register(
        self,
        labels: Iterable[Any],
        body: SeedBody,
        source: Path | None = None,
    ) -> SeedDefinition | None:
        """
        Register a seed body for the given environment labels.

        Args:
            labels: Environment labels the seed applies to (empty for all)
            body: Callable invoked with the storage when the seed is applied
            source: File the definition was loaded from

        Returns:
            The registered definition, or None if the environment does not match
        """
        labels = tuple(str(label) for label in labels)
        if labels and self.environment not in labels:
            return None

        for existing in self._definitions:
            if existing.body is body:
                return existing

        definition = SeedDefinition(body=body, labels=labels, source=source)
        self._definitions.append(definition)
        return definition

    def seed(self, *labels: Any, source: Path | None = None):
        """
        Decorator form of register(), injected into seed scripts as ``seed``.

        Accepts ``@seed``, ``@seed()`` and ``@seed("test", "development")``.
        """
        if len(labels) == 1 and callable(labels[0]):
            self.register((), labels[0], source=source)
            return labels[0]

        def decorator(func: SeedBody) -> SeedBody:
            self.register(labels, func, source=source)
            return func

        return decorator

    def all(self) -> list[SeedDefinition]:
        """Return registered definitions in registration order."""
        return list(self._definitions)

    def last(self) -> SeedDefinition | None:
        return self._definitions[-1] if self._definitions else None

    def clear(self) -> None:
        """Clear all registered definitions."""
        self._definitions.clear()

    def __len__(self) -> int:
        return len(self._definitions)
