"""Tests for SeedRegistry."""

from seedkeeper import SeedRegistry


def body(db):
    pass


class TestRegister:
    """Tests for SeedRegistry.register()."""

    def test_register_without_labels_always_registers(self) -> None:
        registry = SeedRegistry(environment="production")

        definition = registry.register((), body)

        assert definition is not None
        assert registry.all() == [definition]

    def test_register_matching_environment(self) -> None:
        registry = SeedRegistry(environment="test")

        definition = registry.register(["development", "test"], body)

        assert definition is not None
        assert definition.labels == ("development", "test")
        assert len(registry) == 1

    def test_register_other_environment_is_ignored(self) -> None:
        registry = SeedRegistry(environment="development")

        assert registry.register(["test"], body) is None
        assert registry.all() == []

    def test_register_labels_without_environment_is_ignored(self) -> None:
        registry = SeedRegistry()

        assert registry.register(["test"], body) is None
        assert len(registry) == 0

    def test_register_same_body_twice(self) -> None:
        """Registering the same callable again returns the first definition."""
        registry = SeedRegistry(environment="test")

        first = registry.register((), body)
        second = registry.register(("test",), body)

        assert second is first
        assert len(registry) == 1

    def test_distinct_bodies_keep_order(self) -> None:
        registry = SeedRegistry()

        def other(db):
            pass

        a = registry.register((), body)
        b = registry.register((), other)

        assert registry.all() == [a, b]
        assert registry.last() is b


class TestSeedDecorator:
    """Tests for SeedRegistry.seed()."""

    def test_bare_decorator(self) -> None:
        registry = SeedRegistry(environment="test")

        @registry.seed
        def run(db):
            pass

        assert callable(run)
        assert registry.all()[0].body is run
        assert registry.all()[0].name == "run"

    def test_decorator_with_labels(self) -> None:
        registry = SeedRegistry(environment="test")

        @registry.seed("test")
        def run(db):
            pass

        @registry.seed("production")
        def skipped(db):
            pass

        assert [d.body for d in registry.all()] == [run]

    def test_decorator_without_arguments(self) -> None:
        registry = SeedRegistry()

        @registry.seed()
        def run(db):
            pass

        assert len(registry) == 1

    def test_definition_apply_passes_storage(self) -> None:
        registry = SeedRegistry()
        calls = []

        @registry.seed
        def run(db):
            calls.append(db)

        registry.last().apply("storage")

        assert calls == ["storage"]


def test_clear() -> None:
    registry = SeedRegistry()
    registry.register((), body)

    registry.clear()

    assert registry.all() == []
    assert registry.last() is None
