"""Tests for the seedkeeper command line."""

from contextlib import contextmanager

import pytest
from click.testing import CliRunner

import seedkeeper.cli as cli_module
from seedkeeper import MemoryStorage
from seedkeeper.cli import cli
from seedkeeper.config import Config

USER_SEED = """
@seed("test")
def run(db):
    db.insert_rows("tb_user", [{"name": "alice"}])
"""


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture
def memory_db(monkeypatch, storage):
    """Route the CLI's database connection to in-memory storage."""

    @contextmanager
    def fake_connect(*args, **kwargs):
        yield None

    monkeypatch.setattr(cli_module.psycopg, "connect", fake_connect)
    monkeypatch.setattr(cli_module, "PostgresStorage", lambda conn: storage)
    return storage


@pytest.fixture
def config_file(tmp_path, seed_dir):
    config = Config()
    config.seeds.directory = str(seed_dir)
    config.seeds.environment = "test"
    path = tmp_path / "seedkeeper.toml"
    config.to_toml(path)
    return path


class TestInit:
    """Tests for `seedkeeper init`."""

    def test_writes_config(self, runner, tmp_path) -> None:
        path = tmp_path / "seedkeeper.toml"

        result = runner.invoke(cli, ["init", str(path)])

        assert result.exit_code == 0
        assert "Wrote" in result.output
        assert Config.from_toml(path).ledger.table == "schema_seeds"

    def test_refuses_to_overwrite(self, runner, tmp_path) -> None:
        path = tmp_path / "seedkeeper.toml"
        path.write_text("# mine\n")

        result = runner.invoke(cli, ["init", str(path)])

        assert result.exit_code == 1
        assert path.read_text() == "# mine\n"

    def test_force_overwrites(self, runner, tmp_path) -> None:
        path = tmp_path / "seedkeeper.toml"
        path.write_text("# mine\n")

        result = runner.invoke(cli, ["init", str(path), "--force"])

        assert result.exit_code == 0
        assert "[ledger]" in path.read_text()


class TestApply:
    """Tests for `seedkeeper apply`."""

    def test_applies_pending_seeds(self, runner, memory_db, config_file, write_seed) -> None:
        write_seed("20240101_users.py", USER_SEED)

        result = runner.invoke(cli, ["--config", str(config_file), "apply"])

        assert result.exit_code == 0, result.output
        assert "Applied 1 seed(s) for environment 'test'" in result.output
        assert memory_db.rows("tb_user") == [{"name": "alice"}]

        result = runner.invoke(cli, ["--config", str(config_file), "apply"])

        assert "Applied 0 seed(s)" in result.output
        assert memory_db.rows("tb_user") == [{"name": "alice"}]

    def test_env_option(self, runner, memory_db, config_file, write_seed) -> None:
        write_seed("20240101_users.py", USER_SEED)

        result = runner.invoke(
            cli, ["--config", str(config_file), "apply", "--env", "production"]
        )

        assert result.exit_code == 0
        assert "Applied 0 seed(s) for environment 'production'" in result.output

    def test_missing_seed_file(self, runner, memory_db, config_file, write_seed) -> None:
        write_seed("20240101_users.py", USER_SEED)
        memory_db.create_table("schema_seeds", "filename")
        memory_db.insert("schema_seeds", "filename", "20230101_gone.py")

        result = runner.invoke(cli, ["--config", str(config_file), "apply"])

        assert result.exit_code == 1
        assert "20230101_gone.py" in result.output

        result = runner.invoke(
            cli,
            ["--config", str(config_file), "apply", "--allow-missing-seed-files"],
        )

        assert result.exit_code == 0
        assert "Applied 1 seed(s)" in result.output

    def test_no_seed_files(self, runner, memory_db, config_file) -> None:
        result = runner.invoke(cli, ["--config", str(config_file), "apply"])

        assert result.exit_code == 1
        assert "Seeder not available" in result.output


def test_status(runner, memory_db, config_file, write_seed) -> None:
    write_seed("20240101_users.py", USER_SEED)
    write_seed("20240102_more.py", USER_SEED.replace("alice", "bob"))
    memory_db.create_table("schema_seeds", "filename")
    memory_db.insert("schema_seeds", "filename", "20240101_users.py")
    memory_db.insert("schema_seeds", "filename", "20230101_gone.py")

    result = runner.invoke(cli, ["--config", str(config_file), "status"])

    assert result.exit_code == 0, result.output
    assert "Applied (2):" in result.output
    assert "20230101_gone.py (missing)" in result.output
    assert "Pending (1):" in result.output
    assert "20240102_more.py" in result.output
    assert memory_db.rows("tb_user") == []
