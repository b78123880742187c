from __future__ import annotations

from contextlib import contextmanager

import pytest
from typer.testing import CliRunner

from datastore_touch import main as cli
from datastore_touch.errors import FieldNotFoundError
from tests.fakes import FakeStore, make_records

runner = CliRunner()


@pytest.fixture(autouse=True)
def _quiet_logging(monkeypatch):
    monkeypatch.setattr(cli, "configure_logging", lambda **kwargs: None)


@pytest.fixture
def fake_store(monkeypatch):
    holder: dict[str, FakeStore] = {}

    def install(store: FakeStore) -> FakeStore:
        @contextmanager
        def _open_store(settings=None, schema=None):
            holder["schema"] = schema
            yield store

        monkeypatch.setattr(cli, "open_store", _open_store)
        holder["store"] = store
        return store

    install.holder = holder  # type: ignore[attr-defined]
    return install


def test_run_without_kind_prints_usage_and_exits_cleanly():
    result = runner.invoke(cli.app, ["run"])

    assert result.exit_code == 0
    assert "Usage" in result.output


def test_run_without_project_id_fails(monkeypatch):
    monkeypatch.delenv("DATASTORE_PROJECT_ID", raising=False)
    monkeypatch.chdir("/")

    result = runner.invoke(cli.app, ["run", "--kind", "Users"])

    assert result.exit_code == 1


def test_run_touches_every_record(fake_store):
    store = fake_store(FakeStore(make_records(3)))

    result = runner.invoke(
        cli.app, ["run", "--kind", "Users", "--workers", "2", "--emitProgressEvery", "1"]
    )

    assert result.exit_code == 0, result.output
    assert sorted(store.puts) == ["r1", "r2", "r3"]
    assert "Touch Summary" in result.output


def test_run_with_camel_case_aliases_tolerates_missing_field(fake_store):
    r1, r2 = make_records(2)
    store = fake_store(FakeStore([r1, FieldNotFoundError("Users", "legacy"), r2]))

    result = runner.invoke(
        cli.app,
        ["run", "--kind", "Users", "--allowAttributeDeletion", "--skipCount", "--workers", "1"],
    )

    assert result.exit_code == 0, result.output
    assert sorted(store.puts) == ["r1", "r2"]
    assert store.count_calls == 0


def test_run_exits_non_zero_on_missing_field_by_default(fake_store):
    r1, r2 = make_records(2)
    store = fake_store(FakeStore([r1, FieldNotFoundError("Users", "legacy"), r2]))

    result = runner.invoke(cli.app, ["run", "--kind", "Users", "--workers", "1"])

    assert result.exit_code == 1
    assert "r2" not in store.puts


def test_run_exits_non_zero_when_writes_keep_failing(monkeypatch, fake_store):
    monkeypatch.setenv("TOUCH_WRITE_ATTEMPTS", "1")
    fake_store(FakeStore(make_records(3), failing_keys=["r2"]))

    result = runner.invoke(cli.app, ["run", "--kind", "Users"])

    assert result.exit_code == 1


def test_run_passes_field_schema_to_store(fake_store):
    fake_store(FakeStore(make_records(1)))

    result = runner.invoke(
        cli.app, ["run", "--kind", "Users", "--field", "name", "--field", "index"]
    )

    assert result.exit_code == 0, result.output
    assert fake_store.holder["schema"] == ["name", "index"]


def test_info_shows_project(monkeypatch):
    monkeypatch.setenv("DATASTORE_PROJECT_ID", "demo-project")

    result = runner.invoke(cli.app, ["info"])

    assert result.exit_code == 0
    assert "project=demo-project" in result.output
