import os
from pathlib import Path

import pytest

from localstore import ConfigurationError, LocalStorage, StorageSettings
from localstore.constants import DEFAULT_SWEEP_INTERVAL_MS, DEFAULT_TTL_MS


def test_defaults(monkeypatch: pytest.MonkeyPatch, tmp_path: Path):
    monkeypatch.chdir(tmp_path)
    settings = StorageSettings()

    assert settings.directory == tmp_path / ".localstore" / "storage"
    assert settings.encoding == "utf-8"
    assert settings.ttl_default is None
    assert settings.sweep_interval == DEFAULT_SWEEP_INTERVAL_MS
    assert settings.forgive_parse_errors is False
    assert settings.logging is False


def test_relative_directory_resolves_against_cwd_at_configuration_time(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
):
    first = tmp_path / "first"
    first.mkdir()
    monkeypatch.chdir(first)
    settings = StorageSettings(directory="data/../store")

    monkeypatch.chdir(tmp_path)
    assert settings.directory == first / "store"
    assert settings.directory.is_absolute()


@pytest.mark.parametrize("value,expected", [
    (None, None),
    (False, None),
    (0, None),
    ("false", None),
    (5000, 5000.0),
    ("250", 250.0),
    (True, float(DEFAULT_TTL_MS)),
    (-10, float(DEFAULT_TTL_MS)),
    ("soon", float(DEFAULT_TTL_MS)),
])
def test_ttl_default_normalization(value, expected):
    assert StorageSettings(ttl_default=value).ttl_default == expected


def test_falsy_sweep_interval_disables_sweeper():
    assert StorageSettings(sweep_interval=0).sweep_interval is None
    assert StorageSettings(sweep_interval=False).sweep_interval is None


def test_environment_variables_are_read(monkeypatch: pytest.MonkeyPatch, tmp_path: Path):
    monkeypatch.setenv("LOCALSTORE_DIRECTORY", str(tmp_path / "env-store"))
    monkeypatch.setenv("LOCALSTORE_TTL_DEFAULT", "60000")
    monkeypatch.setenv("LOCALSTORE_SWEEP_INTERVAL", "0")
    monkeypatch.setenv("LOCALSTORE_FORGIVE_PARSE_ERRORS", "true")

    settings = StorageSettings()

    assert settings.directory == tmp_path / "env-store"
    assert settings.ttl_default == 60000.0
    assert settings.sweep_interval is None
    assert settings.forgive_parse_errors is True


def test_callable_logging_option_is_kept():
    events = []
    settings = StorageSettings(logging=lambda message, **context: events.append(message))
    assert callable(settings.logging)


@pytest.mark.parametrize("overrides", [
    {"encoding": "not-a-codec"},
    {"sweep_interval": -5},
    {"directory": ""},
    {"unknown_option": 1},
])
def test_invalid_settings_raise_configuration_error(tmp_path: Path, overrides):
    with pytest.raises(ConfigurationError):
        LocalStorage(**{"directory": tmp_path, **overrides})


def test_directory_occupied_by_a_file_is_rejected(tmp_path: Path):
    occupied = tmp_path / "occupied"
    occupied.write_text("")

    with pytest.raises(ConfigurationError):
        LocalStorage(directory=occupied, sweep_interval=None)


def test_unusable_codec_is_rejected(tmp_path: Path):
    with pytest.raises(ConfigurationError):
        LocalStorage(directory=tmp_path, codec=object())


def test_set_options_merges_onto_current_settings(tmp_path: Path):
    storage = LocalStorage(directory=tmp_path, ttl_default=1000, sweep_interval=None)
    storage.set_options(forgive_parse_errors=True)

    assert storage.settings.ttl_default == 1000.0
    assert storage.settings.directory == tmp_path
    assert storage.settings.forgive_parse_errors is True


def test_explicit_settings_replace_configuration(tmp_path: Path):
    storage = LocalStorage(directory=tmp_path, ttl_default=1000, sweep_interval=None)
    replacement = StorageSettings(directory=tmp_path / "other", sweep_interval=None)
    storage.set_options(replacement)

    assert storage.settings is replacement
    assert storage.settings.ttl_default is None
    assert str(storage.store.directory) == os.fspath(tmp_path / "other")
