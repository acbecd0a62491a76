from pathlib import Path

import pytest

from localstore import LocalStorage


class FakeClock:
    def __init__(self, initial: int = 1_700_000_000_000):
        self._value = initial

    def now(self) -> int:
        return self._value

    def advance(self, ms: int) -> None:
        self._value += ms


@pytest.fixture
def clock(monkeypatch: pytest.MonkeyPatch) -> FakeClock:
    fake = FakeClock()
    monkeypatch.setattr("localstore.services.ttl.now_ms", fake.now)
    return fake


@pytest.fixture
def storage_dir(tmp_path: Path) -> Path:
    return tmp_path / "storage"


@pytest.fixture
def make_storage(storage_dir: Path):
    def _make(**overrides) -> LocalStorage:
        options = {"directory": storage_dir, "sweep_interval": None}
        options.update(overrides)
        return LocalStorage(**options)

    return _make
