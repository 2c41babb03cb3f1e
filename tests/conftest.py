from pathlib import Path

import pytest

from tests.infrastructure import create_basic_vault


@pytest.fixture
def vault_dir(tmp_path: Path) -> Path:
    """Basic vault on disk (see vault_builders.create_basic_vault)."""
    return create_basic_vault(tmp_path / "vault")


@pytest.fixture(autouse=True)
def _no_forced_debug(monkeypatch):
    # EMBEX_DEBUG changes logging of CLI runs
    monkeypatch.delenv("EMBEX_DEBUG", raising=False)
