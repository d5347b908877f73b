# Ensure the repository root is on sys.path so `print_agent` can be imported in tests.

import sys
from pathlib import Path

import pytest


def _ensure_repo_root_on_syspath() -> None:
    # This file lives at: <repo_root>/tests/conftest.py
    here = Path(__file__).resolve()
    repo_root = here.parent.parent
    repo_str = str(repo_root)
    if repo_str not in sys.path:
        sys.path.insert(0, repo_str)


_ensure_repo_root_on_syspath()


@pytest.fixture
def store_path(tmp_path, monkeypatch):
    path = tmp_path / "store.json"
    monkeypatch.setenv("PRINTAGENT_STORE_PATH", str(path))
    return path


@pytest.fixture
def app(store_path, monkeypatch):
    from print_agent import create_app
    import print_agent.web.api as api
    import print_agent.web.health as health

    # Never shell out to lpstat from tests
    monkeypatch.setattr(api, "list_printers", lambda: ["Kitchen-Printer", "Bar"])
    monkeypatch.setattr(health, "list_printers", lambda: ["Kitchen-Printer", "Bar"])

    app = create_app(store_path=str(store_path))
    app.config.update(TESTING=True)
    return app


@pytest.fixture
def client(app):
    return app.test_client()
