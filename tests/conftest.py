# =============================================================================
# tests/conftest.py - Pytest Configuration
# =============================================================================
# Every test gets its own site layout under tmp_path (config, templates,
# stylesheet, data and images directories) so nothing touches the
# working directory.
# =============================================================================

import json
import shutil
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from tree_catalog.config import Settings
from tree_catalog.main import create_app

REPO_TEMPLATES = Path(__file__).resolve().parents[1] / "templates"

STYLESHEET = b"body { color: #2e7d32; }\n"


@pytest.fixture
def stylesheet():
    return STYLESHEET


@pytest.fixture
def site_dir(tmp_path):
    """A complete on-disk site using the shipped templates."""
    shutil.copytree(REPO_TEMPLATES, tmp_path / "templates")
    (tmp_path / "public" / "JSON").mkdir(parents=True)
    (tmp_path / "public" / "images").mkdir(parents=True)
    (tmp_path / "public" / "catalog.css").write_bytes(STYLESHEET)
    (tmp_path / "config.json").write_text(json.dumps({"title": "Test Trees"}))
    return tmp_path


@pytest.fixture
def make_settings(site_dir):
    def _make(**overrides):
        values = {
            "DATA_DIR": site_dir / "public" / "JSON",
            "IMAGES_DIR": site_dir / "public" / "images",
            "TEMPLATES_DIR": site_dir / "templates",
            "STYLESHEET_PATH": site_dir / "public" / "catalog.css",
            "CONFIG_FILE": site_dir / "config.json",
        }
        values.update(overrides)
        return Settings(**values)

    return _make


@pytest.fixture
def settings(make_settings):
    return make_settings()


@pytest.fixture
def add_entry(settings):
    """Write an entry JSON file (and its image) before the app starts."""

    def _add(entry_id, name="Maple", description="Red leaves in autumn", image=b"img"):
        filename = f"{entry_id}.jpg"
        (settings.IMAGES_DIR / filename).write_bytes(image)
        doc = {"imagePath": "/" + filename, "name": name, "description": description}
        (settings.DATA_DIR / f"{entry_id}.json").write_text(json.dumps(doc))
        return doc

    return _add


@pytest.fixture
def app(settings):
    return create_app(settings)


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client
