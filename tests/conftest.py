from __future__ import annotations

import importlib
import sys
from pathlib import Path
from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient


ADMIN_EMAIL = "admin@example.com"
ADMIN_PASSWORD = "admin1234"


def _reload_package(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> SimpleNamespace:
    data_dir = tmp_path / "data"
    data_dir.mkdir(parents=True, exist_ok=True)

    monkeypatch.setenv("APP_NAME", "Test APK Store")
    monkeypatch.setenv("APP_SECRET_KEY", "test-secret-key")
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{(data_dir / 'store.db').as_posix()}")
    monkeypatch.setenv("AUTO_BOOTSTRAP_ADMIN", "true")
    monkeypatch.setenv("ADMIN_EMAIL", ADMIN_EMAIL)
    monkeypatch.setenv("ADMIN_USERNAME", "admin")
    monkeypatch.setenv("ADMIN_PASSWORD", ADMIN_PASSWORD)

    for name in list(sys.modules.keys()):
        if name == "apkstore" or name.startswith("apkstore."):
            del sys.modules[name]

    return SimpleNamespace(
        main=importlib.import_module("apkstore.main"),
        db=importlib.import_module("apkstore.db"),
        models=importlib.import_module("apkstore.models"),
        catalog=importlib.import_module("apkstore.catalog"),
        reviews=importlib.import_module("apkstore.reviews"),
        dashboard=importlib.import_module("apkstore.dashboard"),
        auth=importlib.import_module("apkstore.auth"),
        errors=importlib.import_module("apkstore.errors"),
    )


@pytest.fixture
def app_ctx(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    mods = _reload_package(tmp_path, monkeypatch)
    with TestClient(mods.main.app) as client:
        yield client, mods.db, mods.models


@pytest.fixture
def store(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    """Freshly imported modules plus an open session on an empty schema."""
    mods = _reload_package(tmp_path, monkeypatch)
    mods.db.init_db()
    session = mods.db.SessionLocal()
    mods.session = session
    try:
        yield mods
    finally:
        session.close()


@pytest.fixture
def admin_client(app_ctx):
    client, db_mod, models = app_ctx
    response = client.post(
        "/login",
        data={"email": ADMIN_EMAIL, "password": ADMIN_PASSWORD},
        follow_redirects=False,
    )
    assert response.status_code == 303
    return client, db_mod, models


def make_app(models, db, **overrides):
    values = {
        "title": "Sample App",
        "description": "A sample application.",
        "thumbnail_url": "https://cdn.example.com/sample.png",
        "screenshots": [],
        "download_url": "https://cdn.example.com/sample.apk",
        "category": "tools",
        "tags": [],
        "version": "1.0.0",
        "publisher": "Sample Co",
    }
    values.update(overrides)
    app = models.App(**values)
    db.add(app)
    db.commit()
    return app


def add_review(models, db, app, rating, **overrides):
    values = {"app_id": app.id, "user_name": "tester", "rating": rating, "comment": "ok"}
    values.update(overrides)
    review = models.Review(**values)
    db.add(review)
    db.commit()
    return review
