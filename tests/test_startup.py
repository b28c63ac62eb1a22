from __future__ import annotations

import logging
import threading
from dataclasses import replace

import pytest
from sqlalchemy import text

import marketplace.core.startup as startup_module
import marketplace.database.db as db_module
from marketplace.core.config import get_config


def _validated_event(caplog):
    return next(r for r in caplog.records if getattr(r, "event", None) == "startup.config.validated")


def test_startup_reports_negotiation_limits(monkeypatch, caplog):
    cfg = replace(get_config(), NEGOTIATION_NOTES_MAX_LENGTH=500, NEGOTIATION_DEADLINE_MAX_LENGTH=120)
    monkeypatch.setattr(startup_module, "get_config", lambda: cfg)
    monkeypatch.setattr(startup_module, "verify_database_connection", lambda: True)
    caplog.set_level(logging.INFO, logger="marketplace.core.startup")

    startup_module.validate_startup_config()

    context = _validated_event(caplog).context
    assert context["negotiation_notes_max_length"] == 500
    assert context["negotiation_deadline_max_length"] == 120


def test_unreachable_database_is_fatal_only_when_required(monkeypatch, caplog):
    monkeypatch.setattr(startup_module, "verify_database_connection", lambda: False)
    caplog.set_level(logging.WARNING, logger="marketplace.core.startup")

    optional = replace(get_config(), DB_CONNECTIVITY_REQUIRED=False)
    monkeypatch.setattr(startup_module, "get_config", lambda: optional)
    startup_module.validate_startup_config()
    assert any(
        getattr(r, "event", None) == "startup.database.connectivity_optional_failed" for r in caplog.records
    )

    required = replace(optional, DB_CONNECTIVITY_REQUIRED=True)
    monkeypatch.setattr(startup_module, "get_config", lambda: required)
    with pytest.raises(RuntimeError, match="Database connectivity check failed"):
        startup_module.validate_startup_config()


def test_production_on_sqlite_is_flagged(monkeypatch, caplog):
    cfg = replace(get_config(), ENV="production")
    monkeypatch.setattr(startup_module, "get_config", lambda: cfg)
    monkeypatch.setattr(startup_module, "verify_database_connection", lambda: True)
    monkeypatch.setattr(startup_module, "get_active_database_url", lambda: "sqlite:///./marketplace.db")
    caplog.set_level(logging.WARNING, logger="marketplace.core.startup")

    startup_module.validate_startup_config()

    assert any(getattr(r, "event", None) == "startup.production.sqlite_detected" for r in caplog.records)


def test_sqlite_engine_connections_can_cross_threads(tmp_path):
    engine = db_module._build_engine(f"sqlite:///{tmp_path / 'threads.db'}")
    with engine.connect() as conn:
        conn.execute(text("SELECT 1"))

    results = []

    def _use_pooled_connection():
        with engine.connect() as conn:
            results.append(conn.execute(text("SELECT 1")).scalar())

    worker = threading.Thread(target=_use_pooled_connection)
    worker.start()
    worker.join()
    engine.dispose()

    assert results == [1]
