import importlib
import json
import logging

import pytest

from task_tracker import main
from task_tracker.generate_openapi import generate_openapi
from task_tracker.logging_setup import setup_logging
from task_tracker.main import create_app
from task_tracker.settings import Settings, get_settings


class TestSettings:
    def test_defaults(self, monkeypatch):
        for name in ["PERSISTENCE_BACKEND", "CORS_ALLOW_ORIGINS", "TOKEN_TTL_MINUTES", "LOG_LEVEL"]:
            monkeypatch.delenv(name, raising=False)
        s = get_settings()
        assert s.persistence_backend == "memory"
        assert s.cors_allow_origins == ["*"]
        assert s.token_ttl_minutes == 60 * 24 * 7
        assert s.log_level == "INFO"

    def test_invalid_values_fall_back(self, monkeypatch):
        monkeypatch.setenv("PERSISTENCE_BACKEND", "mongo")
        monkeypatch.setenv("TOKEN_TTL_MINUTES", "soon")
        monkeypatch.setenv("LOG_LEVEL", "loud")
        s = get_settings()
        assert s.persistence_backend == "memory"
        assert s.token_ttl_minutes == 60 * 24 * 7
        assert s.log_level == "INFO"

    def test_parsed_values(self, monkeypatch):
        monkeypatch.setenv("PERSISTENCE_BACKEND", "SQLite")
        monkeypatch.setenv("CORS_ALLOW_ORIGINS", "http://a.test, http://b.test")
        monkeypatch.setenv("TRACKER_API_URL", "http://api.test/")
        s = get_settings()
        assert s.persistence_backend == "sqlite"
        assert s.cors_allow_origins == ["http://a.test", "http://b.test"]
        assert s.api_base_url == "http://api.test"


class TestOpenAPI:
    def test_schema_written(self, tmp_path):
        path = generate_openapi(tmp_path / "out" / "openapi.json")
        schema = json.loads(path.read_text(encoding="utf-8"))
        assert "/api/tasks" in schema["paths"]
        assert "/api/tasks/{task_id}" in schema["paths"]
        assert "/api/users/profile" in schema["paths"]
        assert {t["name"] for t in schema["tags"]} >= {"health", "tasks", "users"}


@pytest.fixture
def root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield root
    for h in list(root.handlers):
        root.removeHandler(h)
    for h in handlers:
        root.addHandler(h)
    root.setLevel(level)


class TestLogging:
    def test_building_the_app_leaves_logging_alone(self, root_logger):
        marker = logging.NullHandler()
        root_logger.addHandler(marker)
        before = list(root_logger.handlers), root_logger.level

        create_app(Settings(jwt_secret="test-secret"))
        importlib.reload(main)

        assert (list(root_logger.handlers), root_logger.level) == before

    def test_setup_logging_installs_one_handler(self, root_logger):
        root_logger.addHandler(logging.NullHandler())
        setup_logging("debug")
        setup_logging("debug")
        assert len(root_logger.handlers) == 1
        assert root_logger.level == logging.DEBUG
