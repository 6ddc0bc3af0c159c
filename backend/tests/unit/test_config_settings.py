"""Unit tests for settings and logging configuration."""

import logging
from pathlib import Path

from subject_sync.config import Settings, get_settings
from subject_sync.infrastructure.logging import log_config


def test_settings_reads_backend_env_file_regardless_of_cwd():
    env_files = Settings.model_config.get("env_file")
    assert env_files is not None

    normalized = {str(Path(item)) for item in env_files}
    expected_backend_env = str(Path(__file__).resolve().parents[2] / ".env")

    assert expected_backend_env in normalized
    assert str(Path(".env")) in normalized


def test_settings_defaults_and_environment_override(monkeypatch):
    monkeypatch.setenv("SUBJECTS_LIST_COUNT", "25")
    monkeypatch.setenv("MAX_SUBJECTS_PER_OWNER", "3")

    settings = Settings(_env_file=None)

    assert settings.subjects_list_count == 25
    assert settings.max_subjects_per_owner == 3
    assert settings.default_owner_id == "local-user"
    assert settings.api_timeout_seconds == 30.0


def test_get_settings_is_cached():
    assert get_settings() is get_settings()


def test_parse_level_defaults_to_info():
    assert log_config._parse_level("debug") == logging.DEBUG
    assert log_config._parse_level("nonsense") == logging.INFO


def test_setup_logging_applies_category_levels():
    settings = Settings(_env_file=None, log_level_sync="DEBUG", log_level_http="ERROR")

    applied = log_config.setup_logging(settings)

    assert applied["httpcore"] == logging.ERROR

    assert logging.getLogger("MutationCoordinator").level == logging.DEBUG
    assert logging.getLogger("QueryCache").level == logging.DEBUG
    assert logging.getLogger("httpx").level == logging.ERROR
