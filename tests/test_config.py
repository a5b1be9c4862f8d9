"""Tests for environment-driven configuration."""

import os

import pytest

from webdriver_bridge.config import ServiceConfig, cli_log_path, driver_log_path, get_env_config, get_log_dir


ENV_VARS = (
    "CHROMEDRIVER_PATH",
    "GECKODRIVER_PATH",
    "SELENIUM_JAR_PATH",
    "HTMLUNIT_JAR_PATH",
    "JAVA_PATH",
    "CHROME_BINARY",
    "FIREFOX_BINARY",
    "WDB_FRAME_BUFFER",
    "WDB_DRIVER_LOG",
    "WDB_DEBUG",
)


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    return monkeypatch


def test_empty_environment(clean_env):
    config = get_env_config()
    assert config["chromedriver_path"] is None
    assert config["frame_buffer"] is False
    assert config["debug"] is False


def test_values_are_read_and_stripped(clean_env):
    clean_env.setenv("GECKODRIVER_PATH", "  /opt/geckodriver  ")
    clean_env.setenv("WDB_FRAME_BUFFER", "1")
    clean_env.setenv("JAVA_PATH", "")
    config = get_env_config(load_env_file=False)
    assert config["geckodriver_path"] == "/opt/geckodriver"
    assert config["frame_buffer"] is True
    assert config["java_path"] is None


def test_dotenv_file_is_loaded_without_overriding(clean_env, tmp_path):
    (tmp_path / ".env").write_text("CHROMEDRIVER_PATH=/from/dotenv\nGECKODRIVER_PATH=/from/dotenv\n")
    clean_env.setenv("GECKODRIVER_PATH", "/from/env")
    config = get_env_config()
    assert config["chromedriver_path"] == "/from/dotenv"
    assert config["geckodriver_path"] == "/from/env"
    # load_dotenv writes into os.environ; monkeypatch will not undo that.
    os.environ.pop("CHROMEDRIVER_PATH", None)


def test_service_config_from_env_mapping():
    config = ServiceConfig.from_env(
        {"frame_buffer": True, "driver_log": "/tmp/d.log", "geckodriver_path": "/g", "htmlunit_jar_path": "/h.jar"},
        readiness_timeout=1.5,
    )
    assert config.frame_buffer is True
    assert config.output == "/tmp/d.log"
    assert config.gecko_driver_path == "/g"
    assert config.htmlunit_path == "/h.jar"
    assert config.readiness_timeout == 1.5
    assert config.extra_args == []


def test_log_paths(tmp_path):
    assert get_log_dir() == str(tmp_path / "logs")
    assert os.path.isdir(get_log_dir())
    path = driver_log_path("/usr/local/bin/chromedriver", 9515)
    assert os.path.basename(path).startswith("chromedriver_9515_")
    assert cli_log_path().endswith("webdriver_bridge.log")
