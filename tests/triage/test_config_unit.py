"""Unit tests for TriageSettings and load_settings."""

import pytest

from src.component_triage.config import TriageSettings, load_settings, redact_secret
from src.component_triage.errors import ConfigurationError


ENV_VARS = [
    "OPENAI_API_KEY",
    "OPENAI_MODEL",
    "OPENAI_BASE_URL",
    "GITHUB_TOKEN",
    "GITHUB_BASE_URL",
    "BATCH_SIZE",
    "BATCH_DELAY_SECONDS",
    "OUTPUT_DIR",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


class TestLoadSettings:
    def test_defaults(self, monkeypatch):
        monkeypatch.setenv("OPENAI_API_KEY", "sk-test")

        settings = load_settings(_env_file=None)

        assert settings.openai_api_key == "sk-test"
        assert settings.openai_model == "gpt-4-turbo-preview"
        assert settings.openai_base_url is None
        assert settings.github_token is None
        assert settings.repository == "shadcn-ui/ui"
        assert settings.batch_size == 5
        assert settings.batch_delay_seconds == 1.0
        assert settings.output_dir == "./reports"

    def test_reads_environment(self, monkeypatch):
        monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
        monkeypatch.setenv("OPENAI_MODEL", "gpt-4o-mini")
        monkeypatch.setenv("GITHUB_TOKEN", "ghp_abc")
        monkeypatch.setenv("BATCH_SIZE", "3")
        monkeypatch.setenv("OUTPUT_DIR", "/tmp/out")

        settings = load_settings(_env_file=None)

        assert settings.openai_model == "gpt-4o-mini"
        assert settings.github_token == "ghp_abc"
        assert settings.batch_size == 3
        assert settings.output_dir == "/tmp/out"

    def test_reads_env_file(self, tmp_path):
        env_file = tmp_path / ".env"
        env_file.write_text("OPENAI_API_KEY=sk-from-file\nGITHUB_TOKEN=ghp_file\n")

        settings = load_settings(_env_file=str(env_file))

        assert settings.openai_api_key == "sk-from-file"
        assert settings.github_token == "ghp_file"

    def test_missing_api_key_raises(self):
        with pytest.raises(ConfigurationError) as exc_info:
            load_settings(_env_file=None)

        assert "openai_api_key" in exc_info.value.message

    def test_blank_api_key_raises(self):
        with pytest.raises(ConfigurationError) as exc_info:
            load_settings(_env_file=None, openai_api_key="   ")

        assert "OPENAI_API_KEY environment variable is required" in exc_info.value.message
        assert exc_info.value.cause is not None

    def test_blank_github_token_is_unset(self):
        settings = load_settings(_env_file=None, openai_api_key="sk-test", github_token="  ")

        assert settings.github_token is None

    def test_invalid_batch_size_raises(self):
        with pytest.raises(ConfigurationError):
            load_settings(_env_file=None, openai_api_key="sk-test", batch_size=0)

    def test_negative_batch_delay_raises(self):
        with pytest.raises(ConfigurationError):
            load_settings(_env_file=None, openai_api_key="sk-test", batch_delay_seconds=-1)

    def test_invalid_base_url_raises(self):
        with pytest.raises(ConfigurationError) as exc_info:
            load_settings(_env_file=None, openai_api_key="sk-test", github_base_url="ftp://example.com")

        assert "github_base_url" in exc_info.value.message

    def test_repository_property(self):
        settings = TriageSettings(
            _env_file=None,
            openai_api_key="sk-test",
            github_repo_owner="acme",
            github_repo_name="widgets",
        )

        assert settings.repository == "acme/widgets"


class TestRedactSecret:
    def test_unset(self):
        assert redact_secret(None) == "<not set>"
        assert redact_secret("") == "<not set>"

    def test_short_value_fully_hidden(self):
        assert redact_secret("abc") == "***"

    def test_shows_prefix(self):
        assert redact_secret("sk-123456") == "sk-1*****"
