import _bootstrap  # noqa: F401

from haiku_assistant.config import DEFAULT_MODEL, OPENROUTER_BASE_URL, Settings, load_settings

VARIABLES = (
    "OPENROUTER_API_KEY",
    "HAIKU_ASSISTANT_MODEL",
    "HAIKU_ASSISTANT_BASE_URL",
    "HAIKU_ASSISTANT_APP_URL",
    "HAIKU_ASSISTANT_TIMEOUT",
)


def clear_environment(monkeypatch):
    for name in VARIABLES:
        # set first so teardown also removes values loaded from .env files
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)


def test_defaults_without_environment(monkeypatch, tmp_path):
    clear_environment(monkeypatch)
    settings = load_settings(tmp_path / "missing.env")
    assert not settings.configured
    assert settings.model == DEFAULT_MODEL
    assert settings.base_url == OPENROUTER_BASE_URL
    assert settings.timeout == 30.0


def test_environment_variables(monkeypatch, tmp_path):
    clear_environment(monkeypatch)
    monkeypatch.setenv("OPENROUTER_API_KEY", " sk-or-env ")
    monkeypatch.setenv("HAIKU_ASSISTANT_MODEL", "openai/gpt-4-turbo")
    monkeypatch.setenv("HAIKU_ASSISTANT_TIMEOUT", "12.5")
    settings = load_settings(tmp_path / "missing.env")
    assert settings.api_key == "sk-or-env"
    assert settings.configured
    assert settings.model == "openai/gpt-4-turbo"
    assert settings.timeout == 12.5


def test_dotenv_file(monkeypatch, tmp_path):
    clear_environment(monkeypatch)
    env_file = tmp_path / ".env"
    env_file.write_text("OPENROUTER_API_KEY=sk-or-file\nHAIKU_ASSISTANT_MODEL=openai/gpt-3.5-turbo\n")
    settings = load_settings(env_file)
    assert settings.api_key == "sk-or-file"
    assert settings.model == "openai/gpt-3.5-turbo"


def test_invalid_timeout_is_ignored(monkeypatch, tmp_path):
    clear_environment(monkeypatch)
    monkeypatch.setenv("HAIKU_ASSISTANT_TIMEOUT", "soon")
    assert load_settings(tmp_path / "missing.env").timeout == 30.0


def test_overrides():
    settings = Settings(api_key="a", model="m")
    assert settings.with_overrides() is settings
    assert settings.with_overrides(api_key=None, model="other").model == "other"
    assert settings.with_overrides(api_key="b").api_key == "b"
