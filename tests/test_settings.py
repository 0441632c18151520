"""Tests for environment-driven settings."""

from settings import Settings, get_settings


class TestSettings:
    def test_defaults(self):
        settings = Settings()
        assert settings.LOG_LEVEL == "INFO"
        assert settings.TRACE is False
        assert settings.OVERRIDE_RATIO == 0.6
        assert settings.CITY_PROFILES_PATH is None

    def test_config_dict(self):
        assert Settings.model_config["env_prefix"] == "AIRSCOPE_"
        assert Settings.model_config["case_sensitive"] is True

    def test_env_prefix(self, monkeypatch):
        monkeypatch.setenv("AIRSCOPE_DB_PATH", "other.db")
        get_settings.cache_clear()
        assert get_settings().DB_PATH == "other.db"

    def test_dotenv_file(self, tmp_path):
        """A .env in the working directory is read; unrelated keys are ignored."""
        (tmp_path / ".env").write_text("AIRSCOPE_MODEL_DIR=trained\nUNRELATED=1\n", encoding="utf-8")
        assert Settings().MODEL_DIR == "trained"
