"""Test Settings loading, env overrides and the cached instance."""

from domainkit.core.config import (
    Settings,
    get_settings,
    load_settings,
    reset_settings,
    set_settings,
)


class TestSettingsDefaults:
    def test_default_settings(self):
        settings = Settings()
        assert settings.entities.historize is False
        assert settings.repository.publish_on_save is True
        assert settings.repository.clear_after_publish is True
        assert settings.events.history_limit == 1000
        assert settings.observability.log_level == "INFO"
        assert settings.observability.log_format == "json"


class TestLoadSettings:
    def test_overrides(self):
        settings = load_settings(overrides={"entities": {"historize": True}})
        assert settings.entities.historize is True

    def test_toml_file(self, tmp_path):
        path = tmp_path / "domainkit.toml"
        path.write_text(
            "[repository]\npublish_on_save = false\n\n"
            "[observability]\nlog_format = \"console\"\n"
        )
        settings = load_settings(path)
        assert settings.repository.publish_on_save is False
        assert settings.repository.clear_after_publish is True
        assert settings.events.history_limit == 1000
        assert settings.observability.log_format == "console"

    def test_missing_file_uses_defaults(self, tmp_path):
        settings = load_settings(tmp_path / "nope.toml")
        assert settings.entities.historize is False

    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("DOMAINKIT_ENTITIES__HISTORIZE", "true")
        assert load_settings().entities.historize is True


class TestCachedSettings:
    def test_get_settings_is_cached(self):
        assert get_settings() is get_settings()

    def test_set_and_reset(self):
        custom = Settings(entities={"historize": True})
        set_settings(custom)
        assert get_settings() is custom
        reset_settings()
        assert get_settings() is not custom
        assert get_settings().entities.historize is False
