"""Unit tests for template configuration."""

import sys
from pathlib import Path
from types import SimpleNamespace

import pytest

from llm_template.core import config as config_module
from llm_template.core.config import (
    TemplateSettings,
    configure,
    default_template_directory,
    detect_framework_root,
    get_settings,
    reset_configuration,
)


class TestDefaultTemplateDirectory:
    """Tests for default directory resolution."""

    def test_defaults_to_cwd_prompts(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Test the default without a host framework."""
        monkeypatch.chdir(tmp_path)
        monkeypatch.setattr(config_module, "detect_framework_root", lambda: None)

        assert get_settings().template_directory == Path.cwd() / "prompts"

    def test_framework_root(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test the default inside a host web framework."""
        monkeypatch.setattr(config_module, "detect_framework_root", lambda: tmp_path / "site")

        assert default_template_directory() == tmp_path / "site" / "app" / "prompts"

    def test_no_framework_loaded(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test detection when Django is not imported."""
        monkeypatch.delitem(sys.modules, "django.conf", raising=False)
        assert detect_framework_root() is None

    def test_configured_django_project(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test detection of a configured Django project's BASE_DIR."""
        fake_conf = SimpleNamespace(settings=SimpleNamespace(configured=True, BASE_DIR="/srv/site"))
        monkeypatch.setitem(sys.modules, "django.conf", fake_conf)

        assert detect_framework_root() == Path("/srv/site")

    def test_unconfigured_django(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test that an unconfigured Django install is ignored."""
        fake_conf = SimpleNamespace(settings=SimpleNamespace(configured=False))
        monkeypatch.setitem(sys.modules, "django.conf", fake_conf)

        assert detect_framework_root() is None


class TestTemplateSettings:
    """Tests for TemplateSettings."""

    def test_defaults(self) -> None:
        """Test default values."""
        settings = TemplateSettings()

        assert settings.template_directory is not None
        assert settings.legacy_schema_documents is False
        assert settings.log_level == "INFO"

    def test_environment_overrides(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test loading values from environment variables."""
        monkeypatch.setenv("LLM_TEMPLATE_TEMPLATE_DIRECTORY", str(tmp_path / "from_env"))
        monkeypatch.setenv("LLM_TEMPLATE_LEGACY_SCHEMA_DOCUMENTS", "true")

        settings = TemplateSettings()

        assert settings.template_directory == tmp_path / "from_env"
        assert settings.legacy_schema_documents is True

    def test_explicit_directory(self, tmp_path: Path) -> None:
        """Test that an explicit directory is kept."""
        assert TemplateSettings(template_directory=tmp_path).template_directory == tmp_path


class TestConfigure:
    """Tests for the process-wide configuration."""

    def test_get_settings_is_cached(self) -> None:
        """Test that the same settings object is returned."""
        assert get_settings() is get_settings()

    def test_configure_keyword(self, tmp_path: Path) -> None:
        """Test assigning settings by keyword, with path coercion."""
        settings = configure(template_directory=str(tmp_path))

        assert settings is get_settings()
        assert settings.template_directory == tmp_path
        assert isinstance(settings.template_directory, Path)

    def test_configure_mutator(self) -> None:
        """Test applying settings through a callable."""
        configure(lambda s: setattr(s, "legacy_schema_documents", True))

        assert get_settings().legacy_schema_documents is True

    def test_configure_unknown_setting(self) -> None:
        """Test that unknown settings are rejected."""
        with pytest.raises(AttributeError, match="template_dir"):
            configure(template_dir="/tmp")

    def test_reset_recomputes_defaults(self, tmp_path: Path) -> None:
        """Test that reset drops configured values."""
        first = configure(template_directory=tmp_path / "custom")

        reset_configuration()
        second = get_settings()

        assert second is not first
        assert second.template_directory != tmp_path / "custom"
