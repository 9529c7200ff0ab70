"""Shared fixtures for llm-template tests."""

from collections.abc import Callable, Iterator
from pathlib import Path

import logfire
import pytest

from llm_template.core.config import reset_configuration
from llm_template.templates import TemplateLoader

ENV_VARS = (
    "LLM_TEMPLATE_TEMPLATE_DIRECTORY",
    "LLM_TEMPLATE_LEGACY_SCHEMA_DOCUMENTS",
    "LLM_TEMPLATE_LOG_LEVEL",
)

BundleFactory = Callable[..., Path]


def pytest_configure(config: pytest.Config) -> None:
    logfire.configure(send_to_logfire=False, console=False)


@pytest.fixture(autouse=True)
def isolated_configuration(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Give every test fresh settings, unaffected by the caller's environment."""
    for var in ENV_VARS:
        monkeypatch.delenv(var, raising=False)
    reset_configuration()
    yield
    reset_configuration()


@pytest.fixture
def template_dir(tmp_path: Path) -> Path:
    """Create an empty template directory."""
    directory = tmp_path / "prompts"
    directory.mkdir()
    return directory


@pytest.fixture
def make_bundle(template_dir: Path) -> BundleFactory:
    """Create a bundle from a mapping of file names to contents."""

    def _make(name: str, files: dict[str, str] | None = None) -> Path:
        path = template_dir / name
        path.mkdir(parents=True, exist_ok=True)
        for filename, content in (files or {}).items():
            (path / filename).write_text(content, encoding="utf-8")
        return path

    return _make


@pytest.fixture
def loader(template_dir: Path) -> TemplateLoader:
    """Create a loader rooted at the test template directory."""
    return TemplateLoader(template_directory=template_dir)
