"""Tests for the llm-template CLI."""

import json
from pathlib import Path

import logfire
import pytest
import typer
from typer.testing import CliRunner

from llm_template import __version__
from llm_template.cli import app
from llm_template.cli.commands.render import parse_variables

GREETING = {"user.txt.j2": "Hello, {{ name }}!", "system.txt.j2": "Be brief."}
SCHEMA_SCRIPT = "class Greet(BaseModel):\n    reply: str\n"


@pytest.fixture
def runner(monkeypatch: pytest.MonkeyPatch) -> CliRunner:
    # Keep the test session's logging setup
    monkeypatch.setattr(logfire, "configure", lambda **kwargs: None)
    return CliRunner()


def _json_output(output: str) -> dict:
    return json.loads(output[output.index("{") :])


class TestParseVariables:
    """Tests for command-line variable parsing."""

    def test_pairs_decode_json_values(self) -> None:
        context = parse_variables(["name=Alice", "count=3", 'tags=["a", "b"]'], None)

        assert context == {"name": "Alice", "count": 3, "tags": ["a", "b"]}

    def test_value_may_contain_equals(self) -> None:
        assert parse_variables(["query=a=b"], None) == {"query": "a=b"}

    def test_pairs_override_json(self) -> None:
        context = parse_variables(["name=Bob"], '{"name": "Alice", "lang": "en"}')

        assert context == {"name": "Bob", "lang": "en"}

    def test_missing_separator(self) -> None:
        with pytest.raises(typer.BadParameter, match="KEY=VALUE"):
            parse_variables(["name"], None)

    def test_invalid_json(self) -> None:
        with pytest.raises(typer.BadParameter, match="Invalid JSON"):
            parse_variables(None, "{not json")

    def test_json_must_be_object(self) -> None:
        with pytest.raises(typer.BadParameter, match="JSON object"):
            parse_variables(None, "[1, 2]")


class TestRenderCommand:
    """Tests for the render command."""

    def test_render_text(self, runner: CliRunner, template_dir: Path, make_bundle) -> None:
        make_bundle("greet", GREETING)

        result = runner.invoke(
            app, ["render", "greet", "--dir", str(template_dir), "--var", "name=Alice"]
        )

        assert result.exit_code == 0
        assert "Hello, Alice!" in result.output
        assert "Be brief." in result.output

    def test_render_json(self, runner: CliRunner, template_dir: Path, make_bundle) -> None:
        make_bundle("greet", {**GREETING, "schema.py": SCHEMA_SCRIPT})

        result = runner.invoke(
            app,
            [
                "render",
                "greet",
                "-d",
                str(template_dir),
                "--vars-json",
                '{"name": "Alice"}',
                "--format",
                "json",
            ],
        )

        assert result.exit_code == 0
        data = _json_output(result.output)
        assert data["template"] == "greet"
        assert data["messages"] == [
            {"role": "system", "content": "Be brief."},
            {"role": "user", "content": "Hello, Alice!"},
        ]
        assert data["schema"]["title"] == "Greet"
        assert data["schema"]["required"] == ["reply"]

    def test_render_legacy_schema(self, runner: CliRunner, template_dir: Path, make_bundle) -> None:
        make_bundle("greet", {**GREETING, "schema.txt.j2": '{"type": "object"}'})
        args = ["render", "greet", "-d", str(template_dir), "-v", "name=A", "-f", "json"]

        without = runner.invoke(app, args)
        with_legacy = runner.invoke(app, [*args, "--legacy-schema"])

        assert _json_output(without.output)["schema"] is None
        assert _json_output(with_legacy.output)["schema"] == {"type": "object"}

    def test_missing_template(self, runner: CliRunner, template_dir: Path) -> None:
        result = runner.invoke(app, ["render", "missing", "--dir", str(template_dir)])

        assert result.exit_code == 1
        assert "TEMPLATE_NOT_FOUND" in result.output

    def test_render_failure(self, runner: CliRunner, template_dir: Path, make_bundle) -> None:
        make_bundle("greet", GREETING)

        result = runner.invoke(app, ["render", "greet", "--dir", str(template_dir)])

        assert result.exit_code == 1
        assert "RENDER_FAILED" in result.output

    def test_schema_failure(self, runner: CliRunner, template_dir: Path, make_bundle) -> None:
        broken = "class Greet(BaseModel):\n    reply: 'Missing'\n"
        make_bundle("greet", {**GREETING, "schema.py": broken})

        result = runner.invoke(
            app, ["render", "greet", "--dir", str(template_dir), "--var", "name=Alice"]
        )

        assert result.exit_code == 1
        assert "SCHEMA_RESOLUTION_FAILED" in result.output

    def test_bad_variable(self, runner: CliRunner, template_dir: Path, make_bundle) -> None:
        make_bundle("greet", GREETING)

        result = runner.invoke(
            app, ["render", "greet", "--dir", str(template_dir), "--var", "name"]
        )

        assert result.exit_code == 2


class TestListCommand:
    """Tests for the list command."""

    def test_lists_bundles(self, runner: CliRunner, template_dir: Path, make_bundle) -> None:
        make_bundle("greet", {**GREETING, "schema.py": SCHEMA_SCRIPT})
        make_bundle("empty")

        result = runner.invoke(app, ["list", "--dir", str(template_dir)])

        assert result.exit_code == 0
        assert "greet" in result.output
        assert "system, user, schema" in result.output
        assert "empty" not in result.output

    def test_no_bundles(self, runner: CliRunner, tmp_path: Path) -> None:
        result = runner.invoke(app, ["list", "--dir", str(tmp_path / "nowhere")])

        assert result.exit_code == 0
        assert "No templates found" in result.output


class TestVersionCommand:
    def test_version(self, runner: CliRunner) -> None:
        result = runner.invoke(app, ["version"])

        assert result.exit_code == 0
        assert __version__ in result.output
