"""Tests for the tagfields CLI commands."""

import json

import pytest
import yaml
from typer.testing import CliRunner


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture
def app():
    from tagfields.cli.main import app
    return app


class TestSchemaCommand:
    """Tests for tagfields schema."""

    def test_command_exists(self, runner, app):
        result = runner.invoke(app, ["schema", "--help"])
        assert result.exit_code == 0
        assert "flattened field schema" in result.output

    def test_json_format(self, runner, app):
        result = runner.invoke(app, ["schema", "fixtures.records:Account", "--format", "json"])
        assert result.exit_code == 0

        data = json.loads(result.stdout)
        assert data["record"] == "fixtures.records.Account"
        assert [f["name"] for f in data["fields"]] == [
            "user_id",
            "nick",
            "password",
            "-",
            "created_by",
            "updated_at",
            "owner_id",
            "owner_name",
            "balance",
        ]
        assert data["fields"][2]["ignored"] is True
        assert data["fields"][8]["force_string"] is True

    def test_markdown_format(self, runner, app):
        result = runner.invoke(app, ["schema", "fixtures.records:Owner", "-f", "markdown"])
        assert result.exit_code == 0
        assert "# Owner Fields" in result.stdout
        assert "`owner_id`" in result.stdout

    def test_table_format(self, runner, app):
        result = runner.invoke(app, ["schema", "fixtures.records:Owner"])
        assert result.exit_code == 0
        assert "owner_id" in result.stdout

    def test_output_file(self, runner, app, tmp_path):
        out = tmp_path / "schema.json"
        result = runner.invoke(
            app, ["schema", "fixtures.records:Owner", "-f", "json", "-o", str(out)]
        )
        assert result.exit_code == 0
        assert json.loads(out.read_text())["fields"][0]["field_name"] == "OwnerID"

    def test_config_file(self, runner, app, tmp_path):
        config = tmp_path / "tagfields.yaml"
        config.write_text(yaml.dump({"opaque_types": ["fixtures.records:Money"]}))

        result = runner.invoke(
            app, ["schema", "fixtures.records:Invoice", "-f", "json", "-c", str(config)]
        )
        assert result.exit_code == 0
        assert [f["name"] for f in json.loads(result.stdout)["fields"]] == ["number", "total"]

    def test_bad_config_file(self, runner, app, tmp_path):
        result = runner.invoke(
            app, ["schema", "fixtures.records:Owner", "-c", str(tmp_path / "missing.yaml")]
        )
        assert result.exit_code == 1

    def test_malformed_config_file(self, runner, app, tmp_path):
        config = tmp_path / "broken.yaml"
        config.write_text("primary_tag_key: [unclosed\n")

        result = runner.invoke(app, ["schema", "fixtures.records:Owner", "-c", str(config)])

        assert result.exit_code == 1
        assert isinstance(result.exception, SystemExit)

    def test_table_escapes_markup_in_names(self, runner, app):
        result = runner.invoke(app, ["schema", "fixtures.records:Bracketed"])

        assert result.exit_code == 0
        assert "[/bold]" in result.stdout
        assert "[red]x" in result.stdout

    def test_markdown_lists_tags(self, runner, app):
        result = runner.invoke(app, ["schema", "fixtures.records:Account", "-f", "markdown"])

        assert result.exit_code == 0
        assert "| Tags |" in result.stdout
        assert '`json:"balance,omitzero,string"`' in result.stdout

    def test_unknown_target(self, runner, app):
        result = runner.invoke(app, ["schema", "fixtures.records:Nope"])
        assert result.exit_code == 1

    def test_non_record_target(self, runner, app):
        result = runner.invoke(app, ["schema", "datetime:datetime"])
        assert result.exit_code == 1

    def test_self_composing_target(self, runner, app):
        result = runner.invoke(app, ["schema", "fixtures.records:Node", "-f", "json"])
        assert result.exit_code == 1


class TestResolveCommand:
    """Tests for tagfields resolve."""

    def test_resolves_snake_case_key(self, runner, app):
        result = runner.invoke(app, ["resolve", "fixtures.records:Account", "owner_name"])
        assert result.exit_code == 0

        entry = json.loads(result.stdout)
        assert entry["index"] == 7
        assert entry["field_name"] == "owner_name"

    def test_resolves_declared_name(self, runner, app):
        result = runner.invoke(app, ["resolve", "fixtures.records:Account", "UserID"])
        assert result.exit_code == 0
        assert json.loads(result.stdout)["name"] == "user_id"

    def test_not_found(self, runner, app):
        result = runner.invoke(app, ["resolve", "fixtures.records:Account", "missing"])
        assert result.exit_code == 1


class TestVersion:
    def test_version(self, runner, app):
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
