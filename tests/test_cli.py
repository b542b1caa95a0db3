"""Tests for CLI commands."""

import json
import tempfile
from importlib.metadata import PackageNotFoundError
from pathlib import Path

import pytest
from typer.testing import CliRunner

from scaffoldkit.cli import app


class TestCLI:
    """Test CLI commands."""

    @pytest.fixture
    def runner(self) -> CliRunner:
        """Create CLI test runner."""
        return CliRunner()

    @pytest.fixture
    def temp_project(self, monkeypatch: pytest.MonkeyPatch) -> Path:
        """Create a temporary Go project with a starter config."""
        monkeypatch.delenv("PROJECT_NAME", raising=False)
        with tempfile.TemporaryDirectory() as temp_dir:
            project_path = Path(temp_dir)
            (project_path / ".scaffoldkit.yaml").write_text(
                'version: 1.0.0\nproject_name: "github.com/acme/shop"\n',
            )
            yield project_path

    def test_init_writes_config(self, runner: CliRunner) -> None:
        """Test that init creates a starter config."""
        with tempfile.TemporaryDirectory() as temp_dir:
            result = runner.invoke(app, [
                "init", "--path", temp_dir, "--project", "github.com/acme/shop",
            ])

            assert result.exit_code == 0
            config_text = (Path(temp_dir) / ".scaffoldkit.yaml").read_text()
            assert 'project_name: "github.com/acme/shop"' in config_text

    def test_new_scaffolds_entity(self, runner: CliRunner, temp_project: Path) -> None:
        """Test that new generates the artifact set."""
        result = runner.invoke(app, [
            "new", "order_item",
            "-f", "quantity:INT",
            "-f", "price:DECIMAL",
            "--ref", "order",
            "--path", str(temp_project),
        ])

        assert result.exit_code == 0, result.output
        assert "Scaffolded OrderItem" in result.output
        assert (temp_project / "models" / "order_item.go").exists()
        migrations = (temp_project / "helpers" / "migrations.go").read_text()
        assert '"github.com/acme/shop/models"' in migrations

    def test_new_duplicate_fails(self, runner: CliRunner, temp_project: Path) -> None:
        """Test that scaffolding twice without --replace fails."""
        args = ["new", "order", "-f", "total:DECIMAL", "--path", str(temp_project)]
        assert runner.invoke(app, args).exit_code == 0

        result = runner.invoke(app, args)
        assert result.exit_code == 1
        assert "already scaffolded" in result.output

        result = runner.invoke(app, [*args, "--replace"])
        assert result.exit_code == 0

    def test_new_invalid_name(self, runner: CliRunner, temp_project: Path) -> None:
        """Test that an unusable table name is reported."""
        result = runner.invoke(app, ["new", "order-item", "--path", str(temp_project)])
        assert result.exit_code == 1
        assert "Error" in result.output

    def test_new_dry_run(self, runner: CliRunner, temp_project: Path) -> None:
        """Test that dry run writes nothing."""
        result = runner.invoke(app, [
            "new", "order", "-f", "total:DECIMAL", "--path", str(temp_project), "--dry-run",
        ])

        assert result.exit_code == 0
        assert "Dry run" in result.output
        assert not (temp_project / "models").exists()

    def test_submit_request_file(self, runner: CliRunner, temp_project: Path) -> None:
        """Test processing a submission body from a file."""
        request_file = temp_project / "request.json"
        request_file.write_text(json.dumps({
            "scaffoldData": {
                "tableName": "customer",
                "refTableName": "",
                "fields": [{"name": "email", "type": "VARCHAR(255)"}],
            },
        }))

        result = runner.invoke(app, [
            "submit", str(request_file), "--path", str(temp_project),
        ])

        assert result.exit_code == 0, result.output
        assert '"actionParam": "customer"' in result.output
        assert (temp_project / "models" / "customer.go").exists()

    def test_submit_invalid_json(self, runner: CliRunner, temp_project: Path) -> None:
        """Test that an unparseable body exits non-zero."""
        request_file = temp_project / "request.json"
        request_file.write_text("{not json")

        result = runner.invoke(app, [
            "submit", str(request_file), "--path", str(temp_project),
        ])

        assert result.exit_code == 1
        assert "Cannot parse JSON" in result.output

    def test_list_entities(self, runner: CliRunner, temp_project: Path) -> None:
        """Test listing registered entities."""
        runner.invoke(app, ["new", "order", "-f", "total:DECIMAL", "--path", str(temp_project)])

        result = runner.invoke(app, ["list", "--path", str(temp_project)])

        assert result.exit_code == 0
        assert "Order" in result.output
        assert "total:DECIMAL" in result.output

    def test_list_empty(self, runner: CliRunner, temp_project: Path) -> None:
        """Test listing with no registry."""
        result = runner.invoke(app, ["list", "--path", str(temp_project)])
        assert result.exit_code == 0
        assert "No entities scaffolded yet" in result.output

    def test_classify_command(self, runner: CliRunner) -> None:
        """Test the type mapping table."""
        result = runner.invoke(app, ["classify", "BIGINT", "FROBNICATE"])
        assert result.exit_code == 0
        assert "integer" in result.output
        assert "text" in result.output

    def test_version_command(self, runner: CliRunner) -> None:
        """Test version output."""
        result = runner.invoke(app, ["version"])
        assert result.exit_code == 0
        assert "ScaffoldKit version" in result.output

    def test_version_without_installed_metadata(
        self, runner: CliRunner, monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        """Test version falls back when the distribution is not installed."""
        def missing(name: str) -> str:
            raise PackageNotFoundError(name)

        monkeypatch.setattr("scaffoldkit.cli.get_version", missing)
        result = runner.invoke(app, ["--version"])

        assert result.exit_code == 0
        assert "ScaffoldKit version" in result.output
        assert "(development)" in result.output or "unknown" in result.output
