"""Tests for the Typer CLI."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
from typer.testing import CliRunner

from pusu.cli import app, import_handler
from pusu.errors import BackendError
from pusu.subscription import Subscription

runner = CliRunner()


@pytest.fixture(autouse=True)
def _quiet(monkeypatch: pytest.MonkeyPatch):
    for var in ("PUB_SUB_PROJECT_ID", "BASE_HOST", "PORT", "PUSU_LOG_LEVEL"):
        monkeypatch.delenv(var, raising=False)
    with patch("pusu.cli.configure_logging"):
        yield


@pytest.fixture
def config_file(tmp_path: Path) -> Path:
    path = tmp_path / "pusu.yaml"
    path.write_text("project_id: my-project\nhost: http://localhost\n")
    return path


def sample_handler(message):
    return None


class TestValidate:
    def test_valid(self, config_file: Path):
        result = runner.invoke(app, ["validate", "--config", str(config_file)])
        assert result.exit_code == 0
        assert "Valid" in result.output

    def test_missing_required(self):
        result = runner.invoke(app, ["validate"])
        assert result.exit_code == 1
        assert "project_id" in result.output

    def test_missing_file(self, tmp_path: Path):
        result = runner.invoke(
            app, ["validate", "--config", str(tmp_path / "nope.yaml")]
        )
        assert result.exit_code == 1
        assert "not found" in result.output


class TestProvision:
    def test_provisions(self, config_file: Path):
        adapter = MagicMock()
        adapter.provisioner.endpoint_for.return_value = "http://localhost/x"
        with patch("pusu.cli.create_adapter", return_value=adapter):
            result = runner.invoke(
                app, ["provision", "test", "testing", "--config", str(config_file)]
            )

        assert result.exit_code == 0
        assert "Provisioned" in result.output
        sub = adapter.provisioner.ensure.call_args.args[0]
        assert isinstance(sub, Subscription)
        assert (sub.topic, sub.name) == ("test", "testing")

    def test_backend_failure_exits_1(self, config_file: Path):
        adapter = MagicMock()
        adapter.provisioner.ensure.side_effect = BackendError(
            "create_topic", topic="test", subscription="testing", cause=RuntimeError()
        )
        with patch("pusu.cli.create_adapter", return_value=adapter):
            result = runner.invoke(
                app, ["provision", "test", "testing", "--config", str(config_file)]
            )
        assert result.exit_code == 1
        assert "Provisioning failed" in result.output

    def test_missing_project_exits_1(self):
        result = runner.invoke(app, ["provision", "test", "testing"])
        assert result.exit_code == 1


class TestServe:
    def test_prepares_and_runs(self, config_file: Path):
        adapter = MagicMock()
        with patch("pusu.cli.create_adapter", return_value=adapter):
            result = runner.invoke(
                app,
                [
                    "serve",
                    "test",
                    "testing",
                    f"{__name__}:sample_handler",
                    "--config",
                    str(config_file),
                ],
            )

        assert result.exit_code == 0, result.output
        sub = adapter.prepare.call_args.args[0]
        assert sub.handler is sample_handler
        adapter.run.assert_called_once_with(sub)

    def test_skip_provision_only_registers(self, config_file: Path):
        adapter = MagicMock()
        with patch("pusu.cli.create_adapter", return_value=adapter):
            result = runner.invoke(
                app,
                [
                    "serve",
                    "test",
                    "testing",
                    f"{__name__}:sample_handler",
                    "--config",
                    str(config_file),
                    "--skip-provision",
                ],
            )

        assert result.exit_code == 0, result.output
        adapter.prepare.assert_not_called()
        adapter.registrar.register.assert_called_once()
        adapter.run.assert_called_once()

    def test_bad_handler_reference(self, config_file: Path):
        result = runner.invoke(
            app,
            ["serve", "test", "testing", "no_colon", "--config", str(config_file)],
        )
        assert result.exit_code == 1
        assert "Cannot load handler" in result.output


class TestImportHandler:
    def test_resolves_attribute(self):
        assert import_handler(f"{__name__}:sample_handler") is sample_handler

    def test_resolves_nested_attribute(self):
        assert import_handler("pusu.subscription:Subscription.validate") is (
            Subscription.validate
        )

    @pytest.mark.parametrize("ref", ["module", ":attr", "module:"])
    def test_rejects_malformed(self, ref: str):
        with pytest.raises(ValueError):
            import_handler(ref)
