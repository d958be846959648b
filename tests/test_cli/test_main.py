"""Tests for the mihoro CLI."""

import tomllib
from unittest.mock import patch

import pytest
import yaml
from click.testing import CliRunner

from mihoro import __version__
from mihoro.cli.common import EXIT_BOOTSTRAP, EXIT_IO, EXIT_PARSE, EXIT_VALIDATION
from mihoro.cli.main import cli
from mihoro.errors import IoError


@pytest.fixture
def runner():
    return CliRunner()


def invoke(runner, path, *args, **kwargs):
    return runner.invoke(cli, ["--config", str(path), *args], **kwargs)


class TestSettingsErrors:
    def test_first_run_writes_scaffold(self, runner, tmp_path):
        path = tmp_path / "mihoro.toml"
        result = invoke(runner, path, "apply")

        assert result.exit_code == EXIT_BOOTSTRAP
        assert "run again to finish setup" in result.output
        assert tomllib.loads(path.read_text())["daemon_config"]["port"] == 7890

    def test_undefined_field(self, runner, settings_file):
        result = invoke(runner, settings_file(remote_config_url=""), "apply")
        assert result.exit_code == EXIT_VALIDATION
        assert "`remote_config_url` undefined" in result.output

    def test_malformed_settings(self, runner, tmp_path):
        path = tmp_path / "mihoro.toml"
        path.write_text("remote_config_url = [broken")
        result = invoke(runner, path, "apply")
        assert result.exit_code == EXIT_PARSE
        assert "Invalid TOML" in result.output

    def test_config_path_from_env(self, runner, settings_file):
        path = settings_file()
        result = runner.invoke(cli, ["config", "show"], env={"MIHORO_CONFIG": str(path)})
        assert result.exit_code == 0
        assert "port = 7890" in result.output


class TestApply:
    def test_applies_overrides(self, runner, settings_file, tmp_path, remote_config_text):
        config_file = tmp_path / "mihomo" / "config.yaml"
        config_file.parent.mkdir()
        config_file.write_text("secret: upstream\n" + remote_config_text)

        result = invoke(runner, settings_file(), "apply")

        assert result.exit_code == 0, result.output
        config = yaml.safe_load(config_file.read_text())
        assert config["port"] == 7890
        assert "secret" not in config
        assert config["rules"] == ["DOMAIN-SUFFIX,google.com,PROXY", "MATCH,DIRECT"]

    def test_missing_config_yaml(self, runner, settings_file):
        result = invoke(runner, settings_file(), "apply")
        assert result.exit_code == EXIT_IO
        assert "Cannot read" in result.output

    def test_malformed_config_yaml(self, runner, settings_file, tmp_path):
        config_file = tmp_path / "mihomo" / "config.yaml"
        config_file.parent.mkdir()
        config_file.write_text("port: [")
        result = invoke(runner, settings_file(), "apply")
        assert result.exit_code == EXIT_PARSE


class TestSetup:
    @patch("mihoro.cli.main.install.setup")
    def test_prints_next_steps(self, mock_setup, runner, settings_file, make_settings):
        from mihoro.daemon.install import InstallPaths

        mock_setup.return_value = InstallPaths.from_settings(make_settings())
        result = invoke(runner, settings_file(), "setup")

        assert result.exit_code == 0, result.output
        mock_setup.assert_called_once()
        assert "systemctl --user enable --now mihomo.service" in result.output

    def test_requires_binary_url(self, runner, settings_file):
        result = invoke(runner, settings_file(remote_binary_url=""), "setup")
        assert result.exit_code == EXIT_VALIDATION
        assert "`remote_binary_url` undefined" in result.output

    @patch("mihoro.daemon.install.fetch_to_file", side_effect=IoError("Failed to download x"))
    def test_download_failure(self, mock_fetch, runner, settings_file):
        result = invoke(runner, settings_file(), "setup")
        assert result.exit_code == EXIT_IO
        assert "Failed to download" in result.output


class TestUpdate:
    @patch("mihoro.cli.main.install.install_binary")
    @patch("mihoro.cli.main.install.update_config")
    def test_config_only(self, mock_update, mock_binary, runner, settings_file):
        result = invoke(runner, settings_file(), "update")
        assert result.exit_code == 0, result.output
        mock_update.assert_called_once()
        mock_binary.assert_not_called()

    @patch("mihoro.cli.main.install.install_binary")
    @patch("mihoro.cli.main.install.update_config")
    def test_with_binary(self, mock_update, mock_binary, runner, settings_file):
        result = invoke(runner, settings_file(), "update", "--binary")
        assert result.exit_code == 0, result.output
        mock_binary.assert_called_once()
        mock_update.assert_called_once()


class TestUninstall:
    def test_removes_with_yes(self, runner, settings_file, tmp_path):
        binary = tmp_path / "bin" / "mihomo"
        binary.parent.mkdir()
        binary.write_text("x")

        result = invoke(runner, settings_file(), "uninstall", "--yes")

        assert result.exit_code == 0, result.output
        assert not binary.exists()
        assert "removed" in result.output
        assert "not found, skipped" in result.output

    def test_aborts_without_confirmation(self, runner, settings_file, tmp_path):
        binary = tmp_path / "bin" / "mihomo"
        binary.parent.mkdir()
        binary.write_text("x")

        result = invoke(runner, settings_file(), "uninstall", input="n\n")

        assert result.exit_code != 0
        assert binary.exists()


class TestMisc:
    def test_version(self, runner):
        result = runner.invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_config_show(self, runner, settings_file):
        result = invoke(runner, settings_file(), "config", "show")
        assert result.exit_code == 0
        data = tomllib.loads(result.output)
        assert data["daemon_config"]["mode"] == "rule"
        assert "secret" not in data["daemon_config"]
