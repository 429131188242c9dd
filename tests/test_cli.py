"""Tests for cli.py — global flags and routing between shell, headless and setup."""

from unittest.mock import patch

import pytest

from conni_cli import config
from conni_cli.cli import _extract_global_flags, build_parser, main
from conni_cli.exceptions import CliError, ConfigError


def _exit_code(argv):
    with pytest.raises(SystemExit) as exc_info:
        main(argv)
    return exc_info.value.code


# ---------------------------------------------------------------------------
# _extract_global_flags
# ---------------------------------------------------------------------------


class TestExtractGlobalFlags:
    def test_no_flags(self):
        assert _extract_global_flags(["list-spaces"]) == (None, None, False, ["list-spaces"])

    def test_flags_after_command(self):
        profile, fmt, verbose, remaining = _extract_global_flags(
            ["get-page", '{"pageId":"1"}', "--profile", "staging", "--format", "toon"]
        )
        assert profile == "staging"
        assert fmt == "toon"
        assert verbose is False
        assert remaining == ["get-page", '{"pageId":"1"}']

    def test_verbose(self):
        _, _, verbose, remaining = _extract_global_flags(["--verbose", "list-spaces"])
        assert verbose is True
        assert remaining == ["list-spaces"]

    def test_invalid_format(self):
        with pytest.raises(CliError, match="Invalid format 'xml'"):
            _extract_global_flags(["--format", "xml"])

    @pytest.mark.parametrize("flag", ["--format", "--profile"])
    def test_flag_without_value(self, flag):
        with pytest.raises(CliError, match="requires"):
            _extract_global_flags(["list-spaces", flag])


class TestBuildParser:
    def test_command_and_params(self):
        ns = build_parser().parse_intermixed_args(["get-page", '{"pageId":"1"}'])
        assert ns.command == "get-page"
        assert ns.params == '{"pageId":"1"}'
        assert ns.show_help is False

    def test_help_flag_before_params(self):
        ns = build_parser().parse_intermixed_args(["get-page", "-h", '{"pageId":"1"}'])
        assert ns.show_help is True
        assert ns.params == '{"pageId":"1"}'

    def test_empty(self):
        ns = build_parser().parse_intermixed_args([])
        assert ns.command is None
        assert ns.params is None

    def test_unknown_flag_raises_cli_error(self):
        with pytest.raises(CliError, match="unrecognized arguments: --bogus"):
            build_parser().parse_intermixed_args(["list-spaces", "--bogus"])


# ---------------------------------------------------------------------------
# main()
# ---------------------------------------------------------------------------


class TestMain:
    def test_version(self, capsys):
        for flag in ("--version", "-v"):
            assert _exit_code([flag]) == 0
            assert capsys.readouterr().out.strip() == f"conni-cli {config.VERSION}"

    def test_help(self, capsys):
        assert _exit_code(["--help"]) == 0
        assert "Usage:" in capsys.readouterr().out

    def test_commands_flag(self, capsys):
        assert _exit_code(["--commands"]) == 0
        assert "11. test-connection" in capsys.readouterr().out

    def test_unknown_command(self, capsys):
        assert _exit_code(["explode"]) == 1
        assert "Unknown command: explode" in capsys.readouterr().err

    def test_invalid_format_exits_one(self, capsys):
        assert _exit_code(["list-spaces", "--format", "xml"]) == 1
        assert capsys.readouterr().err.startswith("ERROR: Invalid format")

    @patch("conni_cli.cli.run_command")
    def test_unknown_flag_exits_one(self, mock_run, capsys):
        assert _exit_code(["list-spaces", "--bogus"]) == 1
        assert "ERROR: unrecognized arguments: --bogus" in capsys.readouterr().err
        mock_run.assert_not_called()

    @patch("conni_cli.cli.run_command")
    def test_extra_positional_exits_one(self, mock_run, capsys):
        assert _exit_code(["get-page", "{}", "{}"]) == 1
        assert "unrecognized arguments" in capsys.readouterr().err
        mock_run.assert_not_called()

    @patch("conni_cli.cli.run_command", return_value=0)
    def test_help_flag_before_command(self, mock_run):
        _exit_code(["--help", "get-page"])
        mock_run.assert_called_once_with("get-page", None, "-h", profile=None, fmt=None)

    @patch("conni_cli.cli.run_command", return_value=0)
    def test_headless_routing(self, mock_run):
        assert _exit_code(["get-page", '{"pageId":"1"}', "--profile", "staging"]) == 0
        mock_run.assert_called_once_with(
            "get-page", '{"pageId":"1"}', None, profile="staging", fmt=None
        )

    @patch("conni_cli.cli.run_command", return_value=1)
    def test_headless_exit_code_propagates(self, mock_run):
        assert _exit_code(["list-spaces"]) == 1

    @patch("conni_cli.cli.run_command", return_value=0)
    def test_command_help_flag(self, mock_run):
        _exit_code(["get-page", "-h"])
        mock_run.assert_called_once_with("get-page", None, "-h", profile=None, fmt=None)

    @patch("conni_cli.cli.run_command", return_value=0)
    def test_verbose_enables_http_log(self, mock_run):
        _exit_code(["list-spaces", "--verbose"])
        assert config.HTTP_LOG_ENABLED is True

    @patch("conni_cli.cli.run_command", return_value=0)
    def test_http_log_off_without_verbose(self, mock_run):
        _exit_code(["list-spaces"])
        assert config.HTTP_LOG_ENABLED is False

    @patch("conni_cli.cli.cmd_setup")
    def test_config_runs_wizard(self, mock_setup):
        assert _exit_code(["config"]) == 0
        mock_setup.assert_called_once_with()

    @patch("conni_cli.cli.cmd_setup", side_effect=ConfigError("Invalid host 'x'"))
    def test_config_wizard_error(self, mock_setup, capsys):
        assert _exit_code(["config"]) == 2
        assert "ERROR: Invalid host 'x'" in capsys.readouterr().err

    @patch("conni_cli.cli.Session")
    def test_no_arguments_starts_shell(self, mock_session):
        assert _exit_code(["--profile", "staging"]) == 0
        mock_session.assert_called_once_with(profile="staging", fmt=None)
        mock_session.return_value.connect.assert_called_once_with()
        mock_session.return_value.run.assert_called_once_with()

    def test_shell_without_config_exits_two(self, empty_root, monkeypatch, capsys):
        monkeypatch.setattr(config, "PROJECT_ROOT", empty_root)
        assert _exit_code([]) == 2
        assert "Config file not found" in capsys.readouterr().err
