"""
conni-cli: command-line and interactive client for Confluence.
"""

import argparse
import sys

from conni_cli import config
from conni_cli.exceptions import CliError, ConfigError
from conni_cli.registry import format_command_list, get_command
from conni_cli.runner import report_config_error, run_command
from conni_cli.setup_wizard import cmd_setup
from conni_cli.shell import Session

HELP_TEXT = """\
Usage:
  conni-cli                              Start the interactive shell
  conni-cli <command> ['<json-args>']    Run one command and exit
  conni-cli <command> -h                 Show help for one command
  conni-cli config                       Create or update a connection profile

Global flags:
  --profile <name>        Use this profile instead of defaultProfile
  --format json|toon      Output format (default: from config, else json)
  --verbose               Enable HTTP request logging on stderr
  --commands              List available commands
  --version, -v           Show version number
  --help, -h              Show this help

Examples:
  conni-cli list-spaces
  conni-cli get-page '{"pageId":"123456"}'
  conni-cli list-pages '{"spaceKey":"DOCS","limit":5}' --format toon
"""


# ---------------------------------------------------------------------------
# Global flag extraction (flags may appear before or after the command)
# ---------------------------------------------------------------------------


def _extract_global_flags(argv):
    """Extract global flags from argv regardless of position.

    Returns (profile, format_str, verbose, remaining_argv). Format is None
    when not given so the configured default applies.
    """
    profile = None
    fmt = None
    verbose = False
    remaining = []
    i = 0
    while i < len(argv):
        arg = argv[i]
        if arg == "--verbose":
            verbose = True
        elif arg == "--profile":
            if i + 1 >= len(argv):
                raise CliError("--profile requires a profile name.")
            profile = argv[i + 1]
            i += 1
        elif arg == "--format":
            if i + 1 >= len(argv):
                raise CliError("--format requires a value: json or toon.")
            fmt = argv[i + 1]
            if fmt not in config.VALID_FORMATS:
                raise CliError(f"Invalid format '{fmt}'. Use: {', '.join(config.VALID_FORMATS)}")
            i += 1
        else:
            remaining.append(arg)
        i += 1
    return profile, fmt, verbose, remaining


# ---------------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------------


class _CliParser(argparse.ArgumentParser):
    """Parser that raises CliError instead of printing usage and exiting."""

    def error(self, message):
        raise CliError(message)


def build_parser():
    parser = _CliParser(prog=config.PROG, add_help=False)
    parser.add_argument("--help", "-h", action="store_true", dest="show_help")
    parser.add_argument("--version", "-v", action="store_true", dest="show_version")
    parser.add_argument("--commands", action="store_true", dest="list_commands")
    parser.add_argument("command", nargs="?")
    parser.add_argument("params", nargs="?")
    return parser


def _start_shell(profile, fmt):
    session = Session(profile=profile, fmt=fmt)
    try:
        session.connect()
    except ConfigError as e:
        sys.exit(report_config_error(e))
    session.run()
    sys.exit(0)


def _run_setup():
    try:
        cmd_setup()
    except ConfigError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        sys.exit(e.exit_code)
    except (EOFError, KeyboardInterrupt):
        print("\nSetup cancelled.", file=sys.stderr)
        sys.exit(1)
    sys.exit(0)


def main(argv=None):
    if hasattr(sys.stdout, "reconfigure"):
        sys.stdout.reconfigure(encoding="utf-8", errors="replace")
    argv = sys.argv[1:] if argv is None else argv

    try:
        profile, fmt, verbose, remaining = _extract_global_flags(argv)
        ns = build_parser().parse_intermixed_args(remaining)
    except CliError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        sys.exit(e.exit_code)
    if verbose:
        config.HTTP_LOG_ENABLED = True

    if ns.show_version:
        print(f"{config.PROG} {config.VERSION}")
        sys.exit(0)
    if ns.list_commands:
        print(format_command_list())
        sys.exit(0)
    if ns.show_help and not ns.command:
        print(HELP_TEXT)
        sys.exit(0)
    if not ns.command:
        _start_shell(profile, fmt)

    cmd = ns.command
    if cmd == "config":
        _run_setup()
    if get_command(cmd) is None:
        print(
            f"ERROR: Unknown command: {cmd}. Run '{config.PROG} --commands' to see available commands.",
            file=sys.stderr,
        )
        sys.exit(1)

    flag = "-h" if ns.show_help else None
    sys.exit(run_command(cmd, ns.params, flag, profile=profile, fmt=fmt))
