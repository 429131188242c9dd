"""
Headless front-end: run exactly one command and report an exit code.
"""

import sys

from conni_cli.dispatcher import CommandDispatcher
from conni_cli.exceptions import ConfigError
from conni_cli.profiles import SETUP_HINT, load_config
from conni_cli.registry import format_command_detail

HELP_FLAGS = ("-h", "--help")


def report_config_error(err):
    """Print a bootstrap failure with the setup hint and return its exit code."""
    message = str(err)
    if SETUP_HINT not in message:
        message = f"{message} {SETUP_HINT}"
    print(f"ERROR: {message}", file=sys.stderr)
    return err.exit_code


def emit(envelope):
    """Print a ResultEnvelope: result to stdout, error to stderr."""
    if envelope.success:
        print(envelope.result)
    else:
        print(envelope.error, file=sys.stderr)


def run_command(command, params=None, flag=None, profile=None, fmt=None, project_root=None):
    """Dispatch one command and return the process exit code.

    *params* is the raw JSON argument string (or None); *flag* is the bare
    flag token from the command line, if any. The client pool is always
    cleared before returning.
    """
    if flag in HELP_FLAGS:
        print(format_command_detail(command))
        return 0

    dispatcher = None
    try:
        try:
            profile_config = load_config(project_root)
        except ConfigError as e:
            return report_config_error(e)
        dispatcher = CommandDispatcher(profile_config)
        envelope = dispatcher.dispatch_json(command, params, profile=profile, fmt=fmt)
        emit(envelope)
        return envelope.exit_code
    finally:
        if dispatcher is not None:
            dispatcher.close()
