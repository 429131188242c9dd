"""
conni-cli exception hierarchy.

All custom exceptions live here to avoid circular imports.
"""


class CliError(Exception):
    """Exit code 1 — validation, not-found, network, parse errors."""

    exit_code = 1


class ConfigError(CliError):
    """Exit code 2 — config file missing, malformed, or invalid."""

    exit_code = 2


class ProfileNotFoundError(CliError):
    """Named profile is not defined in the loaded configuration."""

    def __init__(self, profile, available=()):
        self.profile = profile
        self.available = tuple(available)
        hint = f" Available: {', '.join(self.available)}" if self.available else ""
        super().__init__(f'Profile "{profile}" not found.{hint}')


class UnknownCommandError(CliError):
    def __init__(self, command):
        self.command = command
        super().__init__(
            f'Unknown command: {command}. Type "commands" to see available commands.'
        )


class MissingArgumentError(CliError):
    """One or more required arguments are absent. Lists every missing name."""

    def __init__(self, command, missing):
        self.command = command
        self.missing = tuple(missing)
        names = ", ".join(f'"{name}"' for name in self.missing)
        noun = "argument" if len(self.missing) == 1 else "arguments"
        super().__init__(f"Missing required {noun} for {command}: {names}")


class ArgumentParseError(CliError):
    """Argument string is not valid JSON or an argument has the wrong type."""


class RemoteOperationError(CliError):
    """Failure reported by the remote API or the transport underneath it."""


class HTTPError(Exception):
    """Raised by _http_request for HTTP errors that callers want to handle."""

    def __init__(self, code, reason, body, headers=None):
        self.code = code
        self.reason = reason
        self.body = body
        self.headers = headers or {}
