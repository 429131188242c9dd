"""
CommandDispatcher — the single entry point shared by every front-end.

``dispatch()`` turns (command, argument bag, profile, format) into a
ResultEnvelope. It validates against the registry, resolves the client via
ClientPool, runs the command body and converts every exception into a failed
envelope, so front-ends only ever render.
"""

from __future__ import annotations

from typing import Any

from conni_cli import config
from conni_cli._utils import is_blank
from conni_cli.api import _safe_json_parse
from conni_cli.exceptions import (
    ArgumentParseError,
    CliError,
    MissingArgumentError,
    UnknownCommandError,
)
from conni_cli.models import ObjectPayload, ResultEnvelope
from conni_cli.pool import ClientPool
from conni_cli.profiles import ProfileConfig
from conni_cli.registry import ArgSpec, CommandSpec, get_command


def parse_args_json(args_json: str | None) -> dict[str, Any]:
    """Parse the headless JSON argument string. Empty input means no arguments."""
    if args_json is None or not str(args_json).strip():
        return {}
    return ObjectPayload.from_value(_safe_json_parse(args_json, "arguments"), "arguments").data


def _coerce(arg: ArgSpec, value):
    if arg.kind is int:
        if isinstance(value, bool):
            raise ArgumentParseError(f'"{arg.name}" must be an integer, got {value!r}')
        if isinstance(value, int):
            return value
        if isinstance(value, float) and value.is_integer():
            return int(value)
        if isinstance(value, str):
            try:
                return int(value.strip())
            except ValueError:
                pass
        raise ArgumentParseError(f'"{arg.name}" must be an integer, got {value!r}')
    if isinstance(value, (dict, list)):
        raise ArgumentParseError(f'"{arg.name}" must be a string, got {type(value).__name__}')
    return value if isinstance(value, str) else str(value)


def validate_args(spec: CommandSpec, args: dict[str, Any]) -> dict[str, Any]:
    """Check required arguments and coerce types.

    Returns handler keyword arguments. Every missing required argument is
    reported in one MissingArgumentError. Optional arguments that are absent
    are omitted so handler defaults apply; a present ``0`` is kept.
    """
    missing = [arg.name for arg in spec.args if arg.required and is_blank(args.get(arg.name))]
    if missing:
        raise MissingArgumentError(spec.name, missing)
    kwargs = {}
    for arg in spec.handler_args():
        value = args.get(arg.name)
        if value is None:
            continue
        kwargs[arg.param] = _coerce(arg, value)
    return kwargs


def _first_present(name, *values):
    """First non-blank value; anything present must be a string."""
    for value in values:
        if is_blank(value):
            continue
        if not isinstance(value, str):
            raise ArgumentParseError(f'"{name}" must be a string, got {type(value).__name__}')
        return value.strip()
    return None


class CommandDispatcher:
    """Validates and runs commands against per-profile clients.

    The pool is injected so a session can own it (and clear it) explicitly.
    """

    def __init__(self, profile_config: ProfileConfig, pool: ClientPool | None = None):
        self.profile_config = profile_config
        self.pool = pool if pool is not None else ClientPool(profile_config)

    def resolve_profile(self, override=None, args=None) -> str:
        return _first_present(
            "profile",
            override,
            (args or {}).get("profile"),
            self.profile_config.default_profile,
        )

    def resolve_format(self, override=None, args=None) -> str:
        fmt = _first_present(
            "format",
            override,
            (args or {}).get("format"),
            self.profile_config.default_format,
        )
        if fmt not in config.VALID_FORMATS:
            raise ArgumentParseError(
                f"Invalid format '{fmt}'. Use: {', '.join(config.VALID_FORMATS)}"
            )
        return fmt

    def dispatch(self, command, args=None, profile=None, fmt=None) -> ResultEnvelope:
        """Run one command. Never raises for user-triggerable failures."""
        try:
            spec = get_command(command)
            if spec is None:
                raise UnknownCommandError(command)
            if args is None:
                args = {}
            elif not isinstance(args, dict):
                raise ArgumentParseError(
                    f"Arguments must be an object, got {type(args).__name__}."
                )
            target_profile = self.resolve_profile(profile, args)
            target_format = self.resolve_format(fmt, args)
            kwargs = validate_args(spec, args)
            client = self.pool.get(target_profile)
        except CliError as e:
            return ResultEnvelope.fail(str(e))
        except Exception as e:
            return ResultEnvelope.fail(str(e) or type(e).__name__)

        if spec.wants_profile:
            kwargs["profile"] = target_profile
        try:
            return spec.handler(client, target_format, **kwargs)
        except CliError as e:
            return ResultEnvelope.fail(str(e))
        except Exception as e:
            return ResultEnvelope.fail(str(e) or type(e).__name__)

    def dispatch_json(self, command, args_json=None, profile=None, fmt=None) -> ResultEnvelope:
        """Headless shape: the argument bag arrives as a JSON string."""
        try:
            args = parse_args_json(args_json)
        except CliError as e:
            return ResultEnvelope.fail(str(e))
        return self.dispatch(command, args, profile=profile, fmt=fmt)

    def reload(self, profile_config: ProfileConfig) -> None:
        """Adopt a new config; every pooled client is torn down."""
        self.profile_config = profile_config
        self.pool.reset(profile_config)

    def close(self) -> None:
        self.pool.clear()
