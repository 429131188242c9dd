"""Core helpers: dispatcher caching and the _call bridge into CommandDispatcher."""

from __future__ import annotations

from conni_cli.dispatcher import CommandDispatcher
from conni_cli.exceptions import ConfigError
from conni_cli.models import ResultEnvelope
from conni_cli.profiles import load_config
from conni_cli.registry import get_command

_dispatcher: CommandDispatcher | None = None


def _get_dispatcher() -> CommandDispatcher:
    """Return a cached CommandDispatcher, loading configuration on first use."""
    global _dispatcher
    if _dispatcher is None:
        _dispatcher = CommandDispatcher(load_config())
    return _dispatcher


def _reset_dispatcher() -> None:
    """Drop the cached dispatcher and tear down its pooled clients."""
    global _dispatcher
    if _dispatcher is not None:
        _dispatcher.close()
    _dispatcher = None


def _call(command: str, profile: str | None = None, format: str | None = None, **kwargs) -> dict:
    """Dispatch *command* with handler-style keyword arguments.

    Keyword names are the Python parameter names (``space_key``); they are
    mapped back to the argument names the registry validates (``spaceKey``).
    """
    spec = get_command(command)
    if spec is None:
        return ResultEnvelope.fail(f"Unknown command: {command}").to_dict()
    by_param = {arg.param: arg.name for arg in spec.args}
    args = {by_param.get(key, key): value for key, value in kwargs.items() if value is not None}
    try:
        dispatcher = _get_dispatcher()
    except ConfigError as e:
        return ResultEnvelope.fail(str(e)).to_dict()
    return dispatcher.dispatch(command, args, profile=profile, fmt=format).to_dict()
