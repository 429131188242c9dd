"""
Typed models for command payloads and results.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from conni_cli.exceptions import ArgumentParseError

ERROR_PREFIX = "ERROR: "


@dataclass(frozen=True)
class ObjectPayload:
    """Typed wrapper for raw JSON object payloads."""

    data: dict

    @classmethod
    def from_value(cls, value, context):
        if isinstance(value, dict):
            return cls(data=value)
        raise ArgumentParseError(
            f"Invalid JSON in {context}: expected object, got {type(value).__name__}."
        )


@dataclass(frozen=True)
class ResultEnvelope:
    """Uniform outcome of one dispatched command.

    Success carries ``data`` (structured) and ``result`` (rendered string);
    failure carries only ``error``, always starting with ``ERROR: ``.
    Build instances with ``ok()`` / ``fail()`` rather than the constructor.
    """

    success: bool
    data: Any = None
    result: str | None = None
    error: str | None = None

    def __post_init__(self):
        if self.success:
            if self.result is None or self.error is not None:
                raise ValueError("successful envelope needs result and no error")
        elif self.error is None or self.result is not None or self.data is not None:
            raise ValueError("failed envelope needs error and nothing else")

    @classmethod
    def ok(cls, data, result):
        return cls(success=True, data=data, result=result)

    @classmethod
    def fail(cls, message):
        message = str(message)
        if not message.startswith(ERROR_PREFIX):
            message = ERROR_PREFIX + message
        return cls(success=False, error=message)

    @property
    def exit_code(self):
        return 0 if self.success else 1

    def to_dict(self):
        if self.success:
            return {"success": True, "data": self.data, "result": self.result}
        return {"success": False, "error": self.error}
