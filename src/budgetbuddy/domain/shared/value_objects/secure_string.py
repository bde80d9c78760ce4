"""Secure string value object for sensitive data."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from pydantic import GetCoreSchemaHandler
from pydantic_core import core_schema


@dataclass(frozen=True)
class SecureString:
    """
    Value object that wraps bank passwords, client secrets and API tokens.

    str() and repr() are masked so the value never ends up in logs or
    error messages. The actual value is only accessible via get_value().
    """

    _value: str

    def __post_init__(self):
        if not isinstance(self._value, str):
            msg = "SecureString value must be a string"
            raise TypeError(msg)

        if not self._value:
            msg = "SecureString cannot be empty"
            raise ValueError(msg)

    def get_value(self) -> str:
        """Get the actual sensitive value."""
        return self._value

    def __str__(self) -> str:
        return "*****"

    def __repr__(self) -> str:
        return "SecureString(*****)"

    @classmethod
    def __get_pydantic_core_schema__(
        cls,
        source_type: Any,
        handler: GetCoreSchemaHandler,
    ) -> core_schema.CoreSchema:
        """Validate plain strings into SecureString and always dump masked."""
        return core_schema.no_info_plain_validator_function(
            cls._pydantic_validate,
            serialization=core_schema.plain_serializer_function_ser_schema(
                lambda _: "*****",
                return_schema=core_schema.str_schema(),
            ),
        )

    @classmethod
    def _pydantic_validate(cls, value: Any) -> SecureString:
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            return cls(value)
        msg = f"SecureString expects str, got {type(value).__name__}"
        raise TypeError(msg)
