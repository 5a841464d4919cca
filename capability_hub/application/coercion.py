"""Coercion of raw user input to a parameter's declared kind.

Input usually comes from flag parsers or JSON bodies, so a value may arrive
either already typed or as text. Coercion first accepts a value of the
declared primitive; a text value of the wrong primitive is then parsed as a
string (``"3"`` for an int, ``"true"`` for a bool). Parameters of kind
``other`` are not bindable and yield ``None``.
"""

from __future__ import annotations

import re
from typing import Any, Optional, Union

from ..capability.enums import ParameterKind
from ..capability.models import Parameter
from ..errors import TypeMismatchError

Value = Union[bool, int, float, str]

_INT_PATTERN = re.compile(r"^[+-]?\d+$")
_TRUE = {"1", "t", "T", "TRUE", "true", "True"}
_FALSE = {"0", "f", "F", "FALSE", "false", "False"}


def _direct(kind: ParameterKind, raw: Any) -> Optional[Value]:
    if kind is ParameterKind.bool:
        return raw if isinstance(raw, bool) else None
    if isinstance(raw, bool):
        return None
    if kind is ParameterKind.int and isinstance(raw, int):
        return raw
    if kind is ParameterKind.float and isinstance(raw, (int, float)):
        return float(raw)
    if kind is ParameterKind.string and isinstance(raw, str):
        return raw
    return None


def _from_string(param: Parameter, raw: str) -> Value:
    kind = param.kind
    if kind is ParameterKind.int:
        if not _INT_PATTERN.match(raw):
            raise TypeMismatchError(param.name, f"invalid integer literal {raw!r}")
        return int(raw, 10)
    if kind is ParameterKind.bool:
        if raw in _TRUE:
            return True
        if raw in _FALSE:
            return False
        raise TypeMismatchError(param.name, f"invalid boolean literal {raw!r}")
    if kind is ParameterKind.float:
        try:
            return float(raw)
        except ValueError:
            raise TypeMismatchError(param.name, f"invalid float literal {raw!r}") from None
    raise TypeMismatchError(param.name, f"should not get string from type({kind.value})")


def coerce(param: Parameter, raw: Any) -> Optional[Value]:
    """Coerce ``raw`` to ``param.kind``.

    Returns:
        The typed value, or ``None`` for parameters of kind ``other``.

    Raises:
        TypeMismatchError: When neither the direct nor the string path
            produces a value of the declared kind.
    """
    if param.kind is ParameterKind.other:
        return None
    value = _direct(param.kind, raw)
    if value is not None:
        return value
    if isinstance(raw, str):
        return _from_string(param, raw)
    raise TypeMismatchError(
        param.name, f"trying to get {param.kind.value} value of flag of type {type(raw).__name__}"
    )
