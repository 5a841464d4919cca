"""Template parameter schema extraction.

Capability templates are CUE documents carrying a top-level ``parameter``
struct, e.g.::

    parameter: {
        // +usage=Which image would you like to use for your service
        // +short=i
        image: string
        // +alias=replica-count
        replicas: *1 | int
        cmd?: [...string]
    }

Only the ``parameter`` block is evaluated. Each top-level field becomes a
:class:`~capability_hub.capability.models.Parameter`:

- ``name?:`` marks an optional field; a ``*default`` marks a default value.
  A field is required when it is neither optional nor defaulted.
- ``int``/``uint``/``intN``, ``string``, ``bool`` and ``float``/``number``
  map to the matching :class:`ParameterKind`; structs, lists and anything
  else map to ``ParameterKind.other``.
- ``// +usage=``, ``// +short=`` and ``// +alias=`` comment labels directly
  above a field annotate it.
"""

from __future__ import annotations

import json
import re
from typing import Any, Dict, List, Optional, Tuple

from ..errors import TemplateError
from .enums import ParameterKind
from .models import Parameter

_PARAMETER_BLOCK = re.compile(r"^\s*parameter\s*:\s*\{", re.MULTILINE)
_FIELD = re.compile(r'^\s*("?)([A-Za-z_$][\w$-]*)\1\s*([?!]?)\s*:\s*(.*)$')
_LABEL = re.compile(r"^\s*//\s*\+(\w+)(?:=(.*))?$")
_INT_TYPES = {"int", "uint", "int8", "int16", "int32", "int64", "uint8", "uint16", "uint32", "uint64"}
_FLOAT_TYPES = {"float", "number", "float32", "float64"}

_JSON_TYPES = {
    ParameterKind.int: "integer",
    ParameterKind.string: "string",
    ParameterKind.bool: "boolean",
    ParameterKind.float: "number",
}


def _depth_delta(text: str) -> int:
    """Net bracket depth change of ``text``, ignoring string literals and comments."""
    depth = 0
    in_string = False
    escaped = False
    i = 0
    while i < len(text):
        ch = text[i]
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
        elif ch == '"':
            in_string = True
        elif text.startswith("//", i):
            break
        elif ch in "{[(":
            depth += 1
        elif ch in "}])":
            depth -= 1
        i += 1
    return depth


def _strip_comment(text: str) -> str:
    in_string = False
    for i, ch in enumerate(text):
        if ch == '"' and (i == 0 or text[i - 1] != "\\"):
            in_string = not in_string
        elif not in_string and text.startswith("//", i):
            return text[:i].rstrip()
    return text.rstrip()


def extract_parameter_block(template: str) -> Optional[str]:
    """Return the body of the top-level ``parameter`` struct, or ``None``."""
    match = _PARAMETER_BLOCK.search(template)
    if match is None:
        return None
    start = match.end()
    depth = 1
    in_string = False
    for i in range(start, len(template)):
        ch = template[i]
        if ch == '"' and template[i - 1] != "\\":
            in_string = not in_string
        if in_string:
            continue
        if ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                return template[start:i]
    raise TemplateError("unterminated parameter block in template")


def _split_alternatives(expr: str) -> List[str]:
    parts: List[str] = []
    depth = 0
    current = ""
    in_string = False
    for ch in expr:
        if ch == '"':
            in_string = not in_string
        if not in_string:
            if ch in "{[(":
                depth += 1
            elif ch in "}])":
                depth -= 1
            elif ch == "|" and depth == 0:
                parts.append(current.strip())
                current = ""
                continue
        current += ch
    if current.strip():
        parts.append(current.strip())
    return parts


def _parse_literal(text: str) -> Tuple[ParameterKind, Any]:
    text = text.strip()
    if text in ("true", "false"):
        return ParameterKind.bool, text == "true"
    if text.startswith('"'):
        try:
            return ParameterKind.string, json.loads(text)
        except ValueError:
            return ParameterKind.string, text.strip('"')
    try:
        return ParameterKind.int, int(text)
    except ValueError:
        pass
    try:
        return ParameterKind.float, float(text)
    except ValueError:
        return ParameterKind.other, None


def _kind_of_type(text: str) -> Optional[ParameterKind]:
    head = text.split("&")[0].strip()
    if head in _INT_TYPES:
        return ParameterKind.int
    if head in _FLOAT_TYPES:
        return ParameterKind.float
    if head == "string":
        return ParameterKind.string
    if head == "bool":
        return ParameterKind.bool
    if head.startswith(("{", "[")):
        return ParameterKind.other
    return None


def parse_field_type(expr: str) -> Tuple[ParameterKind, bool, Any]:
    """Parse a CUE field expression into ``(kind, has_default, default)``."""
    expr = _strip_comment(expr)
    kinds: List[ParameterKind] = []
    has_default = False
    default: Any = None
    for alt in _split_alternatives(expr):
        if alt.startswith("*"):
            literal_kind, default = _parse_literal(alt[1:])
            has_default = True
            kinds.append(literal_kind)
            continue
        kind = _kind_of_type(alt)
        if kind is None:
            kind, _ = _parse_literal(alt)
        kinds.append(kind)
    # A declared type wins over literal kinds (``*80 | int``).
    declared = [k for k in kinds if k is not ParameterKind.other]
    if not declared or len(set(declared)) > 1:
        # ``*1 | float`` mixes int and float literals; CUE treats it as a number.
        if set(declared) == {ParameterKind.int, ParameterKind.float}:
            return ParameterKind.float, has_default, default
        return ParameterKind.other, has_default, default
    return declared[0], has_default, default


def parse_parameters(template: str) -> List[Parameter]:
    """Evaluate the parameter schema of a template body.

    Args:
        template: Raw CUE template text.

    Returns:
        Parameters in declaration order. Templates without a ``parameter``
        block declare no parameters.

    Raises:
        TemplateError: If the parameter block is not terminated.
    """
    block = extract_parameter_block(template)
    if block is None:
        return []

    params: List[Parameter] = []
    labels: Dict[str, str] = {}
    depth = 0
    for line in block.splitlines():
        stripped = line.strip()
        if depth == 0:
            label = _LABEL.match(stripped)
            if label is not None:
                labels[label.group(1)] = (label.group(2) or "").strip()
                continue
            field = _FIELD.match(stripped)
            if field is not None:
                name, marker, expr = field.group(2), field.group(3), field.group(4)
                kind, has_default, default = parse_field_type(expr)
                params.append(
                    Parameter(
                        name=name,
                        alias=labels.get("alias") or None,
                        kind=kind,
                        required=marker != "?" and not has_default,
                        default=default,
                        usage=labels.get("usage") or None,
                        short=labels.get("short") or None,
                    )
                )
                labels = {}
            elif stripped and not stripped.startswith("//"):
                labels = {}
        depth += _depth_delta(line)
    return params


def parameters_to_json_schema(params: List[Parameter]) -> Dict[str, Any]:
    """Render a parameter list as a JSON Schema object."""
    properties: Dict[str, Any] = {}
    required: List[str] = []
    for p in params:
        prop: Dict[str, Any] = {"title": p.name}
        if p.kind in _JSON_TYPES:
            prop["type"] = _JSON_TYPES[p.kind]
        if p.default is not None:
            prop["default"] = p.default
        if p.usage:
            prop["description"] = p.usage
        properties[p.name] = prop
        if p.required:
            required.append(p.name)
    schema: Dict[str, Any] = {"type": "object", "properties": properties}
    if required:
        schema["required"] = required
    return schema
