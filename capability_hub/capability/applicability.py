"""Trait-to-workload applicability resolution.

A trait declares the resource kinds it may attach to as ``appliesTo``
entries of the form ``group/Version.Kind`` (e.g. ``apps/v1.Deployment``).
Resolution rewrites each entry to the resource identifier
``<plural kind>.<group>`` (``deployments.apps``) and matches it against the
installed workloads' ``crd_name`` or capability ``name``.

Entries without a match are dropped silently: a trait whose converted list
is empty applies to nothing currently installed, which is not an error.
"""

from __future__ import annotations

import re
from typing import Iterable, List, Optional, Sequence

from .models import Capability

_IRREGULAR_PLURALS = {
    "person": "people",
    "child": "children",
    "man": "men",
    "woman": "women",
    "mouse": "mice",
    "goose": "geese",
}
_UNCOUNTABLE = {"equipment", "information", "series", "species", "data", "metadata", "news"}


def pluralize(word: str) -> str:
    """Return the English plural of a lowercase noun."""
    if not word or word in _UNCOUNTABLE:
        return word
    if word in _IRREGULAR_PLURALS:
        return _IRREGULAR_PLURALS[word]
    if re.search(r"(s|x|z|ch|sh)$", word):
        return word + "es"
    if re.search(r"[^aeiou]y$", word):
        return word[:-1] + "ies"
    return word + "s"


def parse_applies_to(applies_to: str) -> str:
    """Convert ``group/Version.Kind`` into the ``plural.group`` resource identifier.

    Entries not shaped like ``group/Version.Kind`` are returned unchanged so
    they can still match a workload capability name directly.

    >>> parse_applies_to("apps/v1.Deployment")
    'deployments.apps'
    >>> parse_applies_to("webservice")
    'webservice'
    """
    parts = applies_to.split("/")
    if len(parts) != 2:
        return applies_to
    group, version_kind = parts
    parts = version_kind.split(".")
    if len(parts) != 2:
        return applies_to
    return f"{pluralize(parts[1].lower())}.{group}"


def _matches(entry: str, workloads: Iterable[Capability]) -> List[str]:
    target = parse_applies_to(entry)
    return sorted({w.name for w in workloads if target == w.crd_name or target == w.name})


def resolve(applies_to: Sequence[str], workloads: Sequence[Capability]) -> List[str]:
    """Resolve a trait's ``appliesTo`` list to workload capability names.

    Args:
        applies_to: Declared ``group/Version.Kind`` patterns (or bare names).
        workloads: Known workload capabilities.

    Returns:
        Matching workload names, de-duplicated, in first-seen order of
        ``applies_to``. All workloads matching one entry are listed by name,
        so the result does not depend on the order of ``workloads``.
        Unmatched entries are dropped.
    """
    converted: List[str] = []
    for entry in applies_to:
        for name in _matches(entry, workloads):
            if name not in converted:
                converted.append(name)
    return converted


def narrow_traits(
    traits: Sequence[Capability],
    workloads: Sequence[Capability],
    workload_name: Optional[str] = None,
) -> List[Capability]:
    """Return copies of ``traits`` with ``applies_to`` converted to workload names.

    When ``workload_name`` is given, traits that cannot attach to it are
    excluded and the remaining traits report ``applies_to == [workload_name]``.
    """
    narrowed: List[Capability] = []
    for t in traits:
        converted = resolve(t.applies_to, workloads)
        if workload_name:
            if workload_name not in converted:
                continue
            converted = [workload_name]
        narrowed.append(t.model_copy(update={"applies_to": converted}))
    return narrowed
