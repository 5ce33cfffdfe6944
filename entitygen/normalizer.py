# File: entitygen/normalizer.py
"""
EntityGen - Type Normalizer
=============================
Maps free-text column descriptors onto the closed ``TypeTag`` vocabulary
and extracts the foreign-key flag.

Two catalog dialects are understood, each with exactly one column parser:

- ``simple``: framework-native tags (``string``, ``foreignId``, ...).  A
  value that is not a known tag (the original catalog's ``email``) is
  normalised like a verbose descriptor.
- ``verbose``: SQL-like descriptors such as ``INT REFERENCES users(id)``
  or ``VARCHAR(255) hashed``.

``normalize`` is total: every input maps to exactly one tag, defaulting to
``string``.
"""

from __future__ import annotations

import logging
from typing import Callable, Dict, List, Tuple, Union

from entitygen.models import ColumnSpec, SchemaDialect, TypeTag

logger: logging.Logger = logging.getLogger("entitygen.normalizer")

# Evaluated top to bottom, first substring hit wins.
_TYPE_RULES: Tuple[Tuple[str, TypeTag], ...] = (
    ("int", TypeTag.INTEGER),
    ("varchar", TypeTag.STRING),
    ("text", TypeTag.TEXT),
    ("timestamp", TypeTag.DATETIME),
)

DEFAULT_TYPE: TypeTag = TypeTag.STRING

_FOREIGN_KEY_MARKERS: Tuple[str, ...] = ("reference", "foreign key")

_KNOWN_TAGS: Dict[str, TypeTag] = {tag.value: tag for tag in TypeTag}

ColumnParser = Callable[[str, str], ColumnSpec]


def classify_type(raw_type: str) -> TypeTag:
    """Return the ``TypeTag`` for a descriptor; never fails."""
    lowered: str = raw_type.lower()
    for token, tag in _TYPE_RULES:
        if token in lowered:
            return tag
    return DEFAULT_TYPE


def is_foreign_key(raw_type: str) -> bool:
    lowered: str = raw_type.lower()
    return any(marker in lowered for marker in _FOREIGN_KEY_MARKERS)


def normalize(raw_type: str) -> Tuple[TypeTag, bool]:
    """
    Normalise a descriptor into ``(target_type, is_foreign_key)``.

    Examples:
        >>> normalize("INT REFERENCES users(id)")
        (<TypeTag.INTEGER: 'integer'>, True)
        >>> normalize("VARCHAR(255) hashed")
        (<TypeTag.STRING: 'string'>, False)
        >>> normalize("json")
        (<TypeTag.STRING: 'string'>, False)
    """
    return classify_type(raw_type), is_foreign_key(raw_type)


# ---------------------------------------------------------------------------
# Per-dialect column parsers
# ---------------------------------------------------------------------------


def parse_simple_column(name: str, raw_type: str) -> ColumnSpec:
    """Parse a column written with framework-native tags."""
    tag = _KNOWN_TAGS.get(raw_type.strip())
    if tag is not None:
        return ColumnSpec(
            name=name,
            raw_type=raw_type,
            target_type=tag,
            is_foreign_key=tag is TypeTag.FOREIGN_ID or is_foreign_key(raw_type),
        )

    target, fk = normalize(raw_type)
    logger.debug(
        "Column '%s': '%s' is not a native tag, normalised to '%s'.",
        name,
        raw_type,
        target.value,
    )
    return ColumnSpec(name=name, raw_type=raw_type, target_type=target, is_foreign_key=fk)


def parse_verbose_column(name: str, raw_type: str) -> ColumnSpec:
    """Parse a column written as an SQL-like descriptor."""
    target, fk = normalize(raw_type)
    return ColumnSpec(name=name, raw_type=raw_type, target_type=target, is_foreign_key=fk)


COLUMN_PARSERS: Dict[SchemaDialect, ColumnParser] = {
    SchemaDialect.SIMPLE: parse_simple_column,
    SchemaDialect.VERBOSE: parse_verbose_column,
}


def get_column_parser(dialect: Union[SchemaDialect, str]) -> ColumnParser:
    """Look up the parser for *dialect*; raises ``ValueError`` if unknown."""
    try:
        return COLUMN_PARSERS[SchemaDialect(dialect)]
    except ValueError as exc:
        raise ValueError(
            f"Unknown catalog dialect '{dialect}'. "
            f"Expected one of: {[d.value for d in SchemaDialect]}."
        ) from exc


__all__: List[str] = [
    "DEFAULT_TYPE",
    "COLUMN_PARSERS",
    "ColumnParser",
    "classify_type",
    "is_foreign_key",
    "normalize",
    "parse_simple_column",
    "parse_verbose_column",
    "get_column_parser",
]
