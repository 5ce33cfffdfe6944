# File: entitygen/utils.py
"""
EntityGen - Utility Functions & Helpers
=========================================
String-case conversions used to derive artisan artifact names, PHP literal
quoting, and the small file I/O layer shared by the patcher and the
template writer.

- Naming functions are pure and ``@lru_cache``-decorated; a catalog run
  asks for the same entity names several times per entity.
- ``write_file`` performs a plain full overwrite unless ``atomic=True`` is
  requested.  The non-atomic path is the default used by the patcher: a
  crash mid-write can leave a truncated PHP file behind.
"""

from __future__ import annotations

import functools
import logging
import os
import re
import tempfile
import time
from pathlib import Path
from typing import Dict, FrozenSet, List, Optional, Tuple

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("entitygen.utils")

# ---------------------------------------------------------------------------
# Pre-compiled regex patterns (compiled once at module load)
# ---------------------------------------------------------------------------

_CAMEL_TO_SNAKE_RE1: re.Pattern[str] = re.compile(r"([A-Z]+)([A-Z][a-z])")
_CAMEL_TO_SNAKE_RE2: re.Pattern[str] = re.compile(r"([a-z0-9])([A-Z])")
_NON_ALPHANUM_RE: re.Pattern[str] = re.compile(r"[^a-zA-Z0-9]")
_MULTI_UNDERSCORE_RE: re.Pattern[str] = re.compile(r"_{2,}")
_LEADING_TRAILING_UNDERSCORE_RE: re.Pattern[str] = re.compile(r"^_+|_+$")
_SPLIT_WORDS_RE: re.Pattern[str] = re.compile(
    r"[A-Z]?[a-z]+|[A-Z]+(?=[A-Z][a-z]|\d|\b)|[A-Z]|\d+"
)
_LEADING_WS_RE: re.Pattern[str] = re.compile(r"[ \t]*")

# Irregular nouns likely to show up as table names
_IRREGULAR_PLURALS: Dict[str, str] = {
    "person": "people",
    "child": "children",
    "man": "men",
    "woman": "women",
    "mouse": "mice",
    "goose": "geese",
    "tooth": "teeth",
    "foot": "feet",
    "datum": "data",
    "index": "indices",
    "matrix": "matrices",
    "vertex": "vertices",
    "axis": "axes",
    "crisis": "crises",
    "analysis": "analyses",
    "status": "statuses",
    "address": "addresses",
    "quiz": "quizzes",
}

_IRREGULAR_SINGULARS: Dict[str, str] = {
    plural: singular for singular, plural in _IRREGULAR_PLURALS.items()
}

_UNCOUNTABLE: FrozenSet[str] = frozenset(
    {"equipment", "feedback", "information", "news", "series", "species", "staff"}
)

# "-ves" plurals whose singular ends in "f"/"fe"; every other "-ves" keeps its "e"
_VES_SINGULARS: Dict[str, str] = {
    "calves": "calf",
    "elves": "elf",
    "halves": "half",
    "knives": "knife",
    "leaves": "leaf",
    "lives": "life",
    "loaves": "loaf",
    "selves": "self",
    "shelves": "shelf",
    "thieves": "thief",
    "wives": "wife",
    "wolves": "wolf",
}

# "-oes" plurals that drop "es"; the rest (shoes, toes, canoes) drop "s"
_OES_PLURALS: FrozenSet[str] = frozenset(
    {
        "cargoes", "dominoes", "echoes", "embargoes", "heroes", "mosquitoes",
        "potatoes", "tomatoes", "torpedoes", "vetoes", "volcanoes",
    }
)

_PLAIN_S_PLURALS: FrozenSet[str] = frozenset(
    {
        "avalanches", "brownies", "caches", "calories", "cliches", "cookies",
        "headaches", "lies", "moustaches", "movies", "niches", "pies",
        "rookies", "selfies", "smoothies", "ties", "zombies",
    }
)


# ---------------------------------------------------------------------------
# Cached string transformation functions
# ---------------------------------------------------------------------------


@functools.lru_cache(maxsize=None)
def to_snake_case(name: str) -> str:
    """
    Convert any string to snake_case.

    Examples:
        >>> to_snake_case("OrderItem")
        'order_item'
        >>> to_snake_case("order-items")
        'order_items'
        >>> to_snake_case("already_snake")
        'already_snake'
    """
    if not name:
        return ""
    s: str = _CAMEL_TO_SNAKE_RE1.sub(r"\1_\2", name)
    s = _CAMEL_TO_SNAKE_RE2.sub(r"\1_\2", s)
    s = _NON_ALPHANUM_RE.sub("_", s)
    s = _MULTI_UNDERSCORE_RE.sub("_", s)
    s = _LEADING_TRAILING_UNDERSCORE_RE.sub("", s)
    return s.lower()


@functools.lru_cache(maxsize=None)
def to_plural(name: str) -> str:
    """
    Naive English pluralisation sufficient for table names.

    Words that already end in a single ``s`` are assumed plural.
    """
    if not name:
        return ""

    lower: str = name.lower()

    if lower in _IRREGULAR_PLURALS:
        return _match_case(name, _IRREGULAR_PLURALS[lower])

    if lower in _IRREGULAR_SINGULARS or lower in _UNCOUNTABLE:
        return name

    if lower.endswith("s") and not lower.endswith("ss"):
        return name

    if lower.endswith(("sh", "ch", "x", "z", "ss")):
        return name + "es"
    if lower.endswith("y") and len(name) > 1 and lower[-2] not in "aeiou":
        return name[:-1] + "ies"
    if lower.endswith("fe"):
        return name[:-2] + "ves"
    if lower.endswith("f"):
        return name[:-1] + "ves"
    if lower + "es" in _OES_PLURALS:
        return name + "es"

    return name + "s"


@functools.lru_cache(maxsize=None)
def to_singular(name: str) -> str:
    """Naive English singularisation (reverse of ``to_plural``)."""
    if not name:
        return ""

    lower: str = name.lower()

    if lower in _UNCOUNTABLE:
        return name

    if lower in _IRREGULAR_SINGULARS:
        return _match_case(name, _IRREGULAR_SINGULARS[lower])

    if lower in _VES_SINGULARS:
        return _match_case(name, _VES_SINGULARS[lower])

    # Words whose singular ends in "e": only the trailing "s" goes
    if lower in _PLAIN_S_PLURALS:
        return name[:-1]

    if lower.endswith("ies") and len(name) > 3:
        return name[:-3] + "y"
    if lower.endswith("oes"):
        return name[:-2] if lower in _OES_PLURALS else name[:-1]
    if lower.endswith(("sses", "zzes", "xes", "ches", "shes")):
        return name[:-2]
    if lower.endswith("s") and not lower.endswith("ss"):
        return name[:-1]

    return name


def _match_case(original: str, replacement: str) -> str:
    if original[0].isupper():
        return replacement[0].upper() + replacement[1:]
    return replacement


@functools.lru_cache(maxsize=None)
def to_studly_singular(name: str) -> str:
    """
    Singular StudlyCase class name for an entity.

    Only the last word is singularised so irregular nouns inside compound
    names still resolve.

    Examples:
        >>> to_studly_singular("order_items")
        'OrderItem'
        >>> to_studly_singular("user_addresses")
        'UserAddress'
        >>> to_studly_singular("category_hierarchies")
        'CategoryHierarchy'
    """
    words: List[str] = list(_extract_words(name))
    if not words:
        return ""
    words[-1] = to_singular(words[-1])
    return "".join(word.capitalize() for word in words)


@functools.lru_cache(maxsize=None)
def to_snake_plural(name: str) -> str:
    """
    Plural snake_case table name for an entity.

    Examples:
        >>> to_snake_plural("OrderItem")
        'order_items'
        >>> to_snake_plural("order_items")
        'order_items'
    """
    snake: str = to_snake_case(name)
    if not snake:
        return ""
    head, _, last = snake.rpartition("_")
    plural_last: str = to_plural(last)
    return f"{head}_{plural_last}" if head else plural_last


@functools.lru_cache(maxsize=None)
def _extract_words(name: str) -> Tuple[str, ...]:
    """
    Extract individual words from any casing style.

    Returns a tuple (hashable for the LRU cache) of lowercase words.
    """
    cleaned: str = _NON_ALPHANUM_RE.sub(" ", name)
    words: List[str] = _SPLIT_WORDS_RE.findall(cleaned)
    return tuple(w.lower() for w in words if w)


# ---------------------------------------------------------------------------
# PHP source helpers
# ---------------------------------------------------------------------------


def php_quote(value: str) -> str:
    """Wrap *value* in a single-quoted PHP string literal."""
    escaped: str = value.replace("\\", "\\\\").replace("'", "\\'")
    return f"'{escaped}'"


def leading_whitespace(text: str, pos: int) -> str:
    """Return the indentation of the line containing offset *pos*."""
    line_start: int = text.rfind("\n", 0, pos) + 1
    match: Optional[re.Match[str]] = _LEADING_WS_RE.match(text, line_start, pos)
    return match.group(0) if match else ""


# ---------------------------------------------------------------------------
# File I/O helpers
# ---------------------------------------------------------------------------


def ensure_directory(path: Path) -> None:
    """Create directory (and parents) if it doesn't exist."""
    path.mkdir(parents=True, exist_ok=True)
    logger.debug("Ensured directory exists: %s", path)


def read_file(path: Path) -> str:
    """Read a file and return its content as a string."""
    return path.read_text(encoding="utf-8")


def write_file(path: Path, content: str, atomic: bool = False) -> int:
    """
    Write *content* to *path*, replacing whatever was there.

    When *atomic* is True, writes to a temporary file in the same directory
    first and then renames it over the target.  Otherwise the target is
    truncated and rewritten in place.

    Returns the number of bytes written.
    """
    ensure_directory(path.parent)

    encoded: bytes = content.encode("utf-8")
    byte_count: int = len(encoded)

    if atomic:
        fd: int
        tmp_path: str
        fd, tmp_path = tempfile.mkstemp(
            dir=str(path.parent),
            prefix=f".{path.name}.",
            suffix=".tmp",
        )
        try:
            with os.fdopen(fd, "wb") as handle:
                handle.write(encoded)
            os.replace(tmp_path, str(path))
        except BaseException:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise
    else:
        path.write_bytes(encoded)

    logger.debug("Wrote %d bytes to %s (atomic=%s)", byte_count, path, atomic)
    return byte_count


# ---------------------------------------------------------------------------
# Timer context manager
# ---------------------------------------------------------------------------


class Timer:
    """
    Simple context-manager timer for profiling pipeline steps.

    Usage:
        with Timer("entity users") as t:
            ...
        print(t.elapsed)
    """

    __slots__ = ("label", "start_time", "end_time", "elapsed")

    def __init__(self, label: str = "operation") -> None:
        self.label: str = label
        self.start_time: float = 0.0
        self.end_time: float = 0.0
        self.elapsed: float = 0.0

    def __enter__(self) -> "Timer":
        self.start_time = time.perf_counter()
        return self

    def __exit__(
        self,
        exc_type: Optional[type],
        exc_val: Optional[BaseException],
        exc_tb: Optional[object],
    ) -> None:
        self.end_time = time.perf_counter()
        self.elapsed = self.end_time - self.start_time
        logger.debug("Timer [%s]: %.4f seconds", self.label, self.elapsed)

    def __repr__(self) -> str:
        return f"<Timer {self.label}: {self.elapsed:.4f}s>"


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "to_snake_case",
    "to_plural",
    "to_singular",
    "to_studly_singular",
    "to_snake_plural",
    "php_quote",
    "leading_whitespace",
    "ensure_directory",
    "read_file",
    "write_file",
    "Timer",
]

logger.debug("entitygen.utils loaded — %d public symbols.", len(__all__))
