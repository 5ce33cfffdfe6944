# File: entitygen/patcher.py
"""
EntityGen - File Patcher
==========================
Text-level edits applied to files the artisan generators just produced
(``patch`` strategy only):

``insert_columns``
    Splices one ``$table-><type>('<name>');`` line per column right after
    the migration's ``$table->id();`` anchor, in column order.

``set_fillable``
    Replaces the model's first ``protected $fillable = [...];`` block with
    one listing the catalog's columns.  Artisan's model stub ships without
    such a block, so when none exists one is inserted after the class's
    trait ``use`` lines (or right after the opening brace).

Each operation has a pure ``*_text`` twin that works on strings; the file
wrappers read, patch and write back with a full overwrite.  Unless
``atomic=True`` is passed, a crash mid-write can leave a truncated file.
"""

from __future__ import annotations

import logging
import re
from enum import Enum
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

from entitygen.models import ColumnSpec
from entitygen.utils import leading_whitespace, php_quote, read_file, write_file

logger: logging.Logger = logging.getLogger("entitygen.patcher")

MIGRATION_ANCHOR: str = "$table->id();"

_DEFAULT_MEMBER_INDENT: str = "    "

_FILLABLE_RE: re.Pattern[str] = re.compile(
    r"protected\s+\$fillable\s*=\s*\[.*?\];", re.DOTALL
)
_CLASS_OPEN_RE: re.Pattern[str] = re.compile(
    r"^[ \t]*(?:(?:final|abstract|readonly)\s+)*class\s+\w+[^{]*\{", re.MULTILINE
)
_TRAIT_USE_RE: re.Pattern[str] = re.compile(r"[ \t]*(?:\n[ \t]*)*\n([ \t]*)use\s+[^;\n]+;")


class PatchStatus(str, Enum):
    """Outcome of a patch operation."""

    APPLIED = "applied"
    ANCHOR_NOT_FOUND = "anchor_not_found"
    REPLACED = "replaced"
    INSERTED = "inserted"
    PATTERN_NOT_MATCHED = "pattern_not_matched"


class PatchError(Exception):
    """A file could not be read or written while patching."""

    def __init__(self, path: Path, reason: BaseException) -> None:
        self.path: Path = path
        self.reason: BaseException = reason
        super().__init__(f"{self.action} {path}: {reason}")

    action: str = "Cannot patch"


class FileNotReadable(PatchError):
    action = "Cannot read"


class FileNotWritable(PatchError):
    action = "Cannot write"


# ---------------------------------------------------------------------------
# Migration columns
# ---------------------------------------------------------------------------


def insert_columns_text(text: str, columns: Sequence[ColumnSpec]) -> Optional[str]:
    """
    Return *text* with the column declarations spliced in after the anchor,
    or ``None`` when the anchor is absent.

    The new lines take the anchor line's indentation.
    """
    pos: int = text.find(MIGRATION_ANCHOR)
    if pos == -1:
        return None

    indent: str = leading_whitespace(text, pos)
    end: int = pos + len(MIGRATION_ANCHOR)
    block: str = "".join(f"\n{indent}{col.declaration}" for col in columns)
    return text[:end] + block + text[end:]


def insert_columns(
    path: Path,
    columns: Sequence[ColumnSpec],
    *,
    atomic: bool = False,
) -> PatchStatus:
    """
    Patch the migration at *path* in place.

    Returns ``ANCHOR_NOT_FOUND`` (file untouched) when the anchor is missing.

    Raises:
        FileNotReadable / FileNotWritable: On I/O failure.
    """
    text: str = _read(path)
    patched: Optional[str] = insert_columns_text(text, columns)

    if patched is None:
        logger.warning(
            "Anchor '%s' not found in %s; columns not inserted.",
            MIGRATION_ANCHOR,
            path,
        )
        return PatchStatus.ANCHOR_NOT_FOUND

    _write(path, patched, atomic)
    logger.info("Inserted %d column(s) into %s.", len(columns), path.name)
    return PatchStatus.APPLIED


# ---------------------------------------------------------------------------
# Model fillable list
# ---------------------------------------------------------------------------


def build_fillable_block(
    names: Sequence[str],
    member_indent: str = _DEFAULT_MEMBER_INDENT,
) -> str:
    """
    Build the ``$fillable`` declaration, starting at ``protected``.

    *member_indent* is the indentation of the declaration itself; items are
    indented one level deeper.

    Examples:
        >>> build_fillable_block([])
        'protected $fillable = [];'
        >>> print(build_fillable_block(["name", "email"]))
        protected $fillable = [
                'name',
                'email',
            ];
    """
    if not names:
        return "protected $fillable = [];"
    item_indent: str = member_indent + _DEFAULT_MEMBER_INDENT
    items: str = "".join(f"\n{item_indent}{php_quote(name)}," for name in names)
    return f"protected $fillable = [{items}\n{member_indent}];"


def set_fillable_text(text: str, names: Sequence[str]) -> Tuple[str, PatchStatus]:
    """
    Replace the first fillable block, or insert one when there is none.

    Returns the new text and ``REPLACED``, ``INSERTED`` or, when no class
    body can be found, the unchanged text and ``PATTERN_NOT_MATCHED``.
    """
    existing: Optional[re.Match[str]] = _FILLABLE_RE.search(text)
    if existing is not None:
        indent: str = leading_whitespace(text, existing.start())
        block: str = build_fillable_block(names, indent or _DEFAULT_MEMBER_INDENT)
        patched: str = text[: existing.start()] + block + text[existing.end():]
        return patched, PatchStatus.REPLACED

    class_open: Optional[re.Match[str]] = _CLASS_OPEN_RE.search(text)
    if class_open is None:
        return text, PatchStatus.PATTERN_NOT_MATCHED

    pos: int = class_open.end()
    member_indent: str = _DEFAULT_MEMBER_INDENT
    while True:
        trait: Optional[re.Match[str]] = _TRAIT_USE_RE.match(text, pos)
        if trait is None:
            break
        member_indent = trait.group(1) or member_indent
        pos = trait.end()

    separator: str = "\n\n" if pos != class_open.end() else "\n"
    block = build_fillable_block(names, member_indent)
    patched = text[:pos] + f"{separator}{member_indent}{block}" + text[pos:]
    return patched, PatchStatus.INSERTED


def set_fillable(
    path: Path,
    names: Sequence[str],
    *,
    atomic: bool = False,
) -> PatchStatus:
    """
    Patch the model at *path* in place.

    Raises:
        FileNotReadable / FileNotWritable: On I/O failure.
    """
    text: str = _read(path)
    patched, status = set_fillable_text(text, names)

    if status is PatchStatus.PATTERN_NOT_MATCHED:
        logger.warning("No class body found in %s; fillable list not set.", path)
        return status

    _write(path, patched, atomic)
    logger.info("Fillable list %s in %s (%d field(s)).", status.value, path.name, len(names))
    return status


# ---------------------------------------------------------------------------
# I/O
# ---------------------------------------------------------------------------


def _read(path: Path) -> str:
    try:
        return read_file(path)
    except (OSError, UnicodeDecodeError) as exc:
        raise FileNotReadable(path, exc) from exc


def _write(path: Path, content: str, atomic: bool) -> None:
    try:
        write_file(path, content, atomic=atomic)
    except OSError as exc:
        raise FileNotWritable(path, exc) from exc


__all__: List[str] = [
    "MIGRATION_ANCHOR",
    "PatchStatus",
    "PatchError",
    "FileNotReadable",
    "FileNotWritable",
    "insert_columns_text",
    "insert_columns",
    "build_fillable_block",
    "set_fillable_text",
    "set_fillable",
]
