"""
tests/test_patcher.py
Unit tests for entitygen.patcher: migration column insertion and the
model fillable patch, on strings and on files.
"""

from __future__ import annotations

import pathlib

import pytest

from conftest import MIGRATION_STUB, MODEL_STUB
from entitygen.normalizer import parse_simple_column
from entitygen.patcher import (
    MIGRATION_ANCHOR,
    FileNotReadable,
    PatchStatus,
    build_fillable_block,
    insert_columns,
    insert_columns_text,
    set_fillable,
    set_fillable_text,
)


@pytest.fixture()
def columns():
    return [
        parse_simple_column("order_id", "foreignId"),
        parse_simple_column("product_id", "foreignId"),
        parse_simple_column("quantity", "integer"),
    ]


@pytest.fixture()
def migration_text() -> str:
    return MIGRATION_STUB.replace("{{ table }}", "order_items")


@pytest.fixture()
def model_text() -> str:
    return MODEL_STUB.replace("{{ class }}", "User")


class TestInsertColumns:

    def test_lines_follow_anchor_in_order(self, migration_text, columns) -> None:
        patched = insert_columns_text(migration_text, columns)
        assert patched is not None
        expected = (
            "            $table->id();\n"
            "            $table->foreignId('order_id');\n"
            "            $table->foreignId('product_id');\n"
            "            $table->integer('quantity');\n"
            "            $table->timestamps();\n"
        )
        assert expected in patched

    def test_adds_exactly_n_lines(self, migration_text, columns) -> None:
        patched = insert_columns_text(migration_text, columns)
        assert patched.count("\n") == migration_text.count("\n") + len(columns)

    def test_no_columns_is_unchanged(self, migration_text) -> None:
        assert insert_columns_text(migration_text, []) == migration_text

    def test_missing_anchor(self, columns) -> None:
        assert insert_columns_text("<?php\n// nothing\n", columns) is None

    def test_only_first_anchor_used(self, columns) -> None:
        text = f"{MIGRATION_ANCHOR}\n{MIGRATION_ANCHOR}\n"
        patched = insert_columns_text(text, columns[:1])
        assert patched == (
            f"{MIGRATION_ANCHOR}\n$table->foreignId('order_id');\n{MIGRATION_ANCHOR}\n"
        )

    def test_file_patch(self, tmp_path: pathlib.Path, migration_text, columns) -> None:
        path = tmp_path / "2023_10_28_005122_create_order_items_table.php"
        path.write_text(migration_text, encoding="utf-8")
        assert insert_columns(path, columns) is PatchStatus.APPLIED
        assert "$table->integer('quantity');" in path.read_text(encoding="utf-8")

    def test_file_without_anchor_untouched(self, tmp_path: pathlib.Path, columns) -> None:
        path = tmp_path / "custom.php"
        path.write_text("<?php\n", encoding="utf-8")
        assert insert_columns(path, columns, atomic=True) is PatchStatus.ANCHOR_NOT_FOUND
        assert path.read_text(encoding="utf-8") == "<?php\n"

    def test_unreadable_file(self, tmp_path: pathlib.Path, columns) -> None:
        with pytest.raises(FileNotReadable):
            insert_columns(tmp_path / "missing.php", columns)


class TestFillableBlock:

    def test_empty(self) -> None:
        assert build_fillable_block([]) == "protected $fillable = [];"

    def test_items(self) -> None:
        assert build_fillable_block(["name", "email"]) == (
            "protected $fillable = [\n"
            "        'name',\n"
            "        'email',\n"
            "    ];"
        )


class TestSetFillable:

    def test_replaces_existing_block(self) -> None:
        text = (
            "class User extends Model\n"
            "{\n"
            "    protected $fillable = ['old', 'fields'];\n"
            "}\n"
        )
        patched, status = set_fillable_text(text, ["name", "email"])
        assert status is PatchStatus.REPLACED
        assert "'old'" not in patched
        assert (
            "    protected $fillable = [\n"
            "        'name',\n"
            "        'email',\n"
            "    ];\n"
        ) in patched

    def test_replacement_stops_at_first_closing_bracket(self) -> None:
        text = (
            "class User extends Model\n"
            "{\n"
            "    protected $fillable = ['old'];\n"
            "    protected $hidden = ['password'];\n"
            "}\n"
        )
        patched, _ = set_fillable_text(text, ["name"])
        assert "protected $hidden = ['password'];" in patched
        assert patched.count("$fillable") == 1

    def test_multiline_existing_block(self) -> None:
        text = (
            "class User extends Model\n"
            "{\n"
            "    protected $fillable = [\n"
            "        'a',\n"
            "        'b',\n"
            "    ];\n"
            "}\n"
        )
        patched, status = set_fillable_text(text, ["c"])
        assert status is PatchStatus.REPLACED
        assert "'a'" not in patched and "'c'," in patched

    def test_inserted_after_trait_use(self, model_text) -> None:
        patched, status = set_fillable_text(model_text, ["name", "email"])
        assert status is PatchStatus.INSERTED
        assert patched.endswith(
            "{\n"
            "    use HasFactory;\n"
            "\n"
            "    protected $fillable = [\n"
            "        'name',\n"
            "        'email',\n"
            "    ];\n"
            "}\n"
        )

    def test_inserted_after_brace_without_traits(self) -> None:
        text = "class Tag extends Model\n{\n}\n"
        patched, status = set_fillable_text(text, [])
        assert status is PatchStatus.INSERTED
        assert patched == "class Tag extends Model\n{\n    protected $fillable = [];\n}\n"

    def test_imports_are_not_mistaken_for_traits(self, model_text) -> None:
        patched, _ = set_fillable_text(model_text, ["name"])
        head, _, _ = patched.partition("class User")
        assert "$fillable" not in head

    def test_no_class(self) -> None:
        patched, status = set_fillable_text("<?php\nreturn [];\n", ["name"])
        assert status is PatchStatus.PATTERN_NOT_MATCHED
        assert patched == "<?php\nreturn [];\n"

    def test_second_patch_replaces_first(self, model_text) -> None:
        once, _ = set_fillable_text(model_text, ["a"])
        twice, status = set_fillable_text(once, ["b"])
        assert status is PatchStatus.REPLACED
        assert twice.count("$fillable") == 1
        assert "'b'," in twice and "'a'," not in twice

    def test_file_patch(self, tmp_path: pathlib.Path, model_text) -> None:
        path = tmp_path / "User.php"
        path.write_text(model_text, encoding="utf-8")
        assert set_fillable(path, ["name", "email"]) is PatchStatus.INSERTED
        assert "'email'," in path.read_text(encoding="utf-8")

    def test_file_without_class_untouched(self, tmp_path: pathlib.Path) -> None:
        path = tmp_path / "helpers.php"
        path.write_text("<?php\n", encoding="utf-8")
        assert set_fillable(path, ["x"]) is PatchStatus.PATTERN_NOT_MATCHED
        assert path.read_text(encoding="utf-8") == "<?php\n"

    def test_unreadable_file(self, tmp_path: pathlib.Path) -> None:
        with pytest.raises(FileNotReadable) as info:
            set_fillable(tmp_path / "Missing.php", ["x"])
        assert info.value.path == tmp_path / "Missing.php"
        assert "Cannot read" in str(info.value)
