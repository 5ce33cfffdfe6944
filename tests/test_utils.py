"""
tests/test_utils.py
Unit tests for entitygen.utils: name derivation, PHP quoting, file helpers.
"""

from __future__ import annotations

import pathlib

import pytest

from entitygen.utils import (
    Timer,
    leading_whitespace,
    php_quote,
    read_file,
    to_plural,
    to_singular,
    to_snake_case,
    to_snake_plural,
    to_studly_singular,
    write_file,
)


class TestCaseConversion:

    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("OrderItem", "order_item"),
            ("order-items", "order_items"),
            ("already_snake", "already_snake"),
            ("HTTPRequest", "http_request"),
            ("", ""),
        ],
    )
    def test_to_snake_case(self, raw: str, expected: str) -> None:
        assert to_snake_case(raw) == expected


class TestPluralisation:

    @pytest.mark.parametrize(
        "singular, plural",
        [
            ("user", "users"),
            ("category", "categories"),
            ("box", "boxes"),
            ("address", "addresses"),
            ("person", "people"),
            ("day", "days"),
        ],
    )
    def test_round_trip(self, singular: str, plural: str) -> None:
        assert to_plural(singular) == plural
        assert to_singular(plural) == singular

    def test_plural_is_left_alone(self) -> None:
        assert to_plural("users") == "users"
        assert to_plural("people") == "people"

    def test_singular_without_suffix_is_left_alone(self) -> None:
        assert to_singular("staff") == "staff"

    @pytest.mark.parametrize(
        "plural, singular",
        [
            ("sizes", "size"),
            ("prizes", "prize"),
            ("buzzes", "buzz"),
            ("quizzes", "quiz"),
            ("shoes", "shoe"),
            ("heroes", "hero"),
            ("movies", "movie"),
            ("stories", "story"),
            ("caches", "cache"),
            ("matches", "match"),
            ("archives", "archive"),
            ("wolves", "wolf"),
            ("knives", "knife"),
            ("news", "news"),
        ],
    )
    def test_suffix_rules_keep_the_stem(self, plural: str, singular: str) -> None:
        assert to_singular(plural) == singular

    def test_plural_keeps_uncountable_and_plain_o(self) -> None:
        assert to_plural("staff") == "staff"
        assert to_plural("photo") == "photos"
        assert to_plural("hero") == "heroes"
        assert to_plural("Quiz") == "Quizzes"


class TestArtifactNaming:

    @pytest.mark.parametrize(
        "entity, base",
        [
            ("order_items", "OrderItem"),
            ("users", "User"),
            ("category_hierarchies", "CategoryHierarchy"),
            ("inventories", "Inventory"),
            ("addresses", "Address"),
            ("product_images", "ProductImage"),
            ("sizes", "Size"),
            ("product_sizes", "ProductSize"),
            ("shoes", "Shoe"),
            ("movies", "Movie"),
            ("caches", "Cache"),
            ("archives", "Archive"),
        ],
    )
    def test_to_studly_singular(self, entity: str, base: str) -> None:
        assert to_studly_singular(entity) == base

    def test_to_snake_plural_from_class_and_table(self) -> None:
        assert to_snake_plural("OrderItem") == "order_items"
        assert to_snake_plural("order_items") == "order_items"
        assert to_snake_plural("Category") == "categories"


class TestPhpHelpers:

    def test_php_quote_plain(self) -> None:
        assert php_quote("users") == "'users'"

    def test_php_quote_escapes(self) -> None:
        assert php_quote("it's") == "'it\\'s'"
        assert php_quote("a\\b") == "'a\\\\b'"

    def test_leading_whitespace(self) -> None:
        text = "first\n        $table->id();\n"
        pos = text.index("$table")
        assert leading_whitespace(text, pos) == "        "

    def test_leading_whitespace_first_line(self) -> None:
        text = "\t$x;"
        assert leading_whitespace(text, 1) == "\t"


class TestFileHelpers:

    def test_write_and_read(self, tmp_path: pathlib.Path) -> None:
        target = tmp_path / "nested" / "File.php"
        written = write_file(target, "<?php\n")
        assert written == 6
        assert read_file(target) == "<?php\n"

    def test_atomic_write_replaces_and_leaves_no_temp(self, tmp_path: pathlib.Path) -> None:
        target = tmp_path / "Model.php"
        target.write_text("old", encoding="utf-8")
        write_file(target, "new", atomic=True)
        assert target.read_text(encoding="utf-8") == "new"
        assert [p.name for p in tmp_path.iterdir()] == ["Model.php"]

    def test_timer_measures(self) -> None:
        with Timer("noop") as t:
            pass
        assert t.elapsed >= 0.0
        assert "noop" in repr(t)
