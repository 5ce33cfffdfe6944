"""
tests/test_catalog.py
Unit tests for entitygen.catalog: the built-in catalog, dialect dispatch,
and JSON/YAML loading.
"""

from __future__ import annotations

import json
import pathlib

import pytest
import yaml

from entitygen.catalog import (
    DEFAULT_CATALOG,
    build_catalog,
    default_catalog,
    load_catalog,
    load_catalog_file,
    parse_catalog,
)
from entitygen.models import SchemaDialect, TypeTag


class TestDefaultCatalog:

    def test_eighteen_entities_in_order(self) -> None:
        catalog = default_catalog()
        assert len(catalog.entities) == 18
        assert catalog.entity_names[:3] == ["users", "addresses", "categories"]
        assert catalog.entity_names[-1] == "units"
        assert catalog.entity_names == list(DEFAULT_CATALOG)

    def test_column_order_preserved(self) -> None:
        order_items = default_catalog().get_entity("order_items")
        assert order_items is not None
        assert order_items.column_names == [
            "order_id",
            "product_id",
            "quantity",
            "price",
            "subtotal",
        ]

    def test_foreign_ids_flagged(self) -> None:
        orders = default_catalog().get_entity("orders")
        assert [c.name for c in orders.foreign_key_columns] == [
            "user_id",
            "shipping_address_id",
            "billing_address_id",
        ]

    def test_email_tag_normalised_to_string(self) -> None:
        users = default_catalog().get_entity("users")
        email = next(c for c in users.columns if c.name == "email")
        assert email.type_method == TypeTag.STRING.value

    def test_empty_entity_kept(self) -> None:
        entity = default_catalog().get_entity("category_hierarchies")
        assert entity is not None
        assert entity.columns == ()

    def test_default_catalog_literal_untouched(self) -> None:
        default_catalog()
        assert DEFAULT_CATALOG["users"]["email"] == "email"


class TestBuildCatalog:

    def test_verbose_dialect(self) -> None:
        catalog = build_catalog(
            {"orders": {"user_id": "INT REFERENCES users(id)", "note": "TEXT"}},
            "verbose",
        )
        assert catalog.dialect == SchemaDialect.VERBOSE.value
        cols = catalog.entities[0].columns
        assert [(c.type_method, c.is_foreign_key) for c in cols] == [
            ("integer", True),
            ("text", False),
        ]

    def test_none_body_means_no_columns(self) -> None:
        catalog = build_catalog({"tags": None})
        assert catalog.entities[0].columns == ()

    def test_body_must_be_mapping(self) -> None:
        with pytest.raises(ValueError, match="must map column names"):
            build_catalog({"tags": ["name"]})

    def test_empty_catalog_rejected(self) -> None:
        with pytest.raises(ValueError, match="Catalog validation failed"):
            build_catalog({})

    def test_unknown_dialect_rejected(self) -> None:
        with pytest.raises(ValueError, match="Unknown catalog dialect"):
            build_catalog({"users": {"name": "string"}}, "sql")

    def test_unexpected_errors_are_not_relabelled(self, monkeypatch) -> None:
        def _broken(**kwargs):
            raise RuntimeError("boom")

        monkeypatch.setattr("entitygen.catalog.EntitySchema", _broken)
        with pytest.raises(RuntimeError, match="boom"):
            build_catalog({"users": {"name": "string"}})


class TestParseCatalog:

    def test_bare_mapping(self, small_catalog_dict) -> None:
        catalog, config = parse_catalog(small_catalog_dict)
        assert catalog.entity_names == ["users", "products", "orders"]
        assert config == {}

    def test_document_with_config(self) -> None:
        raw = {
            "dialect": "verbose",
            "config": {"strategy": "patch"},
            "entities": {"users": {"name": "VARCHAR(255)"}},
        }
        catalog, config = parse_catalog(raw, source_file="x.yaml")
        assert catalog.dialect == "verbose"
        assert catalog.source_file == "x.yaml"
        assert config == {"strategy": "patch"}

    def test_explicit_dialect_wins(self) -> None:
        raw = {"dialect": "simple", "entities": {"products": {"price": "decimal"}}}
        catalog, _ = parse_catalog(raw, "verbose")
        assert catalog.entities[0].columns[0].type_method == "string"

    def test_entities_must_be_mapping(self) -> None:
        with pytest.raises(ValueError, match="'entities' must be a mapping"):
            parse_catalog({"entities": ["users"]})

    def test_config_must_be_mapping(self) -> None:
        with pytest.raises(ValueError, match="'config' must be a mapping"):
            parse_catalog({"entities": {"users": {}}, "config": "patch"})


class TestFileLoading:

    def test_load_yaml(self, catalog_yaml_path: pathlib.Path) -> None:
        catalog, config = load_catalog(catalog_yaml_path)
        assert catalog.entity_names == ["users", "products", "orders"]
        assert catalog.source_file == str(catalog_yaml_path)
        assert config["strategy"] == "render"

    def test_load_json(self, tmp_path: pathlib.Path, small_catalog_dict) -> None:
        path = tmp_path / "catalog.json"
        path.write_text(json.dumps({"entities": small_catalog_dict}), encoding="utf-8")
        catalog, _ = load_catalog(path)
        assert len(catalog.entities) == 3

    def test_unknown_extension_falls_back_to_yaml(self, tmp_path: pathlib.Path) -> None:
        path = tmp_path / "catalog.txt"
        path.write_text(yaml.safe_dump({"users": {"name": "string"}}), encoding="utf-8")
        assert load_catalog_file(path) == {"users": {"name": "string"}}

    def test_missing_file(self, tmp_path: pathlib.Path) -> None:
        with pytest.raises(FileNotFoundError):
            load_catalog_file(tmp_path / "nope.yaml")

    def test_directory_rejected(self, tmp_path: pathlib.Path) -> None:
        with pytest.raises(ValueError, match="not a file"):
            load_catalog_file(tmp_path)

    def test_invalid_yaml(self, tmp_path: pathlib.Path) -> None:
        path = tmp_path / "bad.yaml"
        path.write_text("users: [unclosed\n", encoding="utf-8")
        with pytest.raises(ValueError, match="Invalid YAML"):
            load_catalog_file(path)

    def test_top_level_list_rejected(self, tmp_path: pathlib.Path) -> None:
        path = tmp_path / "list.json"
        path.write_text("[1, 2]", encoding="utf-8")
        with pytest.raises(ValueError, match="JSON object"):
            load_catalog_file(path)

    def test_example_catalog_loads(self) -> None:
        from conftest import CATALOG_EXAMPLE_PATH

        catalog, config = load_catalog(CATALOG_EXAMPLE_PATH)
        assert catalog.dialect == "verbose"
        assert catalog.get_entity("order_items") is not None
        assert config["strategy"] == "render"
