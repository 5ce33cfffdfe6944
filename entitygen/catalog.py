# File: entitygen/catalog.py
"""
EntityGen - Schema Catalog
============================
Builds the immutable ``SchemaCatalog`` a run operates on.

A catalog is plain data: an ordered mapping of entity name → ordered
mapping of column name → type descriptor.  It can come from:

1. ``DEFAULT_CATALOG`` — the built-in e-commerce schema (simple dialect).
2. A JSON or YAML file, optionally carrying ``dialect`` and ``config``
   sections next to ``entities``.

File layout::

    dialect: simple            # or "verbose"
    config:                    # optional GenerationConfig values
      strategy: patch
    entities:
      users:
        name: string
        email: string
      order_items:
        order_id: foreignId
        quantity: integer

Mapping order is preserved (JSON objects and YAML mappings both load into
insertion-ordered dicts).
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

import yaml
from pydantic import ValidationError as ModelValidationError

from entitygen.models import EntitySchema, SchemaCatalog, SchemaDialect
from entitygen.normalizer import ColumnParser, get_column_parser

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("entitygen.catalog")

# ---------------------------------------------------------------------------
# Built-in catalog
# ---------------------------------------------------------------------------

DEFAULT_CATALOG: Dict[str, Dict[str, str]] = {
    "users": {
        "name": "string",
        "email": "email",
        "password": "string",
        "registration_date": "date",
        "last_login": "dateTime",
        "phone": "string",
    },
    "addresses": {
        "user_id": "foreignId",
        "street_address": "string",
        "city": "string",
        "state": "string",
        "postal_code": "string",
        "country": "string",
    },
    "categories": {
        "name": "string",
    },
    "products": {
        "name": "string",
        "description": "text",
        "price": "decimal",
        "stock_quantity": "integer",
        "manufacturer": "string",
        "category_id": "foreignId",
    },
    "product_images": {
        "product_id": "foreignId",
        "image_url": "string",
    },
    "orders": {
        "user_id": "foreignId",
        "order_date": "dateTime",
        "total_amount": "decimal",
        "shipping_address_id": "foreignId",
        "billing_address_id": "foreignId",
        "payment_method": "string",
    },
    "order_items": {
        "order_id": "foreignId",
        "product_id": "foreignId",
        "quantity": "integer",
        "price": "decimal",
        "subtotal": "decimal",
    },
    "reviews": {
        "user_id": "foreignId",
        "product_id": "foreignId",
        "rating": "integer",
        "comment": "text",
        "created_at": "dateTime",
    },
    "payments": {
        "order_id": "foreignId",
        "amount": "decimal",
        "payment_date": "dateTime",
        "payment_method": "string",
    },
    "admins": {
        "username": "string",
        "password": "string",
        "email": "string",
        "profile_picture": "string",
    },
    "inventories": {
        "product_id": "foreignId",
        "stock_quantity": "integer",
        "restock_threshold": "integer",
    },
    "promotions": {
        "code": "string",
        "description": "text",
        "discount_amount": "decimal",
        "start_date": "dateTime",
        "end_date": "dateTime",
        "min_purchase_amount": "decimal",
    },
    "carts": {
        "user_id": "foreignId",
        "product_id": "foreignId",
        "quantity": "integer",
    },
    "category_hierarchies": {},
    "attributes": {
        "name": "string",
        "description": "text",
    },
    "variant_attributes": {
        "attribute_id": "foreignId",
        "name": "string",
        "description": "text",
    },
    "brands": {
        "name": "string",
        "description": "text",
    },
    "units": {
        "name": "string",
        "abbreviation": "string",
        "description": "text",
    },
}


# ---------------------------------------------------------------------------
# Catalog construction
# ---------------------------------------------------------------------------


def build_catalog(
    entities: Mapping[str, Optional[Mapping[str, Any]]],
    dialect: Union[SchemaDialect, str] = SchemaDialect.SIMPLE,
    *,
    source_file: Optional[str] = None,
) -> SchemaCatalog:
    """
    Turn an entity → column → descriptor mapping into a ``SchemaCatalog``.

    Every column goes through the single parser registered for *dialect*.

    Raises:
        ValueError: Unknown dialect, malformed entity body, or a catalog
            the models reject (duplicate names, no entities).
    """
    parser: ColumnParser = get_column_parser(dialect)
    built: List[EntitySchema] = []

    for entity_name, columns in entities.items():
        if columns is None:
            columns = {}
        if not isinstance(columns, Mapping):
            raise ValueError(
                f"Entity '{entity_name}' must map column names to types, "
                f"got {type(columns).__name__}."
            )
        specs = tuple(
            parser(str(col_name), "" if raw is None else str(raw))
            for col_name, raw in columns.items()
        )
        try:
            built.append(EntitySchema(name=str(entity_name), columns=specs))
        except (ModelValidationError, ValueError) as exc:
            raise ValueError(f"Entity '{entity_name}' is invalid: {exc}") from exc

    try:
        catalog: SchemaCatalog = SchemaCatalog(
            entities=tuple(built),
            dialect=SchemaDialect(dialect),
            source_file=source_file,
        )
    except (ModelValidationError, ValueError) as exc:
        raise ValueError(f"Catalog validation failed: {exc}") from exc

    logger.debug("Built %r.", catalog)
    return catalog


def default_catalog() -> SchemaCatalog:
    """The built-in e-commerce catalog."""
    return build_catalog(DEFAULT_CATALOG, SchemaDialect.SIMPLE)


# ---------------------------------------------------------------------------
# File loading
# ---------------------------------------------------------------------------


def _load_json_file(path: Path) -> Dict[str, Any]:
    """Load and parse a JSON file. Raises ValueError on parse errors."""
    try:
        data: Any = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ValueError(f"Invalid JSON in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ValueError(
            f"Expected a JSON object at top level, got {type(data).__name__}."
        )
    return data


def _load_yaml_file(path: Path) -> Dict[str, Any]:
    """Load and parse a YAML file. Raises ValueError on parse errors."""
    try:
        data: Any = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        raise ValueError(f"Invalid YAML in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ValueError(
            f"Expected a YAML mapping at top level, got {type(data).__name__}."
        )
    return data


def load_catalog_file(path: Path) -> Dict[str, Any]:
    """
    Load a catalog file (JSON or YAML), dispatching on the extension.

    Raises:
        FileNotFoundError: If the file doesn't exist.
        ValueError: If the file can't be parsed.
    """
    if not path.exists():
        raise FileNotFoundError(f"Catalog file not found: {path}")

    if not path.is_file():
        raise ValueError(f"Catalog path is not a file: {path}")

    suffix: str = path.suffix.lower()

    if suffix in (".yaml", ".yml"):
        return _load_yaml_file(path)
    if suffix == ".json":
        return _load_json_file(path)

    logger.info("Unknown extension '%s' — trying JSON then YAML.", suffix)
    try:
        return _load_json_file(path)
    except ValueError:
        return _load_yaml_file(path)


def parse_catalog(
    raw: Dict[str, Any],
    dialect: Optional[Union[SchemaDialect, str]] = None,
    *,
    source_file: Optional[str] = None,
) -> Tuple[SchemaCatalog, Dict[str, Any]]:
    """
    Parse a loaded catalog document.

    Accepts either ``{"entities": {...}, "dialect": ..., "config": {...}}``
    or a bare entity mapping.  An explicit *dialect* argument wins over the
    document's own ``dialect`` key.

    Returns:
        ``(catalog, config_data)`` where ``config_data`` is the raw
        ``config`` section (empty when absent).
    """
    if "entities" in raw:
        entities: Any = raw["entities"]
        config_data: Any = raw.get("config") or {}
        doc_dialect: Any = raw.get("dialect", SchemaDialect.SIMPLE.value)
    else:
        entities = raw
        config_data = {}
        doc_dialect = SchemaDialect.SIMPLE.value

    if not isinstance(entities, dict):
        raise ValueError(
            f"'entities' must be a mapping of entity name to columns, "
            f"got {type(entities).__name__}."
        )
    if not isinstance(config_data, dict):
        raise ValueError(
            f"'config' must be a mapping, got {type(config_data).__name__}."
        )

    chosen_dialect: Union[SchemaDialect, str] = dialect if dialect is not None else doc_dialect
    catalog: SchemaCatalog = build_catalog(
        entities, chosen_dialect, source_file=source_file
    )
    logger.info(
        "Parsed catalog: %d entities, %d columns (dialect=%s).",
        len(catalog.entities),
        catalog.total_columns,
        catalog.dialect,
    )
    return catalog, dict(config_data)


def load_catalog(
    path: Path,
    dialect: Optional[Union[SchemaDialect, str]] = None,
) -> Tuple[SchemaCatalog, Dict[str, Any]]:
    """Load and parse a catalog file in one step."""
    raw: Dict[str, Any] = load_catalog_file(path)
    return parse_catalog(raw, dialect, source_file=str(path))


__all__: List[str] = [
    "DEFAULT_CATALOG",
    "build_catalog",
    "default_catalog",
    "load_catalog_file",
    "parse_catalog",
    "load_catalog",
]

logger.debug("entitygen.catalog loaded.")
