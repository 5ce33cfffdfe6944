# File: entitygen/models.py
"""
EntityGen - Core Data Models
==============================
Pydantic V2 models describing the entity catalog and the generation
settings.  These models are the single source of truth for the pipeline:

    Catalog Loading → Normalisation → Validation → Generation → Patching

Catalog-side models (``ColumnSpec``, ``EntitySchema``, ``SchemaCatalog``)
are frozen: a catalog is built once per run and never updated.
"""

from __future__ import annotations

import logging
from enum import Enum
from pathlib import Path
from typing import List, Optional, Set, Tuple

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    computed_field,
    field_validator,
    model_validator,
)

from entitygen.utils import php_quote, to_snake_plural, to_studly_singular

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("entitygen.models")

# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class TypeTag(str, Enum):
    """
    Target column types.

    Each value is the name of a Laravel ``Blueprint`` method, so it can be
    emitted verbatim as ``$table-><tag>('<column>')``.
    """

    INTEGER = "integer"
    STRING = "string"
    TEXT = "text"
    DECIMAL = "decimal"
    DATE = "date"
    DATETIME = "dateTime"
    FOREIGN_ID = "foreignId"


class SchemaDialect(str, Enum):
    """Input dialects a catalog may be written in."""

    SIMPLE = "simple"
    VERBOSE = "verbose"


class GenerationStrategy(str, Enum):
    """How migration and model content is produced."""

    RENDER = "render"
    PATCH = "patch"


class CollisionPolicy(str, Enum):
    """What to do when two entities derive the same class name."""

    REJECT = "reject"
    WARN = "warn"


# ---------------------------------------------------------------------------
# Shared model configuration
# ---------------------------------------------------------------------------

_SHARED_CONFIG: ConfigDict = ConfigDict(
    strict=False,
    populate_by_name=True,
    validate_assignment=True,
    use_enum_values=True,
    frozen=False,
    extra="forbid",
)

_FROZEN_CONFIG: ConfigDict = ConfigDict(
    strict=False,
    populate_by_name=True,
    use_enum_values=True,
    frozen=True,
    extra="forbid",
)


# ---------------------------------------------------------------------------
# Catalog primitives
# ---------------------------------------------------------------------------


class ColumnSpec(BaseModel):
    """
    One normalised column.

    ``raw_type`` keeps the descriptor exactly as written in the catalog;
    ``target_type`` and ``is_foreign_key`` are derived from it by the
    normaliser and are independent of each other.
    """

    model_config = _FROZEN_CONFIG

    name: str = Field(..., min_length=1, description="Column name.")
    raw_type: str = Field(default="", description="Descriptor as written in the catalog.")
    target_type: TypeTag = Field(..., description="Normalised Blueprint method.")
    is_foreign_key: bool = Field(
        default=False, description="Descriptor carried a reference qualifier."
    )

    @property
    def type_method(self) -> str:
        return TypeTag(self.target_type).value

    @property
    def declaration(self) -> str:
        """The migration statement for this column, without indentation."""
        return f"$table->{self.type_method}({php_quote(self.name)});"

    def __repr__(self) -> str:
        fk_flag: str = " FK" if self.is_foreign_key else ""
        return f"<Column {self.name} {self.type_method}{fk_flag}>"


class EntitySchema(BaseModel):
    """
    One table / entity with its ordered columns.

    Column order is significant: it is the order of the emitted migration
    lines and of the fillable list.
    """

    model_config = _FROZEN_CONFIG

    name: str = Field(..., min_length=1, description="Entity / table name.")
    columns: Tuple[ColumnSpec, ...] = Field(
        default=(), description="Ordered columns (may be empty)."
    )

    @field_validator("columns")
    @classmethod
    def _unique_column_names(cls, v: Tuple[ColumnSpec, ...]) -> Tuple[ColumnSpec, ...]:
        seen: Set[str] = set()
        dupes: List[str] = []
        for col in v:
            if col.name in seen:
                dupes.append(col.name)
            seen.add(col.name)
        if dupes:
            raise ValueError(f"Duplicate column names: {sorted(set(dupes))}")
        return v

    @property
    def column_names(self) -> List[str]:
        return [c.name for c in self.columns]

    @property
    def foreign_key_columns(self) -> List[ColumnSpec]:
        return [c for c in self.columns if c.is_foreign_key]

    def __repr__(self) -> str:
        return f"<Entity {self.name} ({len(self.columns)} cols)>"


class SchemaCatalog(BaseModel):
    """
    The whole catalog: every entity to generate, in generation order.
    """

    model_config = _FROZEN_CONFIG

    entities: Tuple[EntitySchema, ...] = Field(
        ..., min_length=1, description="Entities in generation order."
    )
    dialect: SchemaDialect = Field(
        default=SchemaDialect.SIMPLE, description="Dialect the catalog was written in."
    )
    source_file: Optional[str] = Field(
        default=None, description="File the catalog was loaded from, if any."
    )

    @model_validator(mode="after")
    def _validate_unique_entity_names(self) -> "SchemaCatalog":
        names: List[str] = [e.name for e in self.entities]
        if len(names) != len(set(names)):
            dupes: List[str] = [n for n in names if names.count(n) > 1]
            raise ValueError(f"Duplicate entity names: {sorted(set(dupes))}")
        return self

    @property
    def entity_names(self) -> List[str]:
        return [e.name for e in self.entities]

    @property
    def total_columns(self) -> int:
        return sum(len(e.columns) for e in self.entities)

    def get_entity(self, name: str) -> Optional[EntitySchema]:
        for entity in self.entities:
            if entity.name == name:
                return entity
        return None

    def __repr__(self) -> str:
        return (
            f"<SchemaCatalog {len(self.entities)} entities, "
            f"{self.total_columns} columns, dialect={self.dialect}>"
        )


# ---------------------------------------------------------------------------
# Derived artifact names
# ---------------------------------------------------------------------------


class ArtifactNames(BaseModel):
    """
    Names of everything generated for one entity.

    ``base_name`` is the singular StudlyCase form (``order_items`` →
    ``OrderItem``); ``table_token`` is the plural snake_case table name.
    """

    model_config = _FROZEN_CONFIG

    entity: str = Field(..., min_length=1)
    base_name: str = Field(..., min_length=1)
    table_token: str = Field(..., min_length=1)

    @classmethod
    def for_entity(cls, entity_name: str) -> "ArtifactNames":
        return cls(
            entity=entity_name,
            base_name=to_studly_singular(entity_name),
            table_token=to_snake_plural(entity_name),
        )

    @computed_field  # type: ignore[misc]
    @property
    def migration_name(self) -> str:
        return f"create_{self.table_token}_table"

    @computed_field  # type: ignore[misc]
    @property
    def model_name(self) -> str:
        return self.base_name

    @computed_field  # type: ignore[misc]
    @property
    def controller_name(self) -> str:
        return f"{self.base_name}Controller"

    @computed_field  # type: ignore[misc]
    @property
    def request_name(self) -> str:
        return f"{self.base_name}Request"

    @computed_field  # type: ignore[misc]
    @property
    def resource_name(self) -> str:
        return f"{self.base_name}Resource"


# ---------------------------------------------------------------------------
# Generation configuration
# ---------------------------------------------------------------------------


class GenerationConfig(BaseModel):
    """
    Settings for one generation run.

    Loaded from the ``config`` section of a catalog file and overridden by
    command-line flags.
    """

    model_config = _SHARED_CONFIG

    # -- Target project -----------------------------------------------------
    project_dir: str = Field(
        default=".", min_length=1, description="Laravel project root."
    )
    php_binary: str = Field(default="php", min_length=1, description="PHP executable.")
    artisan_script: str = Field(
        default="artisan", min_length=1, description="Artisan script, relative to project_dir."
    )
    migrations_dir: str = Field(
        default="database/migrations", description="Migrations directory, relative."
    )
    models_dir: str = Field(default="app/Models", description="Models directory, relative.")
    models_namespace: str = Field(
        default="App\\Models", min_length=1, description="PHP namespace of generated models."
    )

    # -- Behaviour ----------------------------------------------------------
    strategy: GenerationStrategy = Field(
        default=GenerationStrategy.RENDER,
        description="'render' writes migration/model content directly; "
        "'patch' runs the generators and splices text into their output.",
    )
    model_with_migration: bool = Field(
        default=False,
        description="Pass --migration to make:model (patch strategy only). "
        "Produces a second migration next to the explicit one.",
    )
    collision_policy: CollisionPolicy = Field(
        default=CollisionPolicy.REJECT,
        description="Handling of entities that derive the same class name.",
    )
    continue_on_error: bool = Field(
        default=True,
        description="After a failed entity, carry on with the next one.",
    )
    atomic_writes: bool = Field(
        default=False,
        description="Write through a temp file + rename instead of overwriting in place.",
    )
    dry_run: bool = Field(
        default=False, description="Log generator calls and writes without performing them."
    )

    # -- Helpers ------------------------------------------------------------

    @property
    def project_path(self) -> Path:
        return Path(self.project_dir)

    @property
    def migrations_path(self) -> Path:
        return self.project_path / self.migrations_dir

    @property
    def models_path(self) -> Path:
        return self.project_path / self.models_dir

    def model_file(self, model_name: str) -> Path:
        return self.models_path / f"{model_name}.php"


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "TypeTag",
    "SchemaDialect",
    "GenerationStrategy",
    "CollisionPolicy",
    "ColumnSpec",
    "EntitySchema",
    "SchemaCatalog",
    "ArtifactNames",
    "GenerationConfig",
]

logger.debug("entitygen.models loaded — %d public symbols.", len(__all__))
