# File: entitygen/validators.py
"""
EntityGen - Catalog & Configuration Validators
================================================
Pydantic handles structural correctness of the models in
``entitygen.models``; this module adds the semantic checks that need the
whole catalog or the target project:

- entity and column names usable as PHP / SQL identifiers,
- derived class-name and table-name collisions (governed by
  ``GenerationConfig.collision_policy``),
- foreign-key columns whose referenced entity cannot be found,
- configuration sanity and the presence of the artisan script.

Usage::

    from entitygen.validators import validate_full
    result = validate_full(catalog, config)
    if not result.is_valid:
        ...
"""

from __future__ import annotations

import logging
import re
from collections import defaultdict
from typing import Any, Callable, Dict, List, Optional, Set

from entitygen.models import (
    ArtifactNames,
    CollisionPolicy,
    GenerationConfig,
    GenerationStrategy,
    SchemaCatalog,
)
from entitygen.utils import to_snake_plural

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("entitygen.validators")

# ---------------------------------------------------------------------------
# Validation result container
# ---------------------------------------------------------------------------


class ValidationError:
    """Lightweight error descriptor (no Pydantic overhead)."""

    __slots__ = ("level", "code", "message", "context")

    def __init__(
        self,
        level: str,
        code: str,
        message: str,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.level: str = level  # "error" | "warning" | "info"
        self.code: str = code
        self.message: str = message
        self.context: Dict[str, Any] = context or {}

    @property
    def is_error(self) -> bool:
        return self.level == "error"

    @property
    def is_warning(self) -> bool:
        return self.level == "warning"

    def __repr__(self) -> str:
        return f"[{self.level.upper()}] {self.code}: {self.message}"

    def __str__(self) -> str:
        return self.__repr__()


class ValidationResult:
    """Accumulates ``ValidationError`` instances produced by the validators."""

    __slots__ = ("_items",)

    def __init__(self) -> None:
        self._items: List[ValidationError] = []

    # -- Mutation -----------------------------------------------------------

    def add_error(
        self,
        code: str,
        message: str,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        self._items.append(ValidationError("error", code, message, context))

    def add_warning(
        self,
        code: str,
        message: str,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        self._items.append(ValidationError("warning", code, message, context))

    def merge(self, other: "ValidationResult") -> None:
        self._items.extend(other._items)

    # -- Query --------------------------------------------------------------

    @property
    def errors(self) -> List[ValidationError]:
        return [e for e in self._items if e.is_error]

    @property
    def warnings(self) -> List[ValidationError]:
        return [e for e in self._items if e.is_warning]

    @property
    def codes(self) -> List[str]:
        return [e.code for e in self._items]

    @property
    def has_errors(self) -> bool:
        return any(e.is_error for e in self._items)

    @property
    def error_count(self) -> int:
        return sum(1 for e in self._items if e.is_error)

    @property
    def warning_count(self) -> int:
        return sum(1 for e in self._items if e.is_warning)

    @property
    def is_valid(self) -> bool:
        return not self.has_errors

    def summary(self) -> str:
        return (
            f"Validation: {self.error_count} error(s), "
            f"{self.warning_count} warning(s)."
        )

    def __repr__(self) -> str:
        return f"<ValidationResult {self.summary()}>"

    def __bool__(self) -> bool:
        """Truthy when there are NO errors (i.e. valid)."""
        return self.is_valid

    def __len__(self) -> int:
        return len(self._items)


# ---------------------------------------------------------------------------
# Regex patterns
# ---------------------------------------------------------------------------

_SNAKE_CASE_RE: re.Pattern[str] = re.compile(r"^[a-z][a-z0-9]*(_[a-z0-9]+)*$")
_IDENTIFIER_RE: re.Pattern[str] = re.compile(r"^[a-zA-Z_][a-zA-Z0-9_]*$")

# Columns Laravel's migration stub already declares
_RESERVED_COLUMNS: Set[str] = {"id"}
_TIMESTAMP_COLUMNS: Set[str] = {"created_at", "updated_at"}


# ---------------------------------------------------------------------------
# Individual validation functions
# ---------------------------------------------------------------------------


def validate_entity_names(catalog: SchemaCatalog) -> ValidationResult:
    """Entity names must be identifiers; snake_case is expected."""
    result: ValidationResult = ValidationResult()

    for entity in catalog.entities:
        ctx: Dict[str, Any] = {"entity": entity.name}

        if not _IDENTIFIER_RE.match(entity.name):
            result.add_error(
                "INVALID_ENTITY_NAME",
                f"Entity name '{entity.name}' is not a valid identifier.",
                ctx,
            )
            continue

        if not _SNAKE_CASE_RE.match(entity.name):
            result.add_warning(
                "ENTITY_NAME_NOT_SNAKE_CASE",
                f"Entity name '{entity.name}' is not snake_case; derived "
                f"names may not match what the framework infers.",
                ctx,
            )

    return result


def validate_column_names(catalog: SchemaCatalog) -> ValidationResult:
    """Column names must be identifiers and must not shadow ``id``."""
    result: ValidationResult = ValidationResult()

    for entity in catalog.entities:
        for col in entity.columns:
            ctx: Dict[str, Any] = {"entity": entity.name, "column": col.name}

            if not _IDENTIFIER_RE.match(col.name):
                result.add_error(
                    "INVALID_COLUMN_NAME",
                    f"Column '{col.name}' in entity '{entity.name}' "
                    f"is not a valid identifier.",
                    ctx,
                )
                continue

            if col.name in _RESERVED_COLUMNS:
                result.add_error(
                    "RESERVED_COLUMN_NAME",
                    f"Column '{col.name}' in entity '{entity.name}' is already "
                    f"declared by the migration's primary key.",
                    ctx,
                )

            if col.name in _TIMESTAMP_COLUMNS:
                result.add_warning(
                    "TIMESTAMP_COLUMN_DUPLICATE",
                    f"Column '{col.name}' in entity '{entity.name}' is also "
                    f"created by $table->timestamps(); the migration will fail "
                    f"to run as generated.",
                    ctx,
                )

            if not _SNAKE_CASE_RE.match(col.name):
                result.add_warning(
                    "COLUMN_NAME_NOT_SNAKE_CASE",
                    f"Column '{col.name}' in entity '{entity.name}' "
                    f"is not snake_case.",
                    ctx,
                )

    return result


def validate_empty_entities(catalog: SchemaCatalog) -> ValidationResult:
    result: ValidationResult = ValidationResult()
    for entity in catalog.entities:
        if not entity.columns:
            result.add_warning(
                "ENTITY_WITHOUT_COLUMNS",
                f"Entity '{entity.name}' has no columns; its migration will "
                f"only hold the id and timestamps.",
                {"entity": entity.name},
            )
    return result


def validate_foreign_keys(catalog: SchemaCatalog) -> ValidationResult:
    """
    Every foreign-key column should point at an entity in the catalog.

    The referenced table is inferred the way Laravel's ``constrained()``
    does: ``<singular>_id`` → ``<plural>``.
    """
    result: ValidationResult = ValidationResult()
    tables: Set[str] = {
        ArtifactNames.for_entity(e.name).table_token for e in catalog.entities
    }

    for entity in catalog.entities:
        for col in entity.foreign_key_columns:
            ctx: Dict[str, Any] = {"entity": entity.name, "column": col.name}

            if not col.name.endswith("_id") or len(col.name) <= 3:
                result.add_warning(
                    "FOREIGN_KEY_TARGET_UNKNOWN",
                    f"Foreign key '{entity.name}.{col.name}' does not follow "
                    f"the '<name>_id' convention; target table cannot be inferred.",
                    ctx,
                )
                continue

            target: str = to_snake_plural(col.name[:-3])
            if target not in tables:
                ctx["target"] = target
                result.add_warning(
                    "FOREIGN_KEY_TARGET_MISSING",
                    f"Foreign key '{entity.name}.{col.name}' refers to table "
                    f"'{target}', which is not in the catalog.",
                    ctx,
                )

    return result


def validate_name_collisions(
    catalog: SchemaCatalog,
    policy: CollisionPolicy = CollisionPolicy.REJECT,
) -> ValidationResult:
    """
    Detect entities that derive the same class name or table name.

    Under ``reject`` a collision is an error (the run is refused); under
    ``warn`` it is a warning and the later entity overwrites the earlier
    one's artifacts.
    """
    result: ValidationResult = ValidationResult()
    by_base: Dict[str, List[str]] = defaultdict(list)
    by_table: Dict[str, List[str]] = defaultdict(list)

    for entity in catalog.entities:
        names: ArtifactNames = ArtifactNames.for_entity(entity.name)
        by_base[names.base_name].append(entity.name)
        by_table[names.table_token].append(entity.name)

    report: Callable[..., None] = (
        result.add_error
        if CollisionPolicy(policy) is CollisionPolicy.REJECT
        else result.add_warning
    )

    for base_name, entities in by_base.items():
        if len(entities) > 1:
            report(
                "BASE_NAME_COLLISION",
                f"Entities {entities} all derive the class name '{base_name}'.",
                {"base_name": base_name, "entities": entities},
            )

    for table, entities in by_table.items():
        if len(entities) > 1:
            report(
                "TABLE_NAME_COLLISION",
                f"Entities {entities} all derive the table name '{table}'.",
                {"table": table, "entities": entities},
            )

    return result


def validate_generation_config(config: GenerationConfig) -> ValidationResult:
    """Configuration sanity checks, including the target project layout."""
    result: ValidationResult = ValidationResult()

    if (
        config.model_with_migration
        and GenerationStrategy(config.strategy) is GenerationStrategy.RENDER
    ):
        result.add_warning(
            "MODEL_MIGRATION_IGNORED",
            "model_with_migration only applies to the 'patch' strategy; "
            "the rendered model is written without a second migration.",
        )

    if config.dry_run:
        return result

    project = config.project_path
    if not project.is_dir():
        result.add_error(
            "PROJECT_DIR_MISSING",
            f"Project directory '{project}' does not exist.",
            {"project_dir": str(project)},
        )
        return result

    artisan = project / config.artisan_script
    if not artisan.is_file():
        result.add_error(
            "ARTISAN_MISSING",
            f"Artisan script not found at '{artisan}'. Is this a Laravel project?",
            {"artisan": str(artisan)},
        )

    return result


# ---------------------------------------------------------------------------
# Aggregate entry points
# ---------------------------------------------------------------------------


def validate_catalog(
    catalog: SchemaCatalog,
    policy: CollisionPolicy = CollisionPolicy.REJECT,
) -> ValidationResult:
    """Run all catalog-level validators."""
    result: ValidationResult = ValidationResult()

    validators: List[Callable[[SchemaCatalog], ValidationResult]] = [
        validate_entity_names,
        validate_column_names,
        validate_empty_entities,
        validate_foreign_keys,
    ]

    for validator_fn in validators:
        logger.debug("Running validator: %s", validator_fn.__name__)
        result.merge(validator_fn(catalog))

    result.merge(validate_name_collisions(catalog, policy))

    logger.info("Catalog validation complete: %s", result.summary())
    return result


def validate_full(
    catalog: SchemaCatalog,
    config: GenerationConfig,
) -> ValidationResult:
    """
    **Master validation entry point**, called by ``generator.py`` and
    ``cli.py`` before any generator is invoked.
    """
    logger.info(
        "Starting full validation — %d entities, strategy=%s",
        len(catalog.entities),
        config.strategy,
    )

    result: ValidationResult = ValidationResult()
    result.merge(validate_catalog(catalog, config.collision_policy))
    result.merge(validate_generation_config(config))

    if result.has_errors:
        logger.error("Validation FAILED. %s", result.summary())
    else:
        logger.info("Validation PASSED. %s", result.summary())

    return result


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "ValidationError",
    "ValidationResult",
    "validate_entity_names",
    "validate_column_names",
    "validate_empty_entities",
    "validate_foreign_keys",
    "validate_name_collisions",
    "validate_generation_config",
    "validate_catalog",
    "validate_full",
]

logger.debug("entitygen.validators loaded — %d public symbols.", len(__all__))
