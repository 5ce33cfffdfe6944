# File: entitygen/__init__.py
"""
EntityGen — Laravel Entity Scaffolding
========================================

Reads a catalog of entities (table name → ordered columns with type
descriptors) and drives ``php artisan make:*`` to produce, for each
entity, a migration, a model, a controller, a form request and an API
resource, with the migration columns and the model's ``$fillable`` list
filled in from the catalog.

Architecture overview::

    ┌──────────────┐     ┌────────────────┐     ┌──────────────────┐
    │  CLI / Entry │────▶│ EntityGenerator │────▶│ TemplateGenerator│
    │   (cli.py)   │     │ (generator.py)  │     │  (templates.py)  │
    └──────────────┘     └───────┬────────┘     └──────────────────┘
                                 │
            ┌───────────┬────────┼──────────┬────────────┐
            ▼           ▼        ▼          ▼            ▼
       ┌─────────┐ ┌─────────┐ ┌──────┐ ┌─────────┐ ┌──────────┐
       │ catalog │ │normalizer│ │models│ │ artisan │ │ patcher  │
       └─────────┘ └─────────┘ └──────┘ └─────────┘ └──────────┘

Usage::

    # As a library
    from entitygen import EntityGenerator, GenerationConfig, default_catalog
    report = EntityGenerator(GenerationConfig(project_dir="/srv/shop")).generate(
        default_catalog()
    )

    # From the command line
    python -m entitygen --schema catalog.yaml --project /srv/shop -v

Public API:
    - EntityGenerator    — Orchestrator
    - GenerationConfig   — Generation settings model
    - SchemaCatalog      — Entity catalog model
    - normalize          — Type descriptor normaliser
    - insert_columns / set_fillable — File patchers
    - validate_full      — Catalog validation entry point
"""

from __future__ import annotations

__version__: str = "1.0.0"
__license__: str = "MIT"

from entitygen.models import (
    ArtifactNames,
    CollisionPolicy,
    ColumnSpec,
    EntitySchema,
    GenerationConfig,
    GenerationStrategy,
    SchemaCatalog,
    SchemaDialect,
    TypeTag,
)
from entitygen.normalizer import normalize
from entitygen.catalog import (
    DEFAULT_CATALOG,
    build_catalog,
    default_catalog,
    load_catalog,
)
from entitygen.validators import validate_full, ValidationResult
from entitygen.artisan import (
    ArtisanRunner,
    DryRunRunner,
    GeneratorInvocationError,
)
from entitygen.patcher import (
    PatchError,
    PatchStatus,
    insert_columns,
    set_fillable,
)
from entitygen.templates import TemplateGenerator
from entitygen.utils import Timer, to_snake_plural, to_studly_singular
from entitygen.generator import (
    EntityGenerator,
    EntityOutcome,
    GenerationReport,
)

# ---------------------------------------------------------------------------
# Public API surface
# ---------------------------------------------------------------------------

__all__: list[str] = [
    # Version info
    "__version__",
    "__license__",
    # Core orchestrator
    "EntityGenerator",
    "EntityOutcome",
    "GenerationReport",
    # Models
    "ArtifactNames",
    "CollisionPolicy",
    "ColumnSpec",
    "EntitySchema",
    "GenerationConfig",
    "GenerationStrategy",
    "SchemaCatalog",
    "SchemaDialect",
    "TypeTag",
    # Catalog
    "DEFAULT_CATALOG",
    "build_catalog",
    "default_catalog",
    "load_catalog",
    "normalize",
    # Validation
    "validate_full",
    "ValidationResult",
    # Collaborators
    "ArtisanRunner",
    "DryRunRunner",
    "GeneratorInvocationError",
    # Patching & templates
    "PatchError",
    "PatchStatus",
    "insert_columns",
    "set_fillable",
    "TemplateGenerator",
    # Utilities
    "Timer",
    "to_snake_plural",
    "to_studly_singular",
]
