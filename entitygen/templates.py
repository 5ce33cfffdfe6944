# File: entitygen/templates.py
"""
EntityGen - PHP Source Templates
==================================
Renders the final migration and model source for an entity in one pass
(``render`` strategy), instead of letting artisan write a stub and then
splicing text into it.  The output has the same shape as artisan's
``make:migration --create`` and ``make:model`` stubs after patching, with
the column lines and the ``$fillable`` list already in place, so there is
no anchor or pattern that can be missed.

All assembly uses ``List[str]`` + ``"\\n".join()``.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import List

from entitygen.models import ArtifactNames, EntitySchema, GenerationConfig
from entitygen.patcher import MIGRATION_ANCHOR, build_fillable_block
from entitygen.utils import php_quote, to_snake_plural

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("entitygen.templates")

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

_INDENT: str = "    "
_DOUBLE_INDENT: str = _INDENT * 2
_TRIPLE_INDENT: str = _INDENT * 3

MIGRATION_TIMESTAMP_FORMAT: str = "%Y_%m_%d_%H%M%S"


def migration_filename(names: ArtifactNames, now: datetime) -> str:
    """
    Artisan's migration filename for *names* created at *now*.

    Example:
        >>> migration_filename(ArtifactNames.for_entity("users"), datetime(2023, 10, 28, 0, 51, 22))
        '2023_10_28_005122_create_users_table.php'
    """
    return f"{now.strftime(MIGRATION_TIMESTAMP_FORMAT)}_{names.migration_name}.php"


class TemplateGenerator:
    """
    Produces PHP source strings for one entity at a time.

    Stateless apart from the configuration it was built with.
    """

    def __init__(self, config: GenerationConfig) -> None:
        self.config: GenerationConfig = config

    # -----------------------------------------------------------------
    # Migration
    # -----------------------------------------------------------------

    def render_migration(self, entity: EntitySchema, names: ArtifactNames) -> str:
        """Anonymous-class migration creating the entity's table."""
        table: str = php_quote(names.table_token)
        lines: List[str] = [
            "<?php",
            "",
            "use Illuminate\\Database\\Migrations\\Migration;",
            "use Illuminate\\Database\\Schema\\Blueprint;",
            "use Illuminate\\Support\\Facades\\Schema;",
            "",
            "return new class extends Migration",
            "{",
            f"{_INDENT}/**",
            f"{_INDENT} * Run the migrations.",
            f"{_INDENT} */",
            f"{_INDENT}public function up(): void",
            f"{_INDENT}{{",
            f"{_DOUBLE_INDENT}Schema::create({table}, function (Blueprint $table) {{",
            f"{_TRIPLE_INDENT}{MIGRATION_ANCHOR}",
        ]
        lines.extend(f"{_TRIPLE_INDENT}{col.declaration}" for col in entity.columns)
        lines.extend([
            f"{_TRIPLE_INDENT}$table->timestamps();",
            f"{_DOUBLE_INDENT}}});",
            f"{_INDENT}}}",
            "",
            f"{_INDENT}/**",
            f"{_INDENT} * Reverse the migrations.",
            f"{_INDENT} */",
            f"{_INDENT}public function down(): void",
            f"{_INDENT}{{",
            f"{_DOUBLE_INDENT}Schema::dropIfExists({table});",
            f"{_INDENT}}}",
            "};",
            "",
        ])
        logger.debug(
            "Rendered migration %s with %d column(s).",
            names.migration_name,
            len(entity.columns),
        )
        return "\n".join(lines)

    # -----------------------------------------------------------------
    # Model
    # -----------------------------------------------------------------

    def render_model(self, entity: EntitySchema, names: ArtifactNames) -> str:
        """
        Eloquent model with ``HasFactory`` and a populated ``$fillable``.

        A ``$table`` property is added only when Eloquent's own inference
        from the class name would pick a different table.
        """
        lines: List[str] = [
            "<?php",
            "",
            f"namespace {self.config.models_namespace};",
            "",
            "use Illuminate\\Database\\Eloquent\\Factories\\HasFactory;",
            "use Illuminate\\Database\\Eloquent\\Model;",
            "",
            f"class {names.model_name} extends Model",
            "{",
            f"{_INDENT}use HasFactory;",
            "",
        ]

        if to_snake_plural(names.model_name) != names.table_token:
            lines.append(f"{_INDENT}protected $table = {php_quote(names.table_token)};")
            lines.append("")

        lines.append(f"{_INDENT}{build_fillable_block(entity.column_names, _INDENT)}")
        lines.extend(["}", ""])
        return "\n".join(lines)


__all__: List[str] = [
    "MIGRATION_TIMESTAMP_FORMAT",
    "migration_filename",
    "TemplateGenerator",
]

logger.debug("entitygen.templates loaded.")
