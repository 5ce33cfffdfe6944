# File: entitygen/generator.py
"""
EntityGen - Generation Orchestrator
=====================================

Connects every phase together:

    Catalog → Validation → per-entity artisan calls + patches → Report

For each entity, in catalog order:

    1. Derive ``ArtifactNames`` (``order_items`` → ``OrderItem``).
    2. Migration — ``render``: write the finished file from the template;
       ``patch``: ``make:migration`` then ``insert_columns``.
    3. Model — ``render``: write the finished file from the template, or
       only set ``$fillable`` when the model already exists;
       ``patch``: ``make:model`` then ``set_fillable``.
    4. ``make:controller <Base>Controller --model=<Base>``
    5. ``make:request <Base>Request``
    6. ``make:resource <Base>Resource``
    7. Emit one progress line.

Error handling strategy:
    - Validation errors stop the run before any generator is invoked.
    - A failed generator call aborts the current entity.  Nothing already
      created for it is rolled back.  The run moves on to the next entity
      unless ``continue_on_error`` is off.
    - Patch / write I/O failures are recorded on the entity and its
      remaining generator steps still run.
    - A missing migration anchor or fillable pattern is a warning.

The pipeline is not idempotent: a second run creates a second migration
for every table and re-patches the models.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from pathlib import Path
from typing import Any, Callable, Dict, List, Mapping, Optional

from pydantic import ValidationError as ModelValidationError

from entitygen.artisan import (
    ArtisanRunner,
    DryRunRunner,
    GeneratorInvocationError,
    GeneratorRunner,
    find_migration_file,
)
from entitygen.models import (
    ArtifactNames,
    EntitySchema,
    GenerationConfig,
    GenerationStrategy,
    SchemaCatalog,
)
from entitygen.patcher import (
    FileNotWritable,
    PatchError,
    PatchStatus,
    insert_columns,
    set_fillable,
)
from entitygen.templates import TemplateGenerator, migration_filename
from entitygen.utils import Timer, write_file
from entitygen.validators import ValidationResult, validate_full

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("entitygen.generator")

PROGRESS_TEMPLATE: str = (
    "Generated migration, model, controller, request, and API resource "
    "for entity: {entity}"
)


# ---------------------------------------------------------------------------
# Generation report
# ---------------------------------------------------------------------------


@dataclass(slots=True)
class EntityOutcome:
    """What happened to one entity."""

    entity: str
    names: Optional[ArtifactNames] = None
    artifacts: List[str] = field(default_factory=list)
    files: Dict[str, str] = field(default_factory=dict)
    migration_patch: Optional[PatchStatus] = None
    fillable_patch: Optional[PatchStatus] = None
    warnings: List[str] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)
    aborted: bool = False
    elapsed_seconds: float = 0.0

    @property
    def success(self) -> bool:
        return not self.aborted and not self.errors

    @property
    def message(self) -> str:
        return PROGRESS_TEMPLATE.format(entity=self.entity)


@dataclass(slots=True)
class GenerationReport:
    """
    Report produced by ``EntityGenerator.generate()``.

    Holds one ``EntityOutcome`` per entity that was attempted, plus the
    validation findings and overall timing.
    """

    success: bool = False
    strategy: str = ""
    project_dir: str = ""
    dry_run: bool = False
    total_elapsed_seconds: float = 0.0

    entities: List[EntityOutcome] = field(default_factory=list)
    validation_errors: List[str] = field(default_factory=list)
    validation_warnings: List[str] = field(default_factory=list)
    skipped_entities: List[str] = field(default_factory=list)

    @property
    def failed_entities(self) -> List[EntityOutcome]:
        return [o for o in self.entities if not o.success]

    @property
    def generation_errors(self) -> List[str]:
        return [f"{o.entity}: {err}" for o in self.entities for err in o.errors]

    def summary(self) -> str:
        """Return a human-readable summary string."""
        lines: List[str] = []
        status: str = "✅ SUCCESS" if self.success else "❌ FAILED"
        lines.append(f"{'='*60}")
        lines.append("  EntityGen — Generation Report")
        lines.append(f"{'='*60}")
        lines.append(f"  Status:     {status}{' (dry run)' if self.dry_run else ''}")
        lines.append(f"  Project:    {self.project_dir}")
        lines.append(f"  Strategy:   {self.strategy}")
        lines.append(f"  Entities:   {len(self.entities)} attempted, "
                     f"{len(self.failed_entities)} failed")
        lines.append(f"  Total time: {self.total_elapsed_seconds:.3f}s")

        if self.entities:
            lines.append(f"{'─'*60}")
            for outcome in self.entities:
                icon: str = "✓" if outcome.success else "✗"
                produced: str = ", ".join(outcome.artifacts) or "nothing"
                lines.append(f"    {icon} {outcome.entity:<24s} {produced}")
                for warn in outcome.warnings:
                    lines.append(f"        ⚠ {warn}")
                for err in outcome.errors:
                    lines.append(f"        ✗ {err}")

        if self.validation_errors:
            lines.append(f"{'─'*60}")
            lines.append(f"  Validation Errors ({len(self.validation_errors)}):")
            for err in self.validation_errors:
                lines.append(f"    ✗ {err}")

        if self.validation_warnings:
            lines.append(f"{'─'*60}")
            lines.append(f"  Validation Warnings ({len(self.validation_warnings)}):")
            for warn in self.validation_warnings:
                lines.append(f"    ⚠ {warn}")

        if self.skipped_entities:
            lines.append(f"{'─'*60}")
            lines.append(f"  Skipped Entities ({len(self.skipped_entities)}):")
            for name in self.skipped_entities:
                lines.append(f"    ⊘ {name}")

        lines.append(f"{'='*60}")
        return "\n".join(lines)


# ---------------------------------------------------------------------------
# Config helpers
# ---------------------------------------------------------------------------


def build_config(
    config_data: Optional[Mapping[str, Any]] = None,
    overrides: Optional[Mapping[str, Any]] = None,
) -> GenerationConfig:
    """
    Merge a catalog file's ``config`` section with command-line overrides.

    Raises:
        ValueError: If the merged values don't validate.
    """
    merged: Dict[str, Any] = dict(config_data or {})
    merged.update(overrides or {})
    try:
        return GenerationConfig.model_validate(merged)
    except (ModelValidationError, ValueError) as exc:
        raise ValueError(f"Config validation failed: {exc}") from exc


def _log_progress(message: str) -> None:
    logger.info(message)


# ---------------------------------------------------------------------------
# EntityGenerator
# ---------------------------------------------------------------------------


class EntityGenerator:
    """
    Drives the framework generators for every entity of a catalog.

    Usage::

        generator = EntityGenerator(config)
        report = generator.generate(default_catalog())
        print(report.summary())

    *runner* defaults to an ``ArtisanRunner`` for ``config.project_dir``
    (or a ``DryRunRunner`` in dry-run mode); *clock* supplies migration
    timestamps; *progress* receives one line per generated entity.
    """

    def __init__(
        self,
        config: GenerationConfig,
        *,
        runner: Optional[GeneratorRunner] = None,
        clock: Optional[Callable[[], datetime]] = None,
        progress: Optional[Callable[[str], None]] = None,
    ) -> None:
        self.config: GenerationConfig = config
        if runner is None:
            runner = DryRunRunner() if config.dry_run else ArtisanRunner.from_config(config)
        self._runner: GeneratorRunner = runner
        self._clock: Callable[[], datetime] = clock or datetime.now
        self._last_migration_time: Optional[datetime] = None
        self._progress: Callable[[str], None] = progress or _log_progress
        self._templates: TemplateGenerator = TemplateGenerator(config)
        self._strategy: GenerationStrategy = GenerationStrategy(config.strategy)

        logger.debug(
            "EntityGenerator initialised: project=%s, strategy=%s, dry_run=%s.",
            config.project_dir,
            self._strategy.value,
            config.dry_run,
        )

    # -----------------------------------------------------------------
    # Public
    # -----------------------------------------------------------------

    def generate(self, catalog: SchemaCatalog) -> GenerationReport:
        """Validate, then generate every entity in catalog order."""
        pipeline_start: float = time.perf_counter()
        report: GenerationReport = GenerationReport(
            strategy=self._strategy.value,
            project_dir=str(Path(self.config.project_dir).resolve()),
            dry_run=self.config.dry_run,
        )

        validation: ValidationResult = validate_full(catalog, self.config)
        report.validation_errors.extend(str(e) for e in validation.errors)
        report.validation_warnings.extend(str(w) for w in validation.warnings)
        for warn in validation.warnings:
            logger.warning("  ⚠ %s", warn)
        if not validation.is_valid:
            for err in validation.errors:
                logger.error("  ✗ %s", err)
            return self._finalise_report(report, pipeline_start)

        for index, entity in enumerate(catalog.entities):
            outcome: EntityOutcome = self.generate_entity(entity)
            report.entities.append(outcome)

            if outcome.success:
                self._progress(outcome.message)
                continue

            logger.error(
                "Entity '%s' failed: %s", entity.name, "; ".join(outcome.errors)
            )
            if not self.config.continue_on_error:
                report.skipped_entities.extend(
                    e.name for e in catalog.entities[index + 1:]
                )
                logger.error(
                    "Stopping run; %d entities not attempted.",
                    len(report.skipped_entities),
                )
                break

        return self._finalise_report(report, pipeline_start)

    def generate_entity(self, entity: EntitySchema) -> EntityOutcome:
        """Run all five generator steps (and both patches) for one entity."""
        names: ArtifactNames = ArtifactNames.for_entity(entity.name)
        outcome: EntityOutcome = EntityOutcome(entity=entity.name, names=names)

        with Timer(f"entity {entity.name}") as t:
            try:
                self._step_migration(entity, names, outcome)
                self._step_model(entity, names, outcome)

                self._runner.call(
                    "make:controller",
                    [names.controller_name, f"--model={names.model_name}"],
                )
                outcome.artifacts.append("controller")

                self._runner.call("make:request", [names.request_name])
                outcome.artifacts.append("request")

                self._runner.call("make:resource", [names.resource_name])
                outcome.artifacts.append("resource")
            except GeneratorInvocationError as exc:
                outcome.aborted = True
                outcome.errors.append(str(exc))

        outcome.elapsed_seconds = t.elapsed
        return outcome

    # -----------------------------------------------------------------
    # Steps
    # -----------------------------------------------------------------

    def _step_migration(
        self,
        entity: EntitySchema,
        names: ArtifactNames,
        outcome: EntityOutcome,
    ) -> None:
        if self._strategy is GenerationStrategy.RENDER:
            path: Path = self.config.migrations_path / migration_filename(
                names, self._next_migration_time()
            )
            content: str = self._templates.render_migration(entity, names)
            self._write_artifact("migration", path, content, outcome)
            return

        self._runner.call(
            "make:migration",
            [names.migration_name, f"--create={names.table_token}"],
        )
        outcome.artifacts.append("migration")

        if self.config.dry_run:
            logger.info("[dry-run] would insert %d column(s).", len(entity.columns))
            return

        found: Optional[Path] = find_migration_file(
            self.config.migrations_path, names.migration_name
        )
        if found is None:
            outcome.errors.append(
                f"Migration file for '{names.migration_name}' not found in "
                f"{self.config.migrations_path}"
            )
            return

        outcome.files["migration"] = str(found)
        try:
            outcome.migration_patch = insert_columns(
                found, entity.columns, atomic=self.config.atomic_writes
            )
        except PatchError as exc:
            outcome.errors.append(str(exc))
            return

        if outcome.migration_patch is PatchStatus.ANCHOR_NOT_FOUND:
            outcome.warnings.append(f"No '$table->id();' anchor in {found.name}")

    def _step_model(
        self,
        entity: EntitySchema,
        names: ArtifactNames,
        outcome: EntityOutcome,
    ) -> None:
        model_path: Path = self.config.model_file(names.model_name)

        if self._strategy is GenerationStrategy.RENDER:
            if model_path.is_file():
                self._patch_existing_model(entity, model_path, outcome)
                return
            content: str = self._templates.render_model(entity, names)
            self._write_artifact("model", model_path, content, outcome)
            return

        arguments: List[str] = [names.model_name]
        if self.config.model_with_migration:
            arguments.append("--migration")
        self._runner.call("make:model", arguments)
        outcome.artifacts.append("model")

        if self.config.dry_run:
            logger.info("[dry-run] would set %d fillable field(s).", len(entity.columns))
            return

        self._apply_fillable(entity, model_path, outcome)

    def _patch_existing_model(
        self,
        entity: EntitySchema,
        model_path: Path,
        outcome: EntityOutcome,
    ) -> None:
        # Existing models (Laravel ships an Authenticatable User) are patched in place
        outcome.warnings.append(
            f"{model_path.name} already exists; only its fillable list was updated"
        )
        outcome.artifacts.append("model")
        if self.config.dry_run:
            logger.info("[dry-run] would set fillable on existing %s", model_path)
            return
        self._apply_fillable(entity, model_path, outcome)

    def _apply_fillable(
        self,
        entity: EntitySchema,
        model_path: Path,
        outcome: EntityOutcome,
    ) -> None:
        outcome.files["model"] = str(model_path)
        try:
            outcome.fillable_patch = set_fillable(
                model_path, entity.column_names, atomic=self.config.atomic_writes
            )
        except PatchError as exc:
            outcome.errors.append(str(exc))
            return

        if outcome.fillable_patch is PatchStatus.PATTERN_NOT_MATCHED:
            outcome.warnings.append(f"No class body in {model_path.name}; fillable not set")

    def _next_migration_time(self) -> datetime:
        # Laravel orders migrations by file name, so stamps must strictly increase
        now: datetime = self._clock().replace(microsecond=0)
        last: Optional[datetime] = self._last_migration_time
        if last is not None and now <= last:
            now = last + timedelta(seconds=1)
        self._last_migration_time = now
        return now

    def _write_artifact(
        self,
        kind: str,
        path: Path,
        content: str,
        outcome: EntityOutcome,
    ) -> None:
        if self.config.dry_run:
            logger.info("[dry-run] would write %s", path)
            outcome.artifacts.append(kind)
            return

        try:
            write_file(path, content, atomic=self.config.atomic_writes)
        except OSError as exc:
            outcome.errors.append(str(FileNotWritable(path, exc)))
            return

        outcome.artifacts.append(kind)
        outcome.files[kind] = str(path)
        logger.info("Wrote %s %s", kind, path)

    # -----------------------------------------------------------------
    # Internal: finalise report
    # -----------------------------------------------------------------

    def _finalise_report(
        self,
        report: GenerationReport,
        pipeline_start: float,
    ) -> GenerationReport:
        report.total_elapsed_seconds = time.perf_counter() - pipeline_start
        report.success = (
            not report.validation_errors
            and not report.failed_entities
            and not report.skipped_entities
        )
        return report


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "PROGRESS_TEMPLATE",
    "EntityOutcome",
    "GenerationReport",
    "EntityGenerator",
    "build_config",
]

logger.debug("entitygen.generator loaded.")
