"""
tests/conftest.py
Shared fixtures for the entitygen test suite.

No PHP is needed: ``FakeArtisanRunner`` stands in for ``php artisan`` and
writes the same stub files the framework's generators write, inside a
temporary Laravel-like project tree managed by pytest's ``tmp_path``.
"""

from __future__ import annotations

import copy
import logging
import pathlib
from datetime import datetime, timedelta
from typing import Any, Callable, Dict, List, Optional, Sequence, Set, Tuple

import pytest
import yaml

from entitygen.artisan import GeneratorInvocationError
from entitygen.catalog import DEFAULT_CATALOG, build_catalog
from entitygen.models import GenerationConfig, SchemaCatalog
from entitygen.utils import to_snake_plural


# ---------------------------------------------------------------------------
# Path helpers
# ---------------------------------------------------------------------------

ROOT_DIR: pathlib.Path = pathlib.Path(__file__).resolve().parent.parent
CATALOG_EXAMPLE_PATH: pathlib.Path = ROOT_DIR / "catalog_example.yaml"


# ---------------------------------------------------------------------------
# Framework stubs (what artisan writes)
# ---------------------------------------------------------------------------

MIGRATION_STUB: str = """<?php

use Illuminate\\Database\\Migrations\\Migration;
use Illuminate\\Database\\Schema\\Blueprint;
use Illuminate\\Support\\Facades\\Schema;

return new class extends Migration
{
    /**
     * Run the migrations.
     */
    public function up(): void
    {
        Schema::create('{{ table }}', function (Blueprint $table) {
            $table->id();
            $table->timestamps();
        });
    }

    /**
     * Reverse the migrations.
     */
    public function down(): void
    {
        Schema::dropIfExists('{{ table }}');
    }
};
"""

MODEL_STUB: str = """<?php

namespace App\\Models;

use Illuminate\\Database\\Eloquent\\Factories\\HasFactory;
use Illuminate\\Database\\Eloquent\\Model;

class {{ class }} extends Model
{
    use HasFactory;
}
"""

_CLASS_DIRS: Dict[str, str] = {
    "make:model": "app/Models",
    "make:controller": "app/Http/Controllers",
    "make:request": "app/Http/Requests",
    "make:resource": "app/Http/Resources",
}


def make_clock(start: Optional[datetime] = None) -> Callable[[], datetime]:
    """A clock that moves one second forward on every call."""
    current: List[datetime] = [start or datetime(2023, 10, 28, 0, 51, 22)]

    def _tick() -> datetime:
        now = current[0]
        current[0] = now + timedelta(seconds=1)
        return now

    return _tick


# ---------------------------------------------------------------------------
# Fake artisan
# ---------------------------------------------------------------------------


class FakeArtisanRunner:
    """
    Behaves like ``php artisan make:*`` for the commands entitygen uses.

    - ``make:migration <name> --create=<table>`` writes a timestamped stub.
    - ``make:model <Name> [--migration]`` writes the model stub (and a
      second migration with ``--migration``).
    - ``make:controller|request|resource`` write a placeholder class.
    - Refuses to overwrite an existing class, like artisan does.
    - ``fail_on`` entries ``(command, first_argument)`` raise.
    """

    def __init__(
        self,
        project_dir: pathlib.Path,
        *,
        clock: Optional[Callable[[], datetime]] = None,
        fail_on: Optional[Set[Tuple[str, str]]] = None,
    ) -> None:
        self.project_dir = project_dir
        self.clock = clock or make_clock()
        self.fail_on: Set[Tuple[str, str]] = set(fail_on or ())
        self.calls: List[Tuple[str, Tuple[str, ...]]] = []

    @property
    def commands(self) -> List[str]:
        return [command for command, _ in self.calls]

    def call(self, command: str, arguments: Sequence[str] = ()) -> str:
        args = tuple(arguments)
        self.calls.append((command, args))

        if (command, args[0]) in self.fail_on:
            raise GeneratorInvocationError(command, 1, "simulated failure")

        if command == "make:migration":
            table = next(a.split("=", 1)[1] for a in args if a.startswith("--create="))
            self._write_migration(args[0], table)
            return "Migration created successfully."

        target = self.project_dir / _CLASS_DIRS[command] / f"{args[0]}.php"
        if target.exists():
            raise GeneratorInvocationError(command, 0, f"{args[0]} already exists.")
        target.parent.mkdir(parents=True, exist_ok=True)

        if command == "make:model":
            target.write_text(MODEL_STUB.replace("{{ class }}", args[0]), encoding="utf-8")
            if "--migration" in args:
                table = to_snake_plural(args[0])
                self._write_migration(f"create_{table}_table", table)
        else:
            target.write_text(f"<?php\n\nclass {args[0]}\n{{\n}}\n", encoding="utf-8")
        return f"{args[0]} created successfully."

    def _write_migration(self, name: str, table: str) -> pathlib.Path:
        directory = self.project_dir / "database" / "migrations"
        directory.mkdir(parents=True, exist_ok=True)
        stamp = self.clock().strftime("%Y_%m_%d_%H%M%S")
        path = directory / f"{stamp}_{name}.php"
        path.write_text(MIGRATION_STUB.replace("{{ table }}", table), encoding="utf-8")
        return path


# ---------------------------------------------------------------------------
# Logging isolation
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_entitygen_logger():
    """The CLI reconfigures the package logger; undo that after each test."""
    yield
    root = logging.getLogger("entitygen")
    root.handlers.clear()
    root.setLevel(logging.NOTSET)
    root.propagate = True


# ---------------------------------------------------------------------------
# Project fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def laravel_project(tmp_path: pathlib.Path) -> pathlib.Path:
    """An empty Laravel-shaped project directory with an artisan script."""
    project = tmp_path / "shop"
    (project / "database" / "migrations").mkdir(parents=True)
    (project / "app" / "Models").mkdir(parents=True)
    (project / "artisan").write_text("#!/usr/bin/env php\n<?php\n", encoding="utf-8")
    return project


@pytest.fixture()
def clock() -> Callable[[], datetime]:
    return make_clock()


@pytest.fixture()
def fake_runner(laravel_project: pathlib.Path, clock) -> FakeArtisanRunner:
    return FakeArtisanRunner(laravel_project, clock=clock)


@pytest.fixture()
def patch_config(laravel_project: pathlib.Path) -> GenerationConfig:
    return GenerationConfig(project_dir=str(laravel_project), strategy="patch")


@pytest.fixture()
def render_config(laravel_project: pathlib.Path) -> GenerationConfig:
    return GenerationConfig(project_dir=str(laravel_project), strategy="render")


def migration_files(project: pathlib.Path, name: str) -> List[pathlib.Path]:
    return sorted((project / "database" / "migrations").glob(f"*_{name}.php"))


# ---------------------------------------------------------------------------
# Catalog fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def order_items_catalog() -> SchemaCatalog:
    return build_catalog(
        {
            "order_items": {
                "order_id": "foreignId",
                "product_id": "foreignId",
                "quantity": "integer",
            }
        }
    )


@pytest.fixture()
def small_catalog_dict() -> Dict[str, Dict[str, str]]:
    return {
        "users": {"name": "string", "email": "string"},
        "products": {"name": "string", "price": "decimal"},
        "orders": {"user_id": "foreignId", "total_amount": "decimal"},
    }


@pytest.fixture()
def small_catalog(small_catalog_dict: Dict[str, Dict[str, str]]) -> SchemaCatalog:
    return build_catalog(small_catalog_dict)


@pytest.fixture()
def default_catalog_dict() -> Dict[str, Dict[str, str]]:
    """Deep copy of the built-in catalog so each test can mutate freely."""
    return copy.deepcopy(DEFAULT_CATALOG)


@pytest.fixture()
def catalog_yaml_path(tmp_path: pathlib.Path, small_catalog_dict) -> pathlib.Path:
    """Write a small catalog document (with a config section) to YAML."""
    document: Dict[str, Any] = {
        "dialect": "simple",
        "config": {"strategy": "render", "continue_on_error": True},
        "entities": small_catalog_dict,
    }
    path = tmp_path / "catalog.yaml"
    with open(path, "w", encoding="utf-8") as fh:
        yaml.safe_dump(document, fh, sort_keys=False)
    return path
