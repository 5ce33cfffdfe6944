# File: entitygen/artisan.py
"""
EntityGen - Artisan Generator Collaborator
============================================
Thin wrapper around ``php artisan make:*``.  The orchestrator only needs
two things from the framework's generators:

1. a blocking call that either succeeds or raises
   ``GeneratorInvocationError``;
2. a predictable location for what was produced
   (``<migrations>/<Y_m_d_His>_<name>.php`` and ``<models>/<Name>.php``).

Every call runs with ``--no-interaction``.  Artisan's generators exit with
status 0 even when they refuse to overwrite an existing class, so their
output is also checked for the "already exists" message.
"""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path
from typing import List, Optional, Protocol, Sequence, Tuple

from entitygen.models import GenerationConfig

logger: logging.Logger = logging.getLogger("entitygen.artisan")

_FAILURE_MARKERS: Tuple[str, ...] = ("already exists",)


class GeneratorInvocationError(RuntimeError):
    """An artisan generator could not be run or reported failure."""

    def __init__(self, command: str, returncode: Optional[int], detail: str) -> None:
        self.command: str = command
        self.returncode: Optional[int] = returncode
        self.detail: str = detail
        status: str = "could not start" if returncode is None else f"exit {returncode}"
        message: str = f"{command} failed ({status})"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


class GeneratorRunner(Protocol):
    """Anything that can run a framework generator command."""

    def call(self, command: str, arguments: Sequence[str] = ()) -> str:
        ...


class ArtisanRunner:
    """
    Runs artisan generator commands in a Laravel project via ``subprocess``.

    Usage::

        runner = ArtisanRunner(Path("/srv/shop"))
        runner.call("make:model", ["OrderItem"])
    """

    def __init__(
        self,
        project_dir: Path,
        *,
        php_binary: str = "php",
        artisan_script: str = "artisan",
    ) -> None:
        self.project_dir: Path = project_dir
        self.php_binary: str = php_binary
        self.artisan_script: str = artisan_script

    @classmethod
    def from_config(cls, config: GenerationConfig) -> "ArtisanRunner":
        return cls(
            config.project_path,
            php_binary=config.php_binary,
            artisan_script=config.artisan_script,
        )

    def build_argv(self, command: str, arguments: Sequence[str] = ()) -> List[str]:
        return [
            self.php_binary,
            self.artisan_script,
            command,
            *arguments,
            "--no-interaction",
        ]

    def call(self, command: str, arguments: Sequence[str] = ()) -> str:
        """
        Run one generator command and return its stdout.

        Raises:
            GeneratorInvocationError: PHP could not be started, the command
                exited non-zero, or it reported that the target exists.
        """
        argv: List[str] = self.build_argv(command, arguments)
        logger.info("Running: %s", " ".join(argv))

        try:
            completed: subprocess.CompletedProcess[str] = subprocess.run(
                argv,
                cwd=str(self.project_dir),
                capture_output=True,
                text=True,
                check=False,
            )
        except OSError as exc:
            raise GeneratorInvocationError(command, None, str(exc)) from exc

        stdout: str = (completed.stdout or "").strip()
        stderr: str = (completed.stderr or "").strip()

        if completed.returncode != 0:
            raise GeneratorInvocationError(
                command, completed.returncode, stderr or stdout
            )

        lowered: str = stdout.lower()
        if any(marker in lowered for marker in _FAILURE_MARKERS):
            raise GeneratorInvocationError(command, completed.returncode, stdout)

        if stdout:
            logger.debug("%s: %s", command, stdout)
        return stdout


class DryRunRunner:
    """Records generator calls instead of running them."""

    def __init__(self) -> None:
        self.calls: List[Tuple[str, Tuple[str, ...]]] = []

    def call(self, command: str, arguments: Sequence[str] = ()) -> str:
        self.calls.append((command, tuple(arguments)))
        logger.info("[dry-run] artisan %s %s", command, " ".join(arguments))
        return ""


# ---------------------------------------------------------------------------
# Locating generated files
# ---------------------------------------------------------------------------


def find_migration_file(migrations_dir: Path, migration_name: str) -> Optional[Path]:
    """
    Return the newest ``*_<migration_name>.php`` in *migrations_dir*.

    Migration filenames start with a sortable ``Y_m_d_His`` timestamp, so
    the lexicographically last match is the most recent one.
    """
    if not migrations_dir.is_dir():
        return None
    candidates: List[Path] = sorted(migrations_dir.glob(f"*_{migration_name}.php"))
    return candidates[-1] if candidates else None


__all__: List[str] = [
    "GeneratorInvocationError",
    "GeneratorRunner",
    "ArtisanRunner",
    "DryRunRunner",
    "find_migration_file",
]
