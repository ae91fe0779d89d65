"""Destination routing for generated structs and the aggregate module file.

A table whose canonical name has a configured route gets its struct written
to ``<output dir>/<output stem>/<route>.rs``. The first write to a routed file
during a run truncates it so structs from earlier runs never accumulate;
later writes in the same run append. Every other struct is kept in the
manifest and written inline into the aggregate file, after one ``pub mod``
declaration per routed file.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Final, Mapping

from ..shared import OutputError, module_identifier, route_key, unraw
from .emitter import GeneratorContext
from .models import GeneratedRecord

logger = logging.getLogger(__name__)

BANNER: Final[tuple[str, ...]] = (
    "This file was generated by rustgres-schema",
    "Do not edit this file directly",
)
TIMESTAMP_FORMAT: Final[str] = "%Y-%m-%d %H:%M:%S"


@dataclass
class OutputManifest:
    """Per-run record of what has been generated and where."""

    module_declarations: list[str] = field(default_factory=list)
    inline_records: list[GeneratedRecord] = field(default_factory=list)
    touched_files: list[Path] = field(default_factory=list)
    record_names: set[str] = field(default_factory=set)

    def declare_module(self, declaration: str) -> None:
        if declaration not in self.module_declarations:
            self.module_declarations.append(declaration)

    def touch(self, path: Path) -> bool:
        """Register *path*; returns True the first time it is seen."""
        if path in self.touched_files:
            return False
        self.touched_files.append(path)
        return True


class FileRouter:
    """Writes each struct either to its routed file or into the manifest."""

    def __init__(
        self,
        routed_directory: Path,
        routes: Mapping[str, str],
        manifest: OutputManifest,
    ) -> None:
        self.routed_directory = routed_directory
        self.routes = {route_key(table): file for table, file in routes.items()}
        self.manifest = manifest

    def destination_for(self, record: GeneratedRecord) -> tuple[Path, str] | None:
        """Routed file path and module name for *record*, or None if unrouted."""
        route = self.routes.get(route_key(record.table_name))
        if route is None:
            return None
        return self.path_for(route)

    def path_for(self, route: str) -> tuple[Path, str]:
        """Routed file path and module name for a route file name."""
        module = module_identifier(route)
        return self.routed_directory / f"{unraw(module)}.rs", module

    def clear_routed_files(self) -> None:
        """Delete every configured routed file before a run writes any.

        Files for routes whose tables no longer exist are removed too.
        """
        for route in self.routes.values():
            path, _ = self.path_for(route)
            try:
                if path.exists():
                    logger.debug("Deleting %s", path)
                    path.unlink()
            except OSError as e:
                raise OutputError(f"Failed to delete routed file: {e}", str(path)) from e

    def route(self, record: GeneratedRecord) -> Path | None:
        """Place *record*; returns the routed file path, or None when inlined."""
        destination = self.destination_for(record)
        if destination is None:
            logger.debug("Keeping %s inline", record.name)
            self.manifest.inline_records.append(record)
            return None

        path, module = destination
        first_write = self.manifest.touch(path)
        if first_write:
            self._reset(path)
        logger.debug("Writing struct %s to %s", record.name, path)

        try:
            with path.open("a", encoding="utf-8") as handle:
                if not first_write:
                    handle.write("\n")
                handle.write(record.text)
        except OSError as e:
            raise OutputError(f"Failed to write struct {record.name}: {e}", str(path)) from e

        self.manifest.declare_module(f"pub mod {module};")
        return path

    def _reset(self, path: Path) -> None:
        try:
            if path.exists():
                logger.debug("Deleting %s", path)
                path.unlink()
            path.parent.mkdir(parents=True, exist_ok=True)
            path.touch()
        except OSError as e:
            raise OutputError(f"Failed to reset routed file: {e}", str(path)) from e


def write_index(
    output_path: Path,
    manifest: OutputManifest,
    ctx: GeneratorContext,
    generated_at: datetime,
) -> None:
    """Write the aggregate file, replacing any previous contents."""
    rendered = ctx.index_template.render(
        banner=BANNER,
        generated_at=generated_at.strftime(TIMESTAMP_FORMAT),
        module_declarations=manifest.module_declarations,
        inline_records=manifest.inline_records,
    )
    try:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(rendered, encoding="utf-8")
    except OSError as e:
        raise OutputError(f"Failed to write aggregate file: {e}", str(output_path)) from e
