"""
Schema Code Generator - Generates Rust structs from a PostgreSQL schema.

Each base table in the target schema becomes one struct. Tables listed in
the route table are written to dedicated files under a directory named
after the output file and declared as modules; all other structs are
written inline into the output file.
"""

from __future__ import annotations

import argparse
import logging
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Callable, Sequence

from ..shared import (
    ConnectionSettings,
    GeneratorSettings,
    RustgresError,
    resolve_settings,
)
from .emitter import GeneratorContext, emit_record
from .introspect import PostgresSession, SchemaSession, introspect_schema
from .postprocess import DEFAULT_FORMATTER, post_process
from .routing import FileRouter, OutputManifest, write_index

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class GenerationResult:
    """Summary of a completed run."""

    output_path: Path
    routed_files: tuple[Path, ...]
    struct_count: int
    inline_count: int


def generate(
    session: SchemaSession,
    settings: GeneratorSettings,
    *,
    clock: Callable[[], datetime] = datetime.now,
    formatter: str | None = DEFAULT_FORMATTER,
) -> GenerationResult:
    """Generate Rust code for every base table reachable through *session*.

    Args:
        session: Open schema session.
        settings: Output and mapping options.
        clock: Source of the timestamp written into the aggregate file.
        formatter: Formatter binary run over routed files. Ignored when
            ``settings.format`` is false.

    Returns:
        Summary of what was written.
    """
    if settings.include_views:
        logger.warning("--include-views is not implemented yet; only base tables are generated")

    for table, file in settings.routes.items():
        logger.debug("Route: %s -> %s/%s.rs", table, settings.routed_directory, file)

    ctx = GeneratorContext()
    manifest = OutputManifest()
    router = FileRouter(settings.routed_directory, settings.routes, manifest)
    router.clear_routed_files()

    struct_count = 0
    for table in introspect_schema(session, settings.schema):
        record = emit_record(
            table,
            ctx,
            uuid_mode=settings.uuid,
            derives=settings.derives,
            taken_names=manifest.record_names,
        )
        router.route(record)
        struct_count += 1

    write_index(settings.output_path, manifest, ctx, clock())
    logger.info("Wrote %s", settings.output_path)

    post_process(
        manifest.touched_files,
        formatter=formatter if settings.format else None,
    )

    return GenerationResult(
        output_path=settings.output_path,
        routed_files=tuple(manifest.touched_files),
        struct_count=struct_count,
        inline_count=len(manifest.inline_records),
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="rustgres-schema",
        description="Generate Rust structs from a PostgreSQL schema",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="YAML file providing defaults for any option below, plus a 'routes' mapping",
    )
    parser.add_argument(
        "--env-file",
        default=None,
        help=(
            "Environment file providing POSTGRES_USER, POSTGRES_PASSWORD, "
            "POSTGRES_HOST and POSTGRES_PORT. Takes precedence over the "
            "environment and the connection flags."
        ),
    )
    parser.add_argument("--host", default=None, help="PostgreSQL host (default: localhost)")
    parser.add_argument("--port", default=None, help="PostgreSQL port (default: 5432)")
    parser.add_argument("--username", default=None, help="PostgreSQL username")
    parser.add_argument("--password", default=None, help="PostgreSQL password")
    parser.add_argument("--database", default=None, help="PostgreSQL database")
    parser.add_argument(
        "-s",
        "--schema",
        default=None,
        help="PostgreSQL schema (default: public)",
    )
    parser.add_argument(
        "-i",
        "--include-views",
        action="store_true",
        help="Include views (not implemented yet, has no effect)",
    )
    parser.add_argument(
        "--table-file",
        action="append",
        default=None,
        metavar="TABLE:FILE",
        help=(
            "Write a table's struct to its own file. Separate several pairs "
            "with commas or repeat the flag. Example: 'users:users,posts:posts'"
        ),
    )
    parser.add_argument(
        "--uuid",
        action="store_true",
        help="Use uuid::Uuid for columns of type uuid",
    )
    parser.add_argument(
        "--derive",
        action="append",
        default=None,
        metavar="TRAIT",
        help="Trait to derive on every struct; repeat to replace the default set",
    )
    parser.add_argument(
        "-d",
        "--output-directory",
        default=None,
        help="Output directory (default: src)",
    )
    parser.add_argument(
        "-o",
        "--output",
        default=None,
        help="Output file (default: schema.rs)",
    )
    parser.add_argument(
        "--no-format",
        action="store_true",
        help="Do not run rustfmt on routed files",
    )
    return parser


def run(connection: ConnectionSettings, settings: GeneratorSettings) -> GenerationResult:
    """Open the session, generate, and close the session on every exit path."""
    with PostgresSession.connect(connection) as session:
        return generate(session, settings)


def main(argv: Sequence[str] | None = None) -> None:
    """CLI entry point."""
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    try:
        connection, settings = resolve_settings(args)
        result = run(connection, settings)
    except RustgresError as e:
        raise SystemExit(f"Error: {e}") from e

    print(
        f"Generated {result.struct_count} struct(s) into {result.output_path} "
        f"({len(result.routed_files)} routed file(s), {result.inline_count} inline)"
    )


if __name__ == "__main__":
    main()
