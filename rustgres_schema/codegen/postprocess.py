"""Normalization and rustfmt pass over routed files."""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path
from typing import Final, Iterable

from ..shared import OutputError

logger = logging.getLogger(__name__)

DEFAULT_FORMATTER: Final[str] = "rustfmt"


def normalize_paths(text: str) -> str:
    """Collapse the spacing code generation leaves around ``::``."""
    return text.replace(" :: ", "::")


def run_formatter(path: Path, formatter: str = DEFAULT_FORMATTER) -> bool:
    """Format *path* in place. Returns False when formatting did not happen."""
    logger.debug("Running %s on %s", formatter, path)
    try:
        result = subprocess.run(
            [formatter, "--edition", "2021", str(path)],
            capture_output=True,
            text=True,
            check=False,
        )
    except FileNotFoundError:
        logger.warning("%s not found, skipping formatting", formatter)
        return False

    if result.returncode != 0:
        logger.warning("%s failed on %s: %s", formatter, path, result.stderr.strip())
        return False

    logger.debug("Ran %s on %s", formatter, path)
    return True


def post_process(
    paths: Iterable[Path],
    *,
    formatter: str | None = DEFAULT_FORMATTER,
) -> None:
    """Normalize and format each existing file; ``formatter=None`` skips formatting."""
    for path in paths:
        if not path.exists():
            continue

        try:
            content = path.read_text(encoding="utf-8")
            normalized = normalize_paths(content)
            if normalized != content:
                path.write_text(normalized, encoding="utf-8")
        except OSError as e:
            raise OutputError(f"Failed to normalize generated file: {e}", str(path)) from e

        if formatter:
            run_formatter(path, formatter)
