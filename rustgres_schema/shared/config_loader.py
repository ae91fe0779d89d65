"""Configuration loading and resolution.

Settings come from up to five places. Connection credentials follow the
order the tool has always used: ``--env-file``, then the process
environment, then command-line flags, then the YAML config file, then
built-in defaults. Every other option is taken from the command line first,
then the YAML config file, then the defaults.
"""

from __future__ import annotations

import argparse
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Final, Mapping, Sequence

import yaml
from dotenv import dotenv_values

from .errors import ConfigurationError
from .naming import route_key

DEFAULT_HOST: Final[str] = "localhost"
DEFAULT_PORT: Final[int] = 5432
DEFAULT_SCHEMA: Final[str] = "public"
DEFAULT_OUTPUT_DIRECTORY: Final[str] = "src"
DEFAULT_OUTPUT_FILE: Final[str] = "schema.rs"

# option name -> environment variable
CREDENTIAL_VARIABLES: Final[dict[str, str]] = {
    "username": "POSTGRES_USER",
    "password": "POSTGRES_PASSWORD",
    "host": "POSTGRES_HOST",
    "port": "POSTGRES_PORT",
}


@dataclass(frozen=True, slots=True)
class ConnectionSettings:
    """Everything needed to open the database session."""

    host: str
    port: int
    username: str
    password: str = field(repr=False)
    database: str

    def describe(self) -> str:
        """Connection target without the password, for logging."""
        return f"postgres://{self.username}@{self.host}:{self.port}/{self.database}"


@dataclass(frozen=True, slots=True)
class GeneratorSettings:
    """Options that drive code generation."""

    schema: str = DEFAULT_SCHEMA
    output_directory: Path = Path(DEFAULT_OUTPUT_DIRECTORY)
    output_file: str = DEFAULT_OUTPUT_FILE
    routes: Mapping[str, str] = field(default_factory=dict)
    uuid: bool = False
    include_views: bool = False
    derives: tuple[str, ...] | None = None
    format: bool = True

    @property
    def output_path(self) -> Path:
        """Path of the aggregate file."""
        return self.output_directory / self.output_file

    @property
    def routed_directory(self) -> Path:
        """Directory holding routed files, named after the aggregate file."""
        return self.output_directory / Path(self.output_file).stem


def load_config(config_path: Path) -> dict[str, Any]:
    """Load a YAML configuration file.

    Raises:
        ConfigurationError: If the file cannot be read or parsed.
    """
    try:
        content = config_path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigurationError(f"Failed to read config file: {e}", str(config_path)) from e

    try:
        data = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML: {e}", str(config_path)) from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError("Config root must be a mapping", str(config_path))

    return data


def normalize_route_file(value: str) -> str:
    """Validate a route file name and return it without the ``.rs`` suffix.

    Routed files always live directly under the routed directory, so a route
    is a single file name, never a path.
    """
    name = value.strip().removesuffix(".rs")
    if not name:
        raise ConfigurationError("route file name is empty", option="table-file")
    if "/" in name or "\\" in name or ".." in name:
        raise ConfigurationError(
            f"route file '{value}' must be a plain file name, not a path",
            option="table-file",
        )
    return name


def parse_route_pairs(values: Sequence[str] | None) -> dict[str, str]:
    """Parse ``table:file`` pairs, each value possibly comma separated.

    Examples:
        >>> parse_route_pairs(["users:users,posts:content"])
        {'users': 'users', 'posts': 'content'}
    """
    routes: dict[str, str] = {}
    for value in values or ():
        for pair in value.split(","):
            if not pair.strip():
                continue
            parts = pair.split(":")
            if len(parts) != 2 or not parts[0].strip():
                raise ConfigurationError(
                    f"'{pair}' is not in the format 'table:file'",
                    option="table-file",
                )
            routes[route_key(parts[0])] = normalize_route_file(parts[1])
    return routes


def _routes_from_config(raw: Any, source: str) -> dict[str, str]:
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise ConfigurationError("'routes' must map table names to files", source, "routes")
    return {route_key(str(table)): normalize_route_file(str(file)) for table, file in raw.items()}


def _read_env_file(env_file: str | None) -> dict[str, str]:
    if not env_file:
        return {}
    path = Path(env_file)
    if not path.is_file():
        raise ConfigurationError("environment file does not exist", env_file, "env-file")
    return {key: value for key, value in dotenv_values(path).items() if value is not None}


def _resolve_credential(
    name: str,
    env_file_values: Mapping[str, str],
    environ: Mapping[str, str],
    cli_value: Any,
    config: Mapping[str, Any],
) -> Any:
    variable = CREDENTIAL_VARIABLES[name]
    for candidate in (
        env_file_values.get(variable),
        environ.get(variable),
        cli_value,
        config.get(name),
    ):
        if candidate not in (None, ""):
            return candidate
    return None


def resolve_settings(
    args: argparse.Namespace,
    environ: Mapping[str, str] | None = None,
) -> tuple[ConnectionSettings, GeneratorSettings]:
    """Merge command-line arguments, env file, environment and config file.

    Raises:
        ConfigurationError: If a required value is missing or invalid.
    """
    environ = os.environ if environ is None else environ
    config: dict[str, Any] = {}
    config_source = "config"
    if args.config:
        config = load_config(Path(args.config))
        config_source = str(args.config)

    env_file_values = _read_env_file(args.env_file)

    resolved = {
        name: _resolve_credential(name, env_file_values, environ, getattr(args, name, None), config)
        for name in CREDENTIAL_VARIABLES
    }

    for name in ("username", "password"):
        if resolved[name] is None:
            raise ConfigurationError(
                f"{CREDENTIAL_VARIABLES[name]} or --{name} must be set",
                option=name,
            )

    database = args.database or config.get("database")
    if not database:
        raise ConfigurationError("--database must be set", option="database")

    raw_port = resolved["port"] if resolved["port"] is not None else DEFAULT_PORT
    try:
        port = int(raw_port)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"'{raw_port}' is not a valid port", option="port") from e

    connection = ConnectionSettings(
        host=str(resolved["host"] or DEFAULT_HOST),
        port=port,
        username=str(resolved["username"]),
        password=str(resolved["password"]),
        database=str(database),
    )

    routes = _routes_from_config(config.get("routes"), config_source)
    routes.update(parse_route_pairs(args.table_file))

    derives = args.derive or config.get("derives")
    if derives is not None and (
        not isinstance(derives, (list, tuple)) or not all(isinstance(d, str) for d in derives)
    ):
        raise ConfigurationError("'derives' must be a list of trait paths", config_source, "derives")

    output_file = args.output or config.get("output") or DEFAULT_OUTPUT_FILE
    if "/" in output_file or "\\" in output_file:
        raise ConfigurationError("output must be a file name; use --output-directory for the path", option="output")
    if Path(output_file).stem == output_file:
        raise ConfigurationError(
            f"'{output_file}' needs an extension such as .rs; routed files go in a directory named after its stem",
            option="output",
        )

    generator = GeneratorSettings(
        schema=str(args.schema or config.get("schema") or DEFAULT_SCHEMA),
        output_directory=Path(args.output_directory or config.get("output_directory") or DEFAULT_OUTPUT_DIRECTORY),
        output_file=str(output_file),
        routes=routes,
        uuid=bool(args.uuid or config.get("uuid", False)),
        include_views=bool(args.include_views or config.get("include_views", False)),
        derives=tuple(derives) if derives is not None else None,
        format=not args.no_format and bool(config.get("format", True)),
    )

    return connection, generator
