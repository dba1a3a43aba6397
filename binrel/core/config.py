"""Typed configuration loading.

The release pipeline reads an optional ``binrel.toml``. Every key has a
default matching the public download service, so a missing file is not an
error; a present but malformed file is.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from .result import Err, Ok, Result
from .structured import StrDict, as_str_dict, get_float, get_str, get_str_list, get_table

__all__ = [
    "CONFIG_ENV_VAR",
    "CONFIG_FILE_NAME",
    "DEFAULT_DOWNLOAD_BASE_URL",
    "CommandsConfig",
    "ConfigError",
    "DownloadConfig",
    "ProductConfig",
    "ReleaseConfig",
    "find_config_path",
    "load_config",
    "load_config_or_default",
]

CONFIG_FILE_NAME = "binrel.toml"
CONFIG_ENV_VAR = "BINREL_CONFIG"

DEFAULT_DOWNLOAD_BASE_URL = "https://download.cypress.io/desktop"
DEFAULT_PURGE_COMMAND = "yarn binary-purge --version {version}"
DEFAULT_ENSURE_COMMAND = "yarn binary-ensure --version {version}"
DEFAULT_PROBE_TIMEOUT_SECONDS = 30.0

Command = tuple[str, ...]


@dataclass(frozen=True, slots=True)
class ConfigError:
    """Error when config cannot be loaded or parsed."""

    message: str
    path: Path | None = None


@dataclass(frozen=True, slots=True)
class ProductConfig:
    """What is being released and where its build output lives."""

    name: str = "Cypress"
    current_version: str = "0.0.0"
    zip_name: str = "cypress.zip"
    build_root: str = "build"


@dataclass(frozen=True, slots=True)
class DownloadConfig:
    """Public download endpoint and the remediation hints printed on gaps."""

    base_url: str = DEFAULT_DOWNLOAD_BASE_URL
    purge_command: str = DEFAULT_PURGE_COMMAND
    ensure_command: str = DEFAULT_ENSURE_COMMAND
    timeout: float = DEFAULT_PROBE_TIMEOUT_SECONDS


@dataclass(frozen=True, slots=True)
class CommandsConfig:
    """Command lines for the external collaborators.

    Arguments may contain ``{platform}``, ``{arch}``, ``{version}``,
    ``{zip_file}``, ``{zip_name}`` and ``{manifest_file}`` placeholders.
    """

    build: Command = ("yarn", "binary-build", "--platform", "{platform}", "--version", "{version}")
    upload_binary: Command = (
        "aws",
        "s3",
        "cp",
        "{zip_file}",
        "s3://cdn.cypress.io/desktop/{version}/{platform}-{arch}/{zip_name}",
    )
    upload_manifest: Command = (
        "aws",
        "s3",
        "cp",
        "{manifest_file}",
        "s3://cdn.cypress.io/desktop.json",
    )
    purge_version: Command = ("yarn", "binary-purge", "--version", "{version}")


def _empty_tasks() -> dict[str, Command]:
    return {}


@dataclass(frozen=True, slots=True)
class ReleaseConfig:
    """Main configuration container."""

    product: ProductConfig = field(default_factory=ProductConfig)
    download: DownloadConfig = field(default_factory=DownloadConfig)
    commands: CommandsConfig = field(default_factory=CommandsConfig)
    tasks: dict[str, Command] = field(default_factory=_empty_tasks)
    root: Path = field(default_factory=Path.cwd)

    @classmethod
    def from_dict(cls, data: Mapping[str, object], *, root: Path) -> ReleaseConfig:
        """Create a config from parsed TOML, relative paths anchored at ``root``."""
        release: StrDict = get_table(data, "release") or {}
        download: StrDict = get_table(data, "download") or {}
        commands: StrDict = get_table(data, "commands") or {}
        tasks: StrDict = get_table(data, "tasks") or {}

        default_product = ProductConfig()
        default_download = DownloadConfig()
        default_commands = CommandsConfig()

        parsed_tasks: dict[str, Command] = {}
        for name in tasks:
            cmd = get_str_list(tasks, name)
            if cmd is None:
                raise ValueError(f"tasks.{name} must be a non-empty command")
            parsed_tasks[name] = cmd

        return cls(
            product=ProductConfig(
                name=get_str(release, "product") or default_product.name,
                current_version=get_str(release, "current_version")
                or default_product.current_version,
                zip_name=get_str(release, "zip_name") or default_product.zip_name,
                build_root=get_str(release, "build_root") or default_product.build_root,
            ),
            download=DownloadConfig(
                base_url=(get_str(download, "base_url") or default_download.base_url).rstrip("/"),
                purge_command=get_str(download, "purge_command") or default_download.purge_command,
                ensure_command=get_str(download, "ensure_command")
                or default_download.ensure_command,
                timeout=get_float(download, "timeout") or default_download.timeout,
            ),
            commands=CommandsConfig(
                build=get_str_list(commands, "build") or default_commands.build,
                upload_binary=get_str_list(commands, "upload_binary")
                or default_commands.upload_binary,
                upload_manifest=get_str_list(commands, "upload_manifest")
                or default_commands.upload_manifest,
                purge_version=get_str_list(commands, "purge_version")
                or default_commands.purge_version,
            ),
            tasks=parsed_tasks,
            root=root,
        )


def find_config_path(explicit: Path | None = None, *, cwd: Path | None = None) -> Path | None:
    """Locate the config file: explicit path, then $BINREL_CONFIG, then ./binrel.toml."""
    if explicit is not None:
        return explicit.expanduser()

    env = os.environ.get(CONFIG_ENV_VAR)
    if env:
        return Path(env).expanduser()

    candidate = (cwd or Path.cwd()) / CONFIG_FILE_NAME
    if candidate.is_file():
        return candidate
    return None


def _parse_toml(path: Path) -> Result[StrDict, ConfigError]:
    import tomllib

    try:
        data_obj: object = tomllib.loads(path.read_bytes().decode("utf-8"))
    except FileNotFoundError:
        return Err(ConfigError(f"Config file not found: {path}", path=path))
    except PermissionError:
        return Err(ConfigError(f"Permission denied reading: {path}", path=path))
    except tomllib.TOMLDecodeError as e:
        return Err(ConfigError(f"Invalid TOML syntax: {e}", path=path))
    except UnicodeDecodeError as e:
        return Err(ConfigError(f"Error reading config: {e}", path=path))

    data = as_str_dict(data_obj)
    if data is None:
        return Err(ConfigError("Config root must be a TOML table", path=path))
    return Ok(data)


def load_config(path: Path) -> Result[ReleaseConfig, ConfigError]:
    """Load and parse configuration from a TOML file.

    Args:
        path: Path to binrel.toml

    Returns:
        Ok(ReleaseConfig) on success, Err(ConfigError) on failure
    """
    result = _parse_toml(path)
    if isinstance(result, Err):
        return result

    try:
        return Ok(ReleaseConfig.from_dict(result.value, root=path.resolve().parent))
    except (KeyError, TypeError, ValueError) as e:
        return Err(ConfigError(f"Invalid config structure: {e}", path=path))


def load_config_or_default(explicit: Path | None = None) -> Result[ReleaseConfig, ConfigError]:
    """Load the located config file, or defaults rooted at the cwd when there is none."""
    path = find_config_path(explicit)
    if path is None:
        return Ok(ReleaseConfig())
    return load_config(path)
