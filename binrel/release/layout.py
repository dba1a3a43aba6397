"""Deterministic file names and directories for built binaries.

Build output for platform ``p`` lives in ``<build_root>/<p>/``; the directory
that gets zipped is the application bundle inside it (``Cypress.app`` on macOS,
``Cypress`` elsewhere). The zip lands in the config root under the configured
zip name, whatever the platform.
"""

from __future__ import annotations

from pathlib import Path

from binrel.core.config import ReleaseConfig
from binrel.platform.detection import Platform


def zip_name(config: ReleaseConfig, platform: str | None = None) -> str:
    return config.product.zip_name


def build_dir(config: ReleaseConfig, platform: Platform) -> Path:
    root = Path(config.product.build_root)
    if not root.is_absolute():
        root = config.root / root
    return root / platform.value


def zip_dir(config: ReleaseConfig, platform: Platform) -> Path:
    """Directory whose contents end up in the release zip."""
    bundle = config.product.name
    if platform == Platform.DARWIN:
        bundle = f"{bundle}.app"
    return build_dir(config, platform) / bundle


def zip_path(config: ReleaseConfig, platform: Platform) -> Path:
    """Absolute destination of the release zip."""
    return (config.root / zip_name(config, platform.value)).resolve()
