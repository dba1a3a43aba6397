from __future__ import annotations

from pathlib import Path

from binrel.core.config import ProductConfig, ReleaseConfig
from binrel.platform.detection import Platform
from binrel.release import layout


def test_zip_dir_per_platform(tmp_path: Path) -> None:
    config = ReleaseConfig(root=tmp_path)
    assert layout.zip_dir(config, Platform.LINUX) == tmp_path / "build" / "linux" / "Cypress"
    assert layout.zip_dir(config, Platform.WIN32) == tmp_path / "build" / "win32" / "Cypress"
    assert layout.zip_dir(config, Platform.DARWIN) == tmp_path / "build" / "darwin" / "Cypress.app"


def test_absolute_build_root(tmp_path: Path) -> None:
    config = ReleaseConfig(product=ProductConfig(build_root=str(tmp_path / "out")), root=Path("/x"))
    assert layout.build_dir(config, Platform.LINUX) == tmp_path / "out" / "linux"


def test_zip_path_is_absolute_and_platform_independent(tmp_path: Path) -> None:
    config = ReleaseConfig(root=tmp_path)
    assert layout.zip_path(config, Platform.LINUX) == (tmp_path / "cypress.zip").resolve()
    assert layout.zip_path(config, Platform.LINUX) == layout.zip_path(config, Platform.DARWIN)
    assert layout.zip_name(config) == "cypress.zip"
