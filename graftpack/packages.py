# SPDX-License-Identifier: BUSL-1.1
"""Runtime package installation into a mounted image root."""

from pathlib import Path

from graftpack.errors import InstallError
from graftpack.store import run_tool
from graftpack.utils import path_within


class PackageInstaller:
    """Installs OS packages into a foreign root filesystem."""

    def install(self, root: Path, packages: list):
        raise NotImplementedError


class PacmanInstaller(PackageInstaller):
    """Install with the host's pacman, using a package database inside root.

    The target root has no pacman database of its own, so db_path (relative
    to root) is created before pacman runs.
    """

    def __init__(self, executable: str = "pacman", db_path: str = "var/lib/pacman"):
        self.executable = executable
        self.db_path = db_path

    def prepare(self, root: Path) -> Path:
        try:
            db_dir = path_within(root, self.db_path)
        except ValueError as exc:
            raise InstallError(f"cannot create package database: {exc}") from exc
        try:
            db_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise InstallError(f"cannot create package database {db_dir}: {exc}") from exc
        return db_dir

    def command(self, root: Path, packages: list) -> list:
        return [
            self.executable, "-Sy",
            "--root", str(root),
            "--noconfirm",
            *packages,
        ]

    def install(self, root: Path, packages: list):
        self.prepare(root)
        if not packages:
            return
        run_tool(self.command(root, packages), InstallError)


INSTALLERS = {
    "pacman": PacmanInstaller,
}


def installer_for(build) -> PackageInstaller:
    """Return the installer configured for an ImageBuild."""
    cls = INSTALLERS.get(build.installer.manager)
    if cls is None:
        raise ValueError(f"Unknown package manager: {build.installer.manager}")
    return cls(db_path=build.installer.db_path)
