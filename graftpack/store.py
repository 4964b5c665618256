# SPDX-License-Identifier: BUSL-1.1
"""Image store operations — allocate, mount, configure and commit containers."""

import json
import subprocess
from pathlib import Path

from graftpack.errors import (
    AllocationError,
    CommitError,
    ConfigError,
    MountError,
    UnmountError,
)
from graftpack.utils import format_command


def run_tool(cmd: list, error_cls, capture: bool = False) -> str:
    """Run an external tool, raising error_cls on failure.

    stderr is never captured so the tool's own diagnostics reach the user.
    With capture=True, returns the last non-empty line of stdout.
    """
    try:
        result = subprocess.run(
            cmd,
            stdout=subprocess.PIPE if capture else None,
            text=True,
            check=True,
        )
    except FileNotFoundError as exc:
        raise error_cls(f"{cmd[0]}: command not found", cmd, 127) from exc
    except subprocess.CalledProcessError as exc:
        raise error_cls(
            f"'{format_command(cmd)}' failed with exit code {exc.returncode}",
            cmd,
            exc.returncode,
        ) from exc

    if not capture:
        return ""
    lines = [line.strip() for line in (result.stdout or "").splitlines() if line.strip()]
    return lines[-1] if lines else ""


class ImageStore:
    """Container/image backing store used by the build pipeline.

    Implementations hold the process-wide state of a build tool. The
    pipeline only talks to this interface so it can run against a fake.
    """

    def allocate(self, base: str = "scratch") -> str:
        """Create a working container from base and return its handle."""
        raise NotImplementedError

    def mount(self, container: str) -> Path:
        """Mount the container's root filesystem and return the host path."""
        raise NotImplementedError

    def unmount(self, container: str):
        raise NotImplementedError

    def configure(self, container: str, user: str = "", entrypoint: list = None):
        """Record run-time user and entrypoint metadata on the container."""
        raise NotImplementedError

    def commit(self, container: str, image_name: str, fmt: str = "docker") -> str:
        """Seal the container into an image and return the image id."""
        raise NotImplementedError

    def image_exists(self, image_name: str) -> bool:
        raise NotImplementedError


class BuildahStore(ImageStore):
    """ImageStore backed by the buildah CLI."""

    def __init__(self, executable: str = "buildah"):
        self.executable = executable

    def allocate(self, base: str = "scratch") -> str:
        cmd = [self.executable, "from", base]
        container = run_tool(cmd, AllocationError, capture=True)
        if not container:
            raise AllocationError(f"'{format_command(cmd)}' printed no container name", cmd)
        return container

    def mount(self, container: str) -> Path:
        cmd = [self.executable, "mount", container]
        mountpoint = run_tool(cmd, MountError, capture=True)
        if not mountpoint:
            raise MountError(f"'{format_command(cmd)}' printed no mountpoint", cmd)
        return Path(mountpoint)

    def unmount(self, container: str):
        run_tool([self.executable, "unmount", container], UnmountError)

    def configure(self, container: str, user: str = "", entrypoint: list = None):
        cmd = [self.executable, "config"]
        if user:
            cmd.extend(["--user", user])
        if entrypoint:
            # JSON form: exec the vector directly, no /bin/sh -c wrapper
            cmd.extend(["--entrypoint", json.dumps(list(entrypoint))])
        if len(cmd) == 2:
            return
        cmd.append(container)
        run_tool(cmd, ConfigError)

    def commit(self, container: str, image_name: str, fmt: str = "docker") -> str:
        cmd = [self.executable, "commit", "--format", fmt, container, image_name]
        return run_tool(cmd, CommitError, capture=True)

    def image_exists(self, image_name: str) -> bool:
        """Check if an image with this name exists in local storage."""
        try:
            result = subprocess.run(
                [self.executable, "inspect", "--type", "image", image_name],
                capture_output=True, text=True
            )
            return result.returncode == 0
        except FileNotFoundError:
            return False
