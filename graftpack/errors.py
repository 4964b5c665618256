# SPDX-License-Identifier: BUSL-1.1
"""Build step failures.

Every step of the image pipeline raises its own subclass of BuildError.
All of them are fatal; none is retried.
"""


class BuildError(Exception):
    """Raised when a pipeline step fails.

    command is the argv of the failing external tool (empty when the failure
    happened in-process) and returncode its exit status, or None.
    """
    step = "build"

    def __init__(self, message: str, command: list = None, returncode: int = None):
        self.command = list(command or [])
        self.returncode = returncode
        super().__init__(message)

    @property
    def exit_code(self) -> int:
        if self.returncode:
            return self.returncode
        return 1


class AllocationError(BuildError):
    step = "allocate"


class MountError(BuildError):
    step = "mount"


class InstallError(BuildError):
    step = "install"


class CopyError(BuildError):
    step = "copy"


class ConfigError(BuildError):
    step = "config"


class CommitError(BuildError):
    step = "commit"


class UnmountError(BuildError):
    step = "unmount"
