# SPDX-License-Identifier: BUSL-1.1
"""Validation engine for ImageBuild consistency.

Checks that a build definition can produce a runnable image:
1. naming and commit format are acceptable to the build tool
2. the runtime identity is numeric and non-root
3. the entrypoint and installer settings fit an empty scratch root
"""

import re
from pathlib import PurePosixPath


SUPPORTED_FORMATS = ("docker", "oci")
SUPPORTED_MANAGERS = ("pacman",)

# Repository path with optional registry host and tag; lowercase only.
_IMAGE_REF_RE = re.compile(
    r"^(?:[a-z0-9.-]+(?::[0-9]+)?/)?"
    r"[a-z0-9]+(?:[._-][a-z0-9]+)*(?:/[a-z0-9]+(?:[._-][a-z0-9]+)*)*"
    r"(?::[A-Za-z0-9_][A-Za-z0-9_.-]{0,127})?$"
)
_USER_RE = re.compile(r"^(\d+):(\d+)$")


class ValidationError(Exception):
    """Raised when configuration validation fails."""
    def __init__(self, errors: list, warnings: list = None):
        self.errors = errors
        self.warnings = warnings or []
        msg = "; ".join(errors)
        super().__init__(msg)


class ValidationResult:
    """Collects errors and warnings from validation."""
    def __init__(self):
        self.errors = []
        self.warnings = []

    def error(self, msg: str):
        self.errors.append(msg)

    def warn(self, msg: str):
        self.warnings.append(msg)

    @property
    def valid(self) -> bool:
        return len(self.errors) == 0

    def raise_if_invalid(self):
        if not self.valid:
            raise ValidationError(self.errors, self.warnings)


def parse_user(user: str) -> tuple:
    """Split a numeric 'UID:GID' string into integers. Returns None if malformed."""
    m = _USER_RE.fullmatch(user or "")
    if not m:
        return None
    return int(m.group(1)), int(m.group(2))


def has_parent_ref(path: str) -> bool:
    """Return True if path contains a '..' component."""
    return ".." in PurePosixPath(path or "").parts


def validate_runtime(build, result: ValidationResult):
    ids = parse_user(build.runtime.user)
    if ids is None:
        result.error(
            f"runtime.user '{build.runtime.user}' must be a numeric UID:GID pair "
            "(e.g. 1000:1000)"
        )
    elif ids[0] == 0 or ids[1] == 0:
        result.error(
            f"runtime.user '{build.runtime.user}' runs as root; "
            "use a non-zero UID and GID"
        )

    if build.runtime.entrypoint and not build.runtime.entrypoint.startswith("/"):
        result.error(
            f"runtime.entrypoint '{build.runtime.entrypoint}' must be an absolute path"
        )
    elif has_parent_ref(build.runtime.entrypoint):
        result.error(
            f"runtime.entrypoint '{build.runtime.entrypoint}' must not contain '..'"
        )


def validate_build(build) -> ValidationResult:
    """Full validation of an ImageBuild definition."""
    result = ValidationResult()

    if not build.name:
        result.error("image name is empty")
    elif not _IMAGE_REF_RE.match(build.name):
        result.error(
            f"image name '{build.name}' is not a valid image reference "
            "(lowercase letters, digits, '.', '_', '-', optional ':tag')"
        )

    if not build.artifact:
        result.error("artifact path is empty")
    elif not build.artifact_name():
        result.error(f"artifact path '{build.artifact}' has no file name")

    if build.base != "scratch":
        result.warn(
            f"base '{build.base}' is not 'scratch'; runtime packages are "
            "installed without the base image's package database"
        )

    packages = [str(p).strip() for p in build.packages or []]
    if not [p for p in packages if p]:
        result.warn("no runtime packages listed; the image will contain only the artifact")
    dupes = sorted({p for p in packages if p and packages.count(p) > 1})
    if dupes:
        result.warn(f"duplicate packages will be installed once: {', '.join(dupes)}")

    validate_runtime(build, result)

    if build.commit.format not in SUPPORTED_FORMATS:
        result.error(
            f"commit.format '{build.commit.format}' is not supported "
            f"(expected one of: {', '.join(SUPPORTED_FORMATS)})"
        )

    if build.installer.manager not in SUPPORTED_MANAGERS:
        result.error(
            f"installer.manager '{build.installer.manager}' is not supported "
            f"(expected one of: {', '.join(SUPPORTED_MANAGERS)})"
        )
    if build.installer.db_path.startswith("/"):
        result.error(
            f"installer.dbPath '{build.installer.db_path}' must be relative to the image root"
        )
    elif has_parent_ref(build.installer.db_path):
        result.error(
            f"installer.dbPath '{build.installer.db_path}' must not contain '..'"
        )

    return result
