# SPDX-License-Identifier: BUSL-1.1
"""Configuration system — YAML build definition loading and validation."""

from graftpack.config.resources import ImageBuild, RuntimeSpec, CommitSpec, InstallerSpec
from graftpack.config.loader import ConfigStore
from graftpack.config.validation import validate_build, ValidationError

__all__ = [
    "ImageBuild", "RuntimeSpec", "CommitSpec", "InstallerSpec",
    "ConfigStore", "validate_build", "ValidationError",
]
