# SPDX-License-Identifier: BUSL-1.1
"""YAML build file discovery and loading."""

from pathlib import Path
from typing import Optional

import yaml

from graftpack.config.resources import ImageBuild, resource_from_dict


CONFIG_FILENAME = "graftpack.yaml"


class ConfigStore:
    """Locates and reads the ImageBuild resource for a working directory.

    Lookup order:
        1. an explicit path passed by the caller (must exist)
        2. ./graftpack.yaml in the working directory
        3. built-in defaults (the graftopstat image)
    """

    def __init__(self, config_file: Optional[Path] = None, work_dir: Optional[Path] = None):
        self.work_dir = Path(work_dir) if work_dir else Path.cwd()
        self.explicit = config_file is not None
        if config_file is not None:
            self.config_file = Path(config_file)
        else:
            self.config_file = self.work_dir / CONFIG_FILENAME

    def has_file(self) -> bool:
        return self.config_file.is_file()

    def source(self) -> str:
        """Describe where the build definition comes from."""
        if self.has_file():
            return str(self.config_file)
        return "built-in defaults"

    def load_build(self) -> ImageBuild:
        """Load the ImageBuild, falling back to defaults when no file exists.

        Raises FileNotFoundError for a missing explicit config file and
        ValueError for a file that is not valid YAML or does not hold an
        ImageBuild.
        """
        if not self.has_file():
            if self.explicit:
                raise FileNotFoundError(f"config file not found: {self.config_file}")
            return ImageBuild()

        try:
            with open(self.config_file) as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as exc:
            raise ValueError(f"{self.config_file}: invalid YAML: {exc}") from exc
        if data is None:
            return ImageBuild()
        if not isinstance(data, dict):
            raise ValueError(f"{self.config_file}: expected a mapping at top level")
        return resource_from_dict(data)

    def resolve_artifact(self, build: ImageBuild) -> Path:
        """Return the artifact path, relative paths taken from the working directory."""
        path = Path(build.artifact).expanduser()
        if not path.is_absolute():
            path = self.work_dir / path
        return path
