# SPDX-License-Identifier: BUSL-1.1
"""Resource dataclasses for graftpack configuration.

An ImageBuild is stored as a Kubernetes-style YAML file with apiVersion,
kind, metadata, and spec fields. Defaults describe the graftopstat image.
"""

from dataclasses import dataclass, field
from pathlib import PurePosixPath


DEFAULT_IMAGE_NAME = "graftopstat"
DEFAULT_ARTIFACT = "./target/release/graftopstat"
DEFAULT_PACKAGES = ["procps-ng", "net-tools"]
DEFAULT_USER = "1000:1000"


@dataclass
class RuntimeSpec:
    user: str = DEFAULT_USER         # numeric UID:GID
    entrypoint: str = ""             # "" → /<artifact basename>


@dataclass
class CommitSpec:
    format: str = "docker"           # docker | oci


@dataclass
class InstallerSpec:
    manager: str = "pacman"
    db_path: str = "var/lib/pacman"  # relative to the image root


@dataclass
class ImageBuild:
    """Describes one image: what goes into it and how it runs."""
    name: str = DEFAULT_IMAGE_NAME
    base: str = "scratch"
    artifact: str = DEFAULT_ARTIFACT
    packages: list = field(default_factory=lambda: list(DEFAULT_PACKAGES))
    runtime: RuntimeSpec = field(default_factory=RuntimeSpec)
    commit: CommitSpec = field(default_factory=CommitSpec)
    installer: InstallerSpec = field(default_factory=InstallerSpec)

    def artifact_name(self) -> str:
        """Return the file name the artifact gets at the image root."""
        return PurePosixPath(self.artifact).name

    def entrypoint_path(self) -> str:
        """Return the in-image path of the executable run by default."""
        if self.runtime.entrypoint:
            return self.runtime.entrypoint
        return f"/{self.artifact_name()}"

    def entrypoint_vector(self) -> list:
        """Return the command vector recorded as the image entrypoint."""
        return [self.entrypoint_path()]


# ── Serialization helpers ────────────────────────────────────────────────

API_VERSION = "graftpack/v1"

KIND_MAP = {
    "ImageBuild": ImageBuild,
}


def resource_to_dict(resource) -> dict:
    """Convert a resource dataclass to a YAML-serializable dict."""
    kind = type(resource).__name__

    spec = _dataclass_to_dict(resource)
    name = spec.pop("name", "")

    return {
        "apiVersion": API_VERSION,
        "kind": kind,
        "metadata": {"name": name},
        "spec": spec,
    }


def resource_from_dict(data: dict):
    """Parse a YAML dict into the appropriate resource dataclass."""
    kind = data.get("kind", "")
    cls = KIND_MAP.get(kind)
    if cls is None:
        raise ValueError(f"Unknown resource kind: {kind}")

    spec = dict(data.get("spec") or {})
    name = (data.get("metadata") or {}).get("name", "")
    if name:
        spec["name"] = name

    return _dict_to_dataclass(cls, spec)


def _camel(name: str) -> str:
    parts = name.split("_")
    return parts[0] + "".join(p.capitalize() for p in parts[1:])


def _dataclass_to_dict(obj) -> dict:
    """Recursively convert a dataclass to a plain dict with camelCase keys."""
    from dataclasses import fields, is_dataclass
    if not is_dataclass(obj):
        return obj
    result = {}
    for f in fields(obj):
        val = getattr(obj, f.name)
        if is_dataclass(val):
            val = _dataclass_to_dict(val)
        elif isinstance(val, list):
            val = [_dataclass_to_dict(v) if is_dataclass(v) else v for v in val]
        result[_camel(f.name)] = val
    return result


def _dict_to_dataclass(cls, data: dict):
    """Recursively construct a dataclass from a dict, matching camelCase or snake_case keys."""
    from dataclasses import fields, is_dataclass

    if not isinstance(data, dict):
        return data

    kwargs = {}
    field_map = {f.name: f for f in fields(cls)}

    alias_map = {}
    for f in fields(cls):
        alias_map[_camel(f.name)] = f.name
        alias_map[f.name] = f.name

    for key, val in data.items():
        field_name = alias_map.get(key, key)
        if field_name not in field_map:
            continue
        field_type = field_map[field_name].type

        if is_dataclass(field_type):
            kwargs[field_name] = _dict_to_dataclass(field_type, val) if isinstance(val, dict) else field_type()
        elif field_type is list:
            # a lone scalar ("packages: procps-ng") is a one-item list
            kwargs[field_name] = [val] if isinstance(val, str) else list(val or [])
        elif field_type is str:
            kwargs[field_name] = "" if val is None else str(val).strip()
        else:
            kwargs[field_name] = val

    return cls(**kwargs)
