# SPDX-License-Identifier: BUSL-1.1
"""Image assembly pipeline.

Steps run strictly in order and the first failure stops the build:

    allocate → mount → populate runtime → install artifact
             → configure identity → commit → unmount

The mount is scoped: it is released on every exit path. The container
allocated in the first step is never removed automatically; when a later
step fails its handle is printed so it can be cleaned up by hand.
"""

import os
import shutil
import stat
from contextlib import contextmanager
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from graftpack.config.resources import ImageBuild
from graftpack.config.validation import validate_build
from graftpack.errors import BuildError, CopyError, UnmountError
from graftpack.packages import PackageInstaller
from graftpack.store import ImageStore
from graftpack.utils import merge_unique, path_within


@dataclass
class BuildResult:
    image_name: str
    image_id: str
    container: str
    entrypoint: list = field(default_factory=list)
    user: str = ""
    replaced: bool = False


def preflight(build: ImageBuild, artifact: Path):
    """Reject a build that cannot succeed, before anything is allocated."""
    validate_build(build).raise_if_invalid()
    if not artifact.is_file():
        raise CopyError(f"artifact not found: {artifact}")


def allocate_container(store: ImageStore, build: ImageBuild) -> str:
    return store.allocate(build.base)


@contextmanager
def mounted(store: ImageStore, container: str):
    """Mount container for the duration of the block, unmounting on exit.

    An unmount failure while another error is propagating is reported but
    does not replace that error.
    """
    root = store.mount(container)
    try:
        yield root
    except BaseException:
        try:
            store.unmount(container)
        except UnmountError as exc:
            print(f"Warning: {exc}")
        raise
    store.unmount(container)


def populate_runtime(installer: PackageInstaller, root: Path, build: ImageBuild):
    installer.install(root, merge_unique(build.packages))


def install_artifact(root: Path, artifact: Path, build: ImageBuild) -> Path:
    """Copy the artifact to its entrypoint path under root and make it executable by all."""
    try:
        dest = path_within(root, build.entrypoint_path())
    except ValueError as exc:
        raise CopyError(f"cannot install {artifact}: {exc}") from exc
    try:
        dest.parent.mkdir(parents=True, exist_ok=True)
        shutil.copyfile(artifact, dest)
        mode = os.stat(dest).st_mode
        os.chmod(dest, mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    except OSError as exc:
        raise CopyError(f"cannot install {artifact} to {dest}: {exc}") from exc
    return dest


def configure_identity(store: ImageStore, container: str, build: ImageBuild):
    store.configure(
        container,
        user=build.runtime.user,
        entrypoint=build.entrypoint_vector(),
    )


def commit_image(store: ImageStore, container: str, build: ImageBuild) -> str:
    return store.commit(container, build.name, build.commit.format)


def assemble(
    build: ImageBuild,
    store: ImageStore,
    installer: PackageInstaller,
    artifact: Optional[Path] = None,
) -> BuildResult:
    """Build and commit the image described by build.

    artifact overrides build.artifact (e.g. after resolving a relative path).
    Raises a BuildError subclass from the first step that fails, or
    ValidationError when build itself is invalid.
    """
    artifact = Path(artifact) if artifact is not None else Path(build.artifact)
    preflight(build, artifact)

    print(f"-> Allocating container from '{build.base}'...")
    container = allocate_container(store, build)
    print(f"   Container: {container}")

    try:
        with mounted(store, container) as root:
            print(f"   Mounted at {root}")

            packages = merge_unique(build.packages)
            if packages:
                print(f"-> Installing runtime packages: {', '.join(packages)}")
            populate_runtime(installer, root, build)

            print(f"-> Installing {artifact} as {build.entrypoint_path()}")
            install_artifact(root, artifact, build)

            print(f"-> Configuring user {build.runtime.user}, entrypoint {build.entrypoint_vector()}")
            configure_identity(store, container, build)

            replaced = store.image_exists(build.name)
            if replaced:
                print(f"-> Image '{build.name}' exists; its name will move to the new image")
            print(f"-> Committing '{build.name}' ({build.commit.format} format)...")
            image_id = commit_image(store, container, build)
    except (BuildError, KeyboardInterrupt):
        print(f"Container '{container}' was left allocated; remove it with 'buildah rm {container}'.")
        raise

    return BuildResult(
        image_name=build.name,
        image_id=image_id,
        container=container,
        entrypoint=build.entrypoint_vector(),
        user=build.runtime.user,
        replaced=replaced,
    )
