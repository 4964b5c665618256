# SPDX-License-Identifier: BUSL-1.1
"""graftpack build — assemble and commit the image."""

from graftpack.config import ConfigStore, ValidationError, validate_build
from graftpack.errors import BuildError
from graftpack.packages import installer_for
from graftpack.pipeline import assemble
from graftpack.store import BuildahStore
from graftpack.utils import die


def load_build_or_die(store: ConfigStore):
    try:
        return store.load_build()
    except (OSError, ValueError) as exc:
        die(str(exc))


def cmd_build(args):
    store = ConfigStore(config_file=getattr(args, "config", None))
    build = load_build_or_die(store)
    artifact = store.resolve_artifact(build)

    print(f"Building image '{build.name}'...")
    print(f"  Config:     {store.source()}")
    print(f"  Artifact:   {artifact}")
    print(f"  Packages:   {', '.join(build.packages) or '(none)'}")
    print()

    try:
        validate_build(build).raise_if_invalid()
        result = assemble(build, BuildahStore(), installer_for(build), artifact=artifact)
    except ValidationError as exc:
        for w in exc.warnings:
            print(f"  ! {w}")
        for e in exc.errors:
            print(f"  x {e}")
        die("invalid build configuration")
    except BuildError as exc:
        die(str(exc), exc.exit_code)

    print("\nBuild complete:")
    print(f"  Image:      {result.image_name}")
    if result.image_id:
        print(f"  ID:         {result.image_id}")
    print(f"  User:       {result.user}")
    print(f"  Entrypoint: {result.entrypoint}")
