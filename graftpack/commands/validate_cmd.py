# SPDX-License-Identifier: BUSL-1.1
"""graftpack validate — check the build definition without building."""

import sys

from graftpack.commands.build import load_build_or_die
from graftpack.config import ConfigStore, validate_build


def cmd_validate(args):
    store = ConfigStore(config_file=getattr(args, "config", None))
    build = load_build_or_die(store)
    artifact = store.resolve_artifact(build)

    result = validate_build(build)
    if not artifact.is_file():
        result.error(f"artifact not found: {artifact}")

    print(f"Image: {build.name}")
    print(f"  Config:     {store.source()}")
    print(f"  Artifact:   {artifact}")
    print(f"  User:       {build.runtime.user}")
    print(f"  Entrypoint: {build.entrypoint_vector()}")
    print()

    if result.warnings:
        print("  Warnings:")
        for w in result.warnings:
            print(f"    ! {w}")
        print()

    if result.errors:
        print("  Errors:")
        for e in result.errors:
            print(f"    x {e}")
        print()
        print("  Result: INVALID")
        sys.exit(1)
    else:
        print("  Result: VALID")
