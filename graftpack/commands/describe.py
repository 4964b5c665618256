# SPDX-License-Identifier: BUSL-1.1
"""graftpack describe — show the resolved build definition."""

import copy

import yaml

from graftpack.commands.build import load_build_or_die
from graftpack.config import ConfigStore
from graftpack.config.resources import resource_to_dict


def cmd_describe(args):
    store = ConfigStore(config_file=getattr(args, "config", None))
    build = load_build_or_die(store)

    resolved = copy.deepcopy(build)
    resolved.runtime.entrypoint = build.entrypoint_path()

    print(f"=== ImageBuild: {build.name} ({store.source()}) ===\n")
    print(yaml.dump(resource_to_dict(resolved), default_flow_style=False, sort_keys=False))
