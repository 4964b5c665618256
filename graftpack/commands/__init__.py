# SPDX-License-Identifier: BUSL-1.1
"""Command implementations for graftpack CLI."""

from graftpack.commands.build import cmd_build
from graftpack.commands.validate_cmd import cmd_validate
from graftpack.commands.describe import cmd_describe

__all__ = ["cmd_build", "cmd_validate", "cmd_describe"]
