# SPDX-License-Identifier: BUSL-1.1
"""CLI argument parsing and command dispatch."""

import argparse

from graftpack import __version__


def main(argv=None):
    parser = argparse.ArgumentParser(
        prog="graftpack",
        description="graftpack - build a minimal single-binary container image",
    )
    parser.add_argument("--version", action="version",
                        version=f"%(prog)s {__version__}")
    parser.add_argument(
        "-c", "--config",
        help="Build definition file (default: ./graftpack.yaml, else built-in defaults)",
    )
    sub = parser.add_subparsers(dest="command")

    sub.add_parser("build", help="Assemble and commit the image (default)")
    sub.add_parser("validate", help="Check the build definition and artifact")
    sub.add_parser("describe", help="Show the resolved build definition")

    args = parser.parse_args(argv)

    # Lazy import commands to keep startup fast
    from graftpack.commands import cmd_build, cmd_validate, cmd_describe

    commands = {
        "build": cmd_build,
        "validate": cmd_validate,
        "describe": cmd_describe,
    }
    commands[args.command or "build"](args)


if __name__ == "__main__":
    main()
