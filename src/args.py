"""Argument parsing functionality for bob."""

import argparse
from typing import List, Optional

from constants import Constants

_VERSION_HELP = "nightly, stable, latest, a version like 0.10.0, a commit hash or nightly-<hash>"

_ALIASES = {"rm": "uninstall", "remove": "uninstall", "ls": "list", "ls-remote": "list-remote"}


def _add_common(parser: argparse.ArgumentParser, top_level: bool = False) -> None:
    # Subcommand copies have no defaults so they keep values given before the subcommand.
    suppress = argparse.SUPPRESS
    parser.add_argument("--loglevel",
                        dest="LOG_LEVEL",
                        help="Set the logging level",
                        action="store",
                        type=str.upper,
                        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
                        default="INFO" if top_level else suppress)
    parser.add_argument("--logfile",
                        dest="LOG_FILE",
                        help="Log output file",
                        action="store",
                        type=str,
                        default=None if top_level else suppress)


def _sub(sub, name: str, **kwargs) -> argparse.ArgumentParser:
    parser = sub.add_parser(name, **kwargs)
    _add_common(parser)
    return parser


def build_parser() -> argparse.ArgumentParser:
    """Build the top-level parser with one subcommand per action."""
    parser = argparse.ArgumentParser(
        prog=Constants.PROGRAM_NAME,
        description="bob - a version manager for neovim",
        add_help=True,
    )
    _add_common(parser, top_level=True)
    parser.add_argument("-V", "--version",
                        action="version",
                        version=f"%(prog)s {Constants.PROGRAM_VERSION}")

    sub = parser.add_subparsers(dest="action", metavar="<command>")
    sub.required = True

    use = _sub(sub, "use", help="Switch to the specified version, installing it if needed")
    use.add_argument("VERSION", help=_VERSION_HELP)
    use.add_argument("-n", "--no-install",
                     dest="NO_INSTALL",
                     help="Do not install the version if it is missing",
                     action="store_true")

    install = _sub(sub, "install", help="Install the specified version")
    install.add_argument("VERSION", help=_VERSION_HELP)

    _sub(sub, "sync", help="Install and use the version from the version sync file")

    uninstall = _sub(sub, "uninstall", aliases=["rm", "remove"],
                     help="Uninstall the specified version")
    uninstall.add_argument("VERSION", nargs="?", default=None,
                           help="Version to remove; choose interactively when omitted")

    _sub(sub, "rollback", help="Roll back to a previous nightly")
    _sub(sub, "erase", help="Remove every file bob created, including PATH changes")
    _sub(sub, "list", aliases=["ls"], help="List installed versions")
    _sub(sub, "list-remote", aliases=["ls-remote"], help="List versions available upstream")

    run = _sub(sub, "run", help="Run a specific installed version with the given arguments")
    run.add_argument("VERSION", help=_VERSION_HELP)
    run.add_argument("RUN_ARGS", nargs=argparse.REMAINDER,
                     help="Arguments passed to nvim (use -- to separate them)")

    update = _sub(sub, "update", help="Update nightly and/or stable, or a specific version")
    update.add_argument("VERSION", nargs="?", default=None, help="nightly or stable")
    update.add_argument("-a", "--all",
                        dest="UPDATE_ALL",
                        help="Update every installed channel",
                        action="store_true")

    return parser


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parses the arguments passed to the program."""
    parser = build_parser()
    ns = parser.parse_args(argv)
    ns.action = _ALIASES.get(ns.action, ns.action)
    if ns.action == "update" and ns.UPDATE_ALL and ns.VERSION:
        parser.error("update: --all cannot be combined with a version")
    if ns.action == "run" and ns.RUN_ARGS[:1] == ["--"]:
        ns.RUN_ARGS = ns.RUN_ARGS[1:]
    return ns
