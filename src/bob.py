"""bob - a version manager for neovim.

Entry point for both the ``bob`` command and the ``nvim`` shim. The shim
re-enters ``main`` either with the shim sentinel as first argument (POSIX
launcher) or under an executable name containing ``nvim`` (Windows copy).
"""
import asyncio
import logging
import os
import sys
from pathlib import Path
from typing import Any, List, Optional

from args import parse_args
from common.errors import BobError
from common.logging_utils import configure_logging, extra_context, is_debug_enabled
from config import Config, load_config
from constants import Constants, ExitCodes

logger = logging.getLogger(__name__)


def _setup_logging(args: Any) -> None:
    """Configure logging based on CLI arguments.

    Args:
        args: Parsed CLI arguments.
    """
    # Honor CLI --loglevel
    if getattr(args, "LOG_LEVEL", None):
        os.environ[Constants.ENV_LOG_LEVEL] = str(args.LOG_LEVEL).upper()

    configure_logging()

    level_name = str(getattr(args, "LOG_LEVEL", "INFO")).upper()
    logging.getLogger().setLevel(getattr(logging, level_name, logging.INFO))

    # Add file handler if --logfile specified
    log_file = getattr(args, "LOG_FILE", None)
    if log_file:
        file_handler = logging.FileHandler(log_file)
        formatter = logging.Formatter(
            "%(asctime)s %(levelname)s %(name)s %(message)s"
        )
        file_handler.setFormatter(formatter)
        logging.getLogger().addHandler(file_handler)
        logger.debug("Logging to file: %s", log_file)


def _is_shim_invocation(argv: Optional[List[str]]) -> bool:
    if argv is not None:
        return argv[:1] == [Constants.SHIM_SENTINEL]
    return Constants.EDITOR_NAME in Path(sys.argv[0]).stem.lower()


def _run_as_shim(args: List[str]) -> int:
    # pylint: disable=import-outside-toplevel
    from directories import get_downloads_directory
    from switcher.shim import run_shim

    try:
        config = load_config()
        root = get_downloads_directory(config, create=False)
        return run_shim(root, args)
    except BobError as exc:
        sys.stderr.write(f"{Constants.PROGRAM_NAME}: {exc}\n")
        return exc.exit_code.value


async def _dispatch(args: Any, config: Config) -> int:
    """Run the selected subcommand with a shared upstream client."""
    # pylint: disable=import-outside-toplevel
    import importlib

    from repository.github import GitHubClient

    module = importlib.import_module("cli_" + args.action.replace("-", "_"))
    async with GitHubClient(mirror=config.github_mirror) as client:
        result = await module.start(args, config, client)
    return ExitCodes.SUCCESS.value if result is None else int(result)


def main(argv: Optional[List[str]] = None) -> int:
    """Main function of the program.

    Args:
        argv: Arguments without the program name; defaults to ``sys.argv[1:]``.

    Returns:
        int: Exit code
    """
    if _is_shim_invocation(argv):
        if argv is not None:
            return _run_as_shim(argv[1:])
        return _run_as_shim(sys.argv[1:])

    args = parse_args(argv)
    _setup_logging(args)

    if is_debug_enabled(logger):
        logger.debug(
            "CLI start",
            extra=extra_context(event="function_entry", component="cli", action=args.action),
        )

    try:
        config = load_config()
        return asyncio.run(_dispatch(args, config))
    except BobError as exc:
        logger.error("%s", exc)
        documentation_url = getattr(exc, "documentation_url", None)
        if documentation_url:
            logger.error("See %s", documentation_url)
        return exc.exit_code.value
    except KeyboardInterrupt:
        logger.error("Interrupted")
        return ExitCodes.INTERRUPTED.value


if __name__ == "__main__":
    sys.exit(main())
