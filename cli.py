"""
Command-line entry point for the S3 request fan-out tool.

Parses flags, builds the one shared S3 client and dispatches the
requested number of ListBuckets or GetObject calls.
"""
import sys
from typing import Optional, Sequence

from config import get_config
from dispatcher import FatalHandler, exit_on_failure, run as dispatch, select_operation
from logger_config import get_logger, set_log_level
from utils.decorators import cli_handler, EXIT_OK, EXIT_FAILURE

logger = get_logger(__name__)


@cli_handler
def main(
    argv: Optional[Sequence[str]] = None,
    *,
    on_fatal: FatalHandler = exit_on_failure,
) -> int:
    """Run one fan-out and return the process exit code."""
    config = get_config(argv)
    set_log_level(config.log_level)

    operation = select_operation(config)
    logger.debug(
        f'Running {config.requests} x {operation.name} against '
        f'{config.endpoint_url or "default endpoint"}'
    )

    result = dispatch(config, operation, on_fatal=on_fatal)

    return EXIT_OK if result.ok else EXIT_FAILURE


def run() -> None:
    """Console script wrapper."""
    sys.exit(main())


if __name__ == '__main__':
    run()
