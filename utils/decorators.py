"""
Entry point decorators for error handling, logging, and exit codes.
"""
import functools
import uuid
import traceback
from typing import Callable, Any
from logger_config import get_logger
from utils.exceptions import ValidationError

logger = get_logger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_USAGE = 2


def cli_handler(func: Callable[..., Any]) -> Callable[..., int]:
    """
    Decorator for command-line entry points.

    Provides:
    - Run IDs for correlating log lines of one invocation
    - Mapping of exceptions to process exit codes
    - Start/finish logging

    The wrapped function returns an exit code (None counts as success).
    ValidationError maps to exit code 2, anything else to 1.

    Args:
        func: The entry point to decorate

    Returns:
        Decorated entry point returning an int exit code
    """
    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> int:
        run_id = str(uuid.uuid4())

        logger.debug(
            f"Command {func.__name__} invoked",
            extra={"run_id": run_id, "command": func.__name__}
        )

        try:
            result = func(*args, **kwargs)
            exit_code = EXIT_OK if result is None else int(result)

            logger.debug(
                f"Command {func.__name__} finished with exit code {exit_code}",
                extra={"run_id": run_id}
            )
            return exit_code

        except ValidationError as e:
            logger.warning(
                f"Command {func.__name__} configuration error: {e.message}",
                extra={"run_id": run_id, "field": e.field, "value": e.value}
            )
            return EXIT_USAGE

        except Exception as e:
            error_traceback = traceback.format_exc()

            logger.error(
                f"Command {func.__name__} failed: {str(e)}",
                extra={
                    "run_id": run_id,
                    "traceback": error_traceback
                },
                exc_info=True
            )
            return EXIT_FAILURE

    return wrapper
