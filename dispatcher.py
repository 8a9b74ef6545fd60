"""
Concurrent request dispatch.

Fans out N identical ListBuckets or GetObject calls, one thread per call,
and joins them all. By default the first failure ends the process at once;
threads still in flight are neither awaited nor cancelled.
"""
import os
import sys
import threading
from collections import Counter
from dataclasses import dataclass, field
from typing import Callable, Optional, Union

from config import Config
from logger_config import get_logger
from services.s3_service import S3Service
from utils.exceptions import S3OperationError, ValidationError

logger = get_logger(__name__)


@dataclass(frozen=True)
class ListBuckets:
    """List every bucket visible to the credentials."""

    name = 'ListBuckets'
    success_message = 'Listed buckets #{index} successful'
    failure_message = 'unable to list buckets {error}'

    def invoke(self, service: S3Service) -> None:
        service.list_buckets()


@dataclass(frozen=True)
class GetObject:
    """Fetch one object and drain its body."""

    bucket: str
    key: str

    name = 'GetObject'
    success_message = 'Fetched an object #{index} successful'
    failure_message = 'unable to get object from a bucket {error}'

    def __post_init__(self):
        if not self.bucket or not self.key:
            raise ValidationError(
                'GetObject needs both a bucket and a key',
                field='bucket' if not self.bucket else 'key',
            )

    def invoke(self, service: S3Service) -> None:
        service.get_object(self.bucket, self.key)


Operation = Union[ListBuckets, GetObject]

# Called with (operation, index, error) when an invocation fails in fail-fast mode
FatalHandler = Callable[[Operation, int, Exception], None]


def select_operation(config: Config) -> Operation:
    """Object-fetch mode when both bucket and key are set, listing otherwise."""
    if config.bucket and config.key:
        return GetObject(config.bucket, config.key)
    return ListBuckets()


# Held by the first failing thread until the process is gone
_fatal_lock = threading.Lock()


def exit_on_failure(operation: Operation, index: int, error: Exception) -> None:
    """
    Log the failure and terminate the whole process with status 1.

    Only the first caller logs; later failures block until the exit.
    """
    _fatal_lock.acquire()
    logger.critical(operation.failure_message.format(error=error))
    sys.stdout.flush()
    sys.stderr.flush()
    os._exit(1)


@dataclass
class DispatchResult:
    """Outcome of one fan-out."""

    requested: int
    success_count: int = 0
    first_error: Optional[Exception] = None
    failures: list[tuple[int, Exception]] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.first_error is None and self.success_count == self.requested

    def error_codes(self) -> Counter:
        """Failure counts keyed by S3 error code or exception name."""
        return Counter(
            e.code if isinstance(e, S3OperationError) and e.code else type(e).__name__
            for _, e in self.failures
        )


class Dispatcher:
    """Runs N concurrent invocations of one operation over a shared client."""

    def __init__(
        self,
        service: S3Service,
        fail_fast: bool = True,
        on_fatal: FatalHandler = exit_on_failure,
    ) -> None:
        """
        Initialize the dispatcher.

        Args:
            service: S3 service whose client all invocations share
            fail_fast: Hand the first failure to on_fatal instead of
                collecting every result
            on_fatal: Failure handler used in fail-fast mode
        """
        self.service = service
        self.fail_fast = fail_fast
        self.on_fatal = on_fatal
        self._lock = threading.Lock()

    def run(self, operation: Operation, requests: int) -> DispatchResult:
        """
        Dispatch `requests` concurrent invocations and wait for all of them.

        Args:
            operation: ListBuckets or GetObject
            requests: Number of invocations, at least 1

        Returns:
            DispatchResult with the success count and first error, if any

        Raises:
            ValidationError: If requests is below 1 or the client
                cannot be built
        """
        if requests < 1:
            raise ValidationError(
                f'requests must be at least 1, got: {requests}',
                field='requests',
                value=requests,
            )

        # Client construction happens before any worker starts
        self.service.connect()

        result = DispatchResult(requested=requests)
        threads = [
            threading.Thread(
                target=self._invoke,
                args=(operation, index, result),
                name=f'{operation.name}-{index}',
                daemon=True,
            )
            for index in range(requests)
        ]
        logger.debug(f'Dispatching {requests} {operation.name} invocations')
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        if not self.fail_fast:
            logger.info(
                f'{result.success_count}/{requests} {operation.name} '
                f'invocations succeeded'
            )
            if result.failures:
                by_code = ', '.join(
                    f'{code}={count}'
                    for code, count in sorted(result.error_codes().items())
                )
                logger.info(f'Failures by error code: {by_code}')
        return result

    def _invoke(self, operation: Operation, index: int, result: DispatchResult) -> None:
        try:
            operation.invoke(self.service)
        except Exception as e:
            with self._lock:
                if result.first_error is None:
                    result.first_error = e
                result.failures.append((index, e))
            if self.fail_fast:
                self.on_fatal(operation, index, e)
            else:
                line = f'#{index} ' + operation.failure_message.format(error=e)
                if isinstance(e, S3OperationError):
                    line += f' ({e.code or "unknown error"} on {e.target})'
                logger.error(line)
            return

        with self._lock:
            result.success_count += 1
        logger.info(operation.success_message.format(index=index))


def run(
    config: Config,
    operation: Optional[Operation] = None,
    requests: Optional[int] = None,
    *,
    on_fatal: FatalHandler = exit_on_failure,
) -> DispatchResult:
    """
    Build the S3 service from configuration and run one fan-out.

    Args:
        config: Validated configuration
        operation: Operation to run (selected from config if omitted)
        requests: Invocation count (config.requests if omitted)
        on_fatal: Failure handler used in fail-fast mode

    Returns:
        DispatchResult for the run
    """
    service = S3Service(config)
    dispatcher = Dispatcher(service, fail_fast=config.fail_fast, on_fatal=on_fatal)
    return dispatcher.run(
        operation or select_operation(config),
        config.requests if requests is None else requests,
    )
