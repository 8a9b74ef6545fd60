"""
Custom exception classes for the CLI and services.
"""
from typing import Optional, Any


class FanoutError(Exception):
    """Base class for errors raised by this tool."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class S3OperationError(FanoutError):
    """A remote S3 call failed."""

    def __init__(
        self,
        message: str,
        operation: str,
        bucket: Optional[str] = None,
        key: Optional[str] = None,
        code: Optional[str] = None
    ):
        """
        Initialize S3 operation error.

        Args:
            message: Error message from botocore
            operation: S3 API operation name, e.g. 'GetObject'
            bucket: Bucket the call addressed, if any
            key: Object key the call addressed, if any
            code: S3 error code ('AccessDenied', 'NoSuchKey') or the
                botocore exception name for transport failures
        """
        super().__init__(message)
        self.operation = operation
        self.bucket = bucket
        self.key = key
        self.code = code

    @property
    def target(self) -> str:
        """Human-readable resource the failed call addressed."""
        if self.bucket and self.key:
            return f's3://{self.bucket}/{self.key}'
        if self.bucket:
            return f's3://{self.bucket}'
        return 'service'


class ValidationError(FanoutError):
    """A flag or configuration value is missing or out of range."""

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        value: Any = None
    ):
        super().__init__(message)
        self.field = field
        self.value = value
