"""
S3 service for object storage operations.
"""
import boto3
from typing import Any, Optional, TYPE_CHECKING
from botocore.exceptions import BotoCoreError, ClientError
from config import Config
from logger_config import get_logger
from utils.exceptions import S3OperationError, ValidationError

if TYPE_CHECKING:
    from mypy_boto3_s3 import S3Client
else:
    S3Client = Any

logger = get_logger(__name__)

DRAIN_CHUNK_SIZE = 64 * 1024


def error_code(error: Exception) -> str:
    """S3 error code of a ClientError, or the exception name otherwise."""
    if isinstance(error, ClientError):
        return error.response.get('Error', {}).get('Code') or 'Unknown'
    return type(error).__name__


class S3Service:
    """Service for S3 operations against a fixed endpoint and credential pair."""

    def __init__(self, config: Config) -> None:
        """
        Initialize S3 service.

        Args:
            config: Validated configuration carrying endpoint, region
                and static credentials
        """
        self.config = config
        self._s3_client: Optional[S3Client] = None

    @property
    def s3_client(self) -> S3Client:
        """Lazy initialization of S3 client."""
        if self._s3_client is None:
            # Session objects are not thread-safe; clients are
            session = boto3.session.Session(
                aws_access_key_id=self.config.access_key,
                aws_secret_access_key=self.config.secret_key,
                region_name=self.config.region_name,
            )
            try:
                self._s3_client = session.client(
                    's3', endpoint_url=self.config.endpoint_url
                )
            except (BotoCoreError, ValueError) as e:
                raise ValidationError(
                    f'unable to load SDK config, {e}',
                    field='endpoint',
                    value=self.config.endpoint,
                ) from e
            logger.debug(
                f'Created S3 client (endpoint={self.config.endpoint_url}, '
                f'region={self.config.region_name})'
            )
        return self._s3_client

    def connect(self) -> S3Client:
        """Build the client now, before it is shared across threads."""
        return self.s3_client

    def list_buckets(self) -> list[str]:
        """
        List bucket names visible to the configured credentials.

        Returns:
            Bucket names in the order the endpoint returned them

        Raises:
            S3OperationError: If the remote call fails
        """
        try:
            response = self.s3_client.list_buckets()
        except (BotoCoreError, ClientError) as e:
            raise S3OperationError(
                str(e), operation='ListBuckets', code=error_code(e)
            ) from e
        return [b['Name'] for b in response.get('Buckets', [])]

    def get_object(self, bucket: str, key: str) -> int:
        """
        Fetch an object and read its body to the end, discarding the bytes.

        A stream that breaks off mid-read still counts as fetched; only the
        GetObject call itself can fail.

        Args:
            bucket: S3 bucket name
            key: S3 object key

        Returns:
            Number of body bytes read

        Raises:
            S3OperationError: If the GetObject call fails
        """
        try:
            response = self.s3_client.get_object(Bucket=bucket, Key=key)
        except (BotoCoreError, ClientError) as e:
            raise S3OperationError(
                str(e), operation='GetObject', bucket=bucket, key=key,
                code=error_code(e),
            ) from e

        body = response['Body']
        drained = 0
        try:
            for chunk in body.iter_chunks(DRAIN_CHUNK_SIZE):
                drained += len(chunk)
        except BotoCoreError as e:
            logger.warning(
                f'Body of s3://{bucket}/{key} ended early after '
                f'{drained} bytes: {str(e)}'
            )
        finally:
            body.close()
        return drained
