"""
Unit tests for the S3 service layer.
"""
import pytest
import boto3
from moto import mock_aws
from unittest.mock import Mock, patch
from botocore.exceptions import ClientError, EndpointConnectionError, IncompleteReadError
from config import Config
from services.s3_service import S3Service, error_code
from utils.exceptions import S3OperationError, ValidationError


@pytest.fixture
def config():
    return Config(
        endpoint='http://localhost:9000',
        region='us-east-1',
        access_key='AKIDEXAMPLE',
        secret_key='wJalrXUtnFEMI',
    )


def make_service(config, mock_client):
    service = S3Service(config)
    service._s3_client = mock_client
    return service


class TestS3Service:
    """Tests for S3Service."""

    def test_init(self, config):
        """Test S3Service initialization does not build a client."""
        service = S3Service(config)
        assert service.config is config
        assert service._s3_client is None

    @patch('services.s3_service.boto3')
    def test_s3_client_lazy_init(self, mock_boto3, config):
        """Test client is built once from static credentials and endpoint."""
        mock_session = Mock()
        mock_client = Mock()
        mock_session.client.return_value = mock_client
        mock_boto3.session.Session.return_value = mock_session

        service = S3Service(config)
        client = service.s3_client
        again = service.connect()

        assert client == mock_client
        assert again is client
        mock_boto3.session.Session.assert_called_once_with(
            aws_access_key_id='AKIDEXAMPLE',
            aws_secret_access_key='wJalrXUtnFEMI',
            region_name='us-east-1',
        )
        mock_session.client.assert_called_once_with(
            's3', endpoint_url='http://localhost:9000'
        )

    @patch('services.s3_service.boto3')
    def test_s3_client_unset_endpoint_and_region(self, mock_boto3):
        """Test empty endpoint and region are passed as None."""
        mock_session = Mock()
        mock_boto3.session.Session.return_value = mock_session

        S3Service(Config(access_key='a', secret_key='s')).connect()

        assert mock_boto3.session.Session.call_args.kwargs['region_name'] is None
        mock_session.client.assert_called_once_with('s3', endpoint_url=None)

    def test_s3_client_invalid_endpoint(self):
        """Test a malformed endpoint fails before any request is made."""
        service = S3Service(Config(
            endpoint='not a url', access_key='a', secret_key='s'
        ))
        with pytest.raises(ValidationError, match='unable to load SDK config') as exc_info:
            service.connect()
        assert exc_info.value.field == 'endpoint'

    def test_list_buckets(self, config):
        """Test list_buckets returns bucket names."""
        mock_client = Mock()
        mock_client.list_buckets.return_value = {
            'Buckets': [{'Name': 'alpha'}, {'Name': 'beta'}]
        }
        service = make_service(config, mock_client)

        assert service.list_buckets() == ['alpha', 'beta']
        mock_client.list_buckets.assert_called_once_with()

    def test_list_buckets_access_denied(self, config):
        """Test remote errors are wrapped in S3OperationError."""
        mock_client = Mock()
        error = ClientError(
            {'Error': {'Code': 'AccessDenied', 'Message': 'Access Denied'}},
            'ListBuckets'
        )
        mock_client.list_buckets.side_effect = error
        service = make_service(config, mock_client)

        with pytest.raises(S3OperationError) as exc_info:
            service.list_buckets()

        assert exc_info.value.operation == 'ListBuckets'
        assert exc_info.value.code == 'AccessDenied'
        assert exc_info.value.target == 'service'
        assert exc_info.value.__cause__ is error
        assert 'AccessDenied' in str(exc_info.value)

    def test_get_object_drains_body(self, config):
        """Test get_object reads the whole body and closes it."""
        body = Mock()
        body.iter_chunks.return_value = iter([b'01234', b'56789'])
        mock_client = Mock()
        mock_client.get_object.return_value = {'Body': body}
        service = make_service(config, mock_client)

        assert service.get_object('test', 'file.txt') == 10
        mock_client.get_object.assert_called_once_with(Bucket='test', Key='file.txt')
        body.close.assert_called_once()

    def test_get_object_truncated_body(self, config):
        """Test a body that ends early still counts as fetched."""
        def chunks(_size):
            yield b'01234'
            raise IncompleteReadError(actual_bytes=5, expected_bytes=10)

        body = Mock()
        body.iter_chunks.side_effect = chunks
        mock_client = Mock()
        mock_client.get_object.return_value = {'Body': body}
        service = make_service(config, mock_client)

        assert service.get_object('test', 'file.txt') == 5
        body.close.assert_called_once()

    def test_get_object_connection_error(self, config):
        """Test connection failures are wrapped with bucket and key."""
        mock_client = Mock()
        mock_client.get_object.side_effect = EndpointConnectionError(
            endpoint_url='http://localhost:9000'
        )
        service = make_service(config, mock_client)

        with pytest.raises(S3OperationError) as exc_info:
            service.get_object('test', 'file.txt')

        assert exc_info.value.bucket == 'test'
        assert exc_info.value.key == 'file.txt'
        assert exc_info.value.operation == 'GetObject'
        assert exc_info.value.code == 'EndpointConnectionError'
        assert exc_info.value.target == 's3://test/file.txt'


class TestS3OperationError:
    """Tests for S3OperationError."""

    @pytest.mark.parametrize('bucket, key, target', [
        (None, None, 'service'),
        ('test', None, 's3://test'),
        ('test', 'dir/file.txt', 's3://test/dir/file.txt'),
    ])
    def test_target(self, bucket, key, target):
        error = S3OperationError('failed', operation='GetObject', bucket=bucket, key=key)
        assert error.target == target
        assert error.message == 'failed'
        assert str(error) == 'failed'

    def test_error_code_from_client_error(self):
        error = ClientError({'Error': {'Code': 'NoSuchBucket'}}, 'GetObject')
        assert error_code(error) == 'NoSuchBucket'
        assert error_code(ClientError({}, 'GetObject')) == 'Unknown'
        assert error_code(IncompleteReadError(actual_bytes=1, expected_bytes=2)) == 'IncompleteReadError'


@pytest.mark.integration
@mock_aws()
def test_get_object_against_moto():
    """Test a real botocore stream is drained end to end."""
    s3 = boto3.client('s3', region_name='us-east-1')
    s3.create_bucket(Bucket='test')
    s3.put_object(Bucket='test', Key='file.txt', Body=b'x' * 200_000)

    service = S3Service(Config(
        region='us-east-1', access_key='testing', secret_key='testing'
    ))

    assert service.get_object('test', 'file.txt') == 200_000
    assert 'test' in service.list_buckets()


@pytest.mark.integration
@mock_aws()
def test_get_object_missing_key_against_moto():
    """Test NoSuchKey surfaces as S3OperationError."""
    s3 = boto3.client('s3', region_name='us-east-1')
    s3.create_bucket(Bucket='test')

    service = S3Service(Config(
        region='us-east-1', access_key='testing', secret_key='testing'
    ))

    with pytest.raises(S3OperationError, match='NoSuchKey'):
        service.get_object('test', 'missing.txt')
