"""Tests for the Secrets Manager wrapper."""
from unittest import mock

import pytest
from botocore.exceptions import ClientError, NoCredentialsError

from ecs_secret_sync.sync.domains.errors import FetchError
from ecs_secret_sync.sync.domains.secrets_client import SecretFetcher, parse_secret_string

SECRET_ARN = "arn:aws:secretsmanager:eu-west-1:123456789012:secret:my-app/prod-AbCdEf"


@pytest.fixture
def client():
    client = mock.MagicMock()
    client.describe_secret.return_value = {"ARN": SECRET_ARN}
    client.get_secret_value.return_value = {"SecretString": '{"DB_USER": "app", "DB_PASS": "s3cret"}'}
    return client


class TestParseSecretString:
    """Test suite for parse_secret_string."""

    def test_json_object(self):
        assert parse_secret_string('{"A": "1", "B": 2}') == {"A": "1", "B": 2}

    def test_none(self):
        assert parse_secret_string(None) == {}

    def test_empty_string(self):
        assert parse_secret_string("") == {}

    def test_not_json(self):
        assert parse_secret_string("hunter2") == {}

    def test_json_but_not_object(self):
        assert parse_secret_string('["A", "B"]') == {}
        assert parse_secret_string('"just a string"') == {}


class TestSecretFetcher:
    """Test suite for SecretFetcher.fetch."""

    def test_returns_payload_and_arn(self, client):
        payload, arn = SecretFetcher(client=client).fetch("my-app/prod")

        assert payload == {"DB_USER": "app", "DB_PASS": "s3cret"}
        assert arn == SECRET_ARN
        client.describe_secret.assert_called_once_with(SecretId="my-app/prod")
        client.get_secret_value.assert_called_once_with(SecretId="my-app/prod")

    def test_binary_secret_is_empty_payload(self, client):
        client.get_secret_value.return_value = {"SecretBinary": b"\x00\x01"}

        payload, arn = SecretFetcher(client=client).fetch("my-app/prod")

        assert payload == {}
        assert arn == SECRET_ARN

    def test_client_error_becomes_fetch_error(self, client):
        error = ClientError(
            {"Error": {"Code": "AccessDeniedException", "Message": "not authorized"}},
            "GetSecretValue",
        )
        client.get_secret_value.side_effect = error

        with pytest.raises(FetchError) as exc_info:
            SecretFetcher(client=client).fetch("my-app/prod")

        assert exc_info.value.secret_id == "my-app/prod"
        assert exc_info.value.cause is error
        assert exc_info.value.__cause__ is error
        assert "my-app/prod" in str(exc_info.value)

    def test_botocore_error_becomes_fetch_error(self, client):
        client.describe_secret.side_effect = NoCredentialsError()

        with pytest.raises(FetchError):
            SecretFetcher(client=client).fetch("my-app/prod")

        client.get_secret_value.assert_not_called()

    def test_empty_identifier(self, client):
        with pytest.raises(FetchError):
            SecretFetcher(client=client).fetch("")

        client.describe_secret.assert_not_called()

    def test_client_created_lazily_with_region(self):
        with mock.patch("ecs_secret_sync.sync.domains.secrets_client.boto3") as boto3_mock:
            fetcher = SecretFetcher(region="eu-west-1")
            boto3_mock.client.assert_not_called()

            _ = fetcher.client
            _ = fetcher.client

        boto3_mock.client.assert_called_once_with("secretsmanager", region_name="eu-west-1")
