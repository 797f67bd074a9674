"""AWS Secrets Manager client wrapper."""
import json
import logging
from typing import Optional, Tuple

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from .errors import FetchError
from .models import SecretPayload

logger = logging.getLogger(__name__)


def parse_secret_string(secret_string: Optional[str]) -> SecretPayload:
    """
    Parse a SecretString into a key/value payload.

    Args:
        secret_string: Raw SecretString, or None if the secret has none

    Returns:
        Dict of keys to values. Empty when the string is absent, is not JSON,
        or is JSON but not an object.
    """
    if not secret_string:
        return {}

    try:
        data = json.loads(secret_string)
    except ValueError as e:
        logger.warning(f"Secret value is not valid JSON, treating as no keys: {e}")
        return {}

    if not isinstance(data, dict):
        logger.warning(
            f"Secret value is JSON {type(data).__name__}, not an object, treating as no keys"
        )
        return {}

    return data


class SecretFetcher:
    """Wrapper around the Secrets Manager client."""

    def __init__(self, region: Optional[str] = None, client=None):
        self.region = region
        self._client = client

    @property
    def client(self):
        """Lazy-initialize client."""
        if self._client is None:
            self._client = boto3.client("secretsmanager", region_name=self.region)
        return self._client

    def fetch(self, secret_id: str) -> Tuple[SecretPayload, str]:
        """
        Fetch the latest payload of a secret together with its ARN.

        Args:
            secret_id: Secret name or ARN

        Returns:
            (payload, secret_arn)

        Raises:
            FetchError: If the secret cannot be described or read
        """
        if not secret_id:
            raise FetchError(secret_id, ValueError("secret identifier is empty"))

        try:
            details = self.client.describe_secret(SecretId=secret_id)
            secret_arn = details["ARN"]
            response = self.client.get_secret_value(SecretId=secret_id)
        except (ClientError, BotoCoreError) as e:
            raise FetchError(secret_id, e) from e

        payload = parse_secret_string(response.get("SecretString"))
        logger.debug(f"Fetched {len(payload)} keys from {secret_arn}")
        return payload, secret_arn
