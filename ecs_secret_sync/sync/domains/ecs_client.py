"""AWS ECS client wrapper for task definition revisions."""
import logging
from typing import Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from .errors import DescribeError, RegisterError
from .models import TaskDefinition

logger = logging.getLogger(__name__)


def task_definition_family(name: str) -> str:
    """Family name of a family, family:revision, or task definition ARN."""
    if ":task-definition/" in name:
        name = name.split(":task-definition/", 1)[1]

    family, sep, revision = name.rpartition(":")
    if sep and revision.isdigit():
        return family
    return name


class ECSTaskDefinitionClient:
    """Wrapper around the ECS client."""

    def __init__(self, region: Optional[str] = None, client=None):
        self.region = region
        self._client = client

    @property
    def client(self):
        """Lazy-initialize client."""
        if self._client is None:
            self._client = boto3.client("ecs", region_name=self.region)
        return self._client

    def describe_task_definition(self, name: str) -> TaskDefinition:
        """
        Describe the latest ACTIVE revision of a task definition family.

        A pinned revision in `name` is ignored. Comparing against a fixed old
        revision would report drift on every pass, since registration only
        ever adds revisions after it.

        Args:
            name: Family, family:revision, or full ARN

        Raises:
            DescribeError: If ECS cannot return the task definition
        """
        family = task_definition_family(name)
        if family != name:
            logger.debug(f"Describing latest revision of '{family}' instead of '{name}'")

        try:
            response = self.client.describe_task_definition(taskDefinition=family)
            return TaskDefinition.from_ecs(response["taskDefinition"])
        except (ClientError, BotoCoreError, KeyError) as e:
            raise DescribeError(name, e) from e

    def register_task_definition(self, task_definition: TaskDefinition) -> str:
        """
        Register a new revision.

        Returns:
            ARN of the newly registered revision

        Raises:
            RegisterError: If ECS rejects or cannot accept the registration
        """
        request = task_definition.to_register_request()
        try:
            response = self.client.register_task_definition(**request)
            return response["taskDefinition"]["taskDefinitionArn"]
        except (ClientError, BotoCoreError, KeyError) as e:
            raise RegisterError(task_definition.family, e) from e
