"""Workflow that keeps a task definition's secret references in sync with a secret."""
import logging
from typing import List, Optional

from ..domains.config_loader import SyncConfig
from ..domains.drift import current_secret_names, has_drifted
from ..domains.ecs_client import ECSTaskDefinitionClient
from ..domains.errors import DescribeError, FetchError, RegisterError
from ..domains.models import (
    SecretPayload,
    SecretReference,
    SyncOutcome,
    SyncStatus,
    TaskDefinition,
)
from ..domains.secrets_client import SecretFetcher

logger = logging.getLogger(__name__)


def build_secret_references(payload: SecretPayload, secret_arn: str) -> List[SecretReference]:
    """One reference per payload key, in payload order."""
    return [SecretReference.for_key(secret_arn, key) for key in payload]


def build_task_definition(current: TaskDefinition, payload: SecretPayload,
                          secret_arn: str) -> TaskDefinition:
    """
    Build the next revision of a task definition.

    Every container gets the same full list of references; which container
    held which secret before is not tracked. Only `secrets` is replaced in
    each container definition.
    """
    secrets = [ref.to_dict() for ref in build_secret_references(payload, secret_arn)]
    containers = [
        {**container, "secrets": [dict(s) for s in secrets]}
        for container in current.container_definitions
    ]
    return TaskDefinition(
        family=current.family,
        container_definitions=containers,
        passthrough=dict(current.passthrough),
    )


class TaskDefinitionReconciler:
    """Runs single reconciliation passes against Secrets Manager and ECS."""

    def __init__(self, fetcher: SecretFetcher, ecs: ECSTaskDefinitionClient):
        self.fetcher = fetcher
        self.ecs = ecs

    @classmethod
    def from_config(cls, config: SyncConfig) -> "TaskDefinitionReconciler":
        return cls(
            SecretFetcher(region=config.region),
            ECSTaskDefinitionClient(region=config.region),
        )

    def reconcile(self, secret_id: str, task_definition_name: str,
                  dry_run: bool = False) -> SyncOutcome:
        """
        Run one pass: fetch, describe, compare and register if needed.

        Args:
            secret_id: Secret name or ARN
            task_definition_name: Family or ARN; a pinned revision resolves to the family's latest
            dry_run: Report drift without registering a new revision

        Returns:
            SyncOutcome. Fetch, describe and register errors are reported in
            the outcome rather than raised.
        """
        outcome = SyncOutcome(
            status=SyncStatus.UNCHANGED,
            secret_id=secret_id,
            task_definition=task_definition_name,
        )

        try:
            payload, secret_arn = self.fetcher.fetch(secret_id)
        except FetchError as e:
            logger.error(str(e))
            return self._failed(outcome, SyncStatus.FETCH_FAILED, e)
        outcome.new_names = frozenset(payload)

        try:
            current = self.ecs.describe_task_definition(task_definition_name)
        except DescribeError as e:
            logger.error(str(e))
            return self._failed(outcome, SyncStatus.DESCRIBE_FAILED, e)
        outcome.compared_arn = current.arn
        outcome.current_names = current_secret_names(current)
        logger.debug(
            f"Comparing {len(outcome.new_names)} secret keys with revision "
            f"{current.revision} of '{current.family}' ({len(outcome.current_names)} referenced)"
        )

        if not has_drifted(outcome.current_names, payload):
            logger.info("No changes in secret names, skipping task definition update.")
            return outcome

        if dry_run:
            outcome.status = SyncStatus.DRIFTED
            logger.info(f"Dry run: {outcome.describe()}")
            return outcome

        logger.info("Secret names have changed, updating ECS task definition...")
        new_definition = build_task_definition(current, payload, secret_arn)

        try:
            outcome.revision_arn = self.ecs.register_task_definition(new_definition)
        except RegisterError as e:
            logger.error(str(e))
            return self._failed(outcome, SyncStatus.REGISTER_FAILED, e)

        outcome.status = SyncStatus.UPDATED
        logger.info(f"Task definition updated successfully: {outcome.revision_arn}")
        return outcome

    @staticmethod
    def _failed(outcome: SyncOutcome, status: SyncStatus,
                error: Optional[Exception]) -> SyncOutcome:
        outcome.status = status
        outcome.error = error
        return outcome
