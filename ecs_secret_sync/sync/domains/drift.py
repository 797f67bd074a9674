"""Secret name drift detection."""
from typing import AbstractSet, FrozenSet

from .models import SecretPayload, TaskDefinition


def current_secret_names(task_definition: TaskDefinition) -> FrozenSet[str]:
    """Names of all secrets referenced by any container of the task definition."""
    return frozenset(
        secret["name"]
        for container in task_definition.container_definitions
        for secret in container.get("secrets") or []
    )


def has_drifted(current_names: AbstractSet[str], new_payload: SecretPayload) -> bool:
    """True when the payload's key set is not exactly `current_names`."""
    new_names = set(new_payload)

    if len(current_names) != len(new_names):
        return True

    # equal sizes, so a missing new name is the only remaining difference
    return any(name not in current_names for name in new_names)
