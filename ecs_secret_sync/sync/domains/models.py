"""Domain models for secret/task definition reconciliation."""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, FrozenSet, List, Optional

# Key name -> opaque value, as stored in the vault secret
SecretPayload = Dict[str, Any]

# Task definition fields copied verbatim into a new registration
PASSTHROUGH_FIELDS = (
    "executionRoleArn",
    "taskRoleArn",
    "networkMode",
    "cpu",
    "memory",
    "requiresCompatibilities",
    "volumes",
    "placementConstraints",
    "pidMode",
    "ipcMode",
    "proxyConfiguration",
    "runtimePlatform",
    "ephemeralStorage",
    "inferenceAccelerators",
)


def build_locator(secret_arn: str, key_name: str) -> str:
    """Compose the ECS valueFrom for a single JSON key of a secret.

    The trailing '::' leaves version stage and version id unset, so ECS
    resolves the current version when the container starts.
    """
    return f"{secret_arn}:{key_name}::"


@dataclass(frozen=True)
class SecretReference:
    """One entry of a container's `secrets` list."""
    name: str
    value_from: str

    @classmethod
    def for_key(cls, secret_arn: str, key_name: str) -> "SecretReference":
        return cls(name=key_name, value_from=build_locator(secret_arn, key_name))

    def to_dict(self) -> Dict[str, str]:
        return {"name": self.name, "valueFrom": self.value_from}


@dataclass
class TaskDefinition:
    """The subset of a described task definition that survives re-registration.

    Container definitions are kept as the raw ECS mappings so that every
    field other than `secrets` passes through untouched.
    """
    family: str
    container_definitions: List[Dict[str, Any]] = field(default_factory=list)
    passthrough: Dict[str, Any] = field(default_factory=dict)
    arn: Optional[str] = None
    revision: Optional[int] = None

    @classmethod
    def from_ecs(cls, data: Dict[str, Any]) -> "TaskDefinition":
        """Build from the `taskDefinition` member of describe_task_definition."""
        return cls(
            family=data["family"],
            container_definitions=list(data.get("containerDefinitions") or []),
            passthrough={
                key: data[key]
                for key in PASSTHROUGH_FIELDS
                if data.get(key) is not None
            },
            arn=data.get("taskDefinitionArn"),
            revision=data.get("revision"),
        )

    def to_register_request(self) -> Dict[str, Any]:
        """Keyword arguments for register_task_definition.

        Revision-identifying fields are never included; ECS assigns the next
        revision on registration.
        """
        request: Dict[str, Any] = {
            "family": self.family,
            "containerDefinitions": self.container_definitions,
        }
        request.update(self.passthrough)
        return request


class SyncStatus(str, Enum):
    """Terminal state of one reconciliation pass."""
    UNCHANGED = "unchanged"
    UPDATED = "updated"
    DRIFTED = "drifted"  # drift found during a dry run
    FETCH_FAILED = "fetch_failed"
    DESCRIBE_FAILED = "describe_failed"
    REGISTER_FAILED = "register_failed"

    @property
    def failed(self) -> bool:
        return self in (
            SyncStatus.FETCH_FAILED,
            SyncStatus.DESCRIBE_FAILED,
            SyncStatus.REGISTER_FAILED,
        )


@dataclass
class SyncOutcome:
    """Result of a single reconcile() call."""
    status: SyncStatus
    secret_id: str
    task_definition: str
    current_names: FrozenSet[str] = frozenset()
    new_names: FrozenSet[str] = frozenset()
    compared_arn: Optional[str] = None  # revision the secret names were read from
    revision_arn: Optional[str] = None
    error: Optional[Exception] = None

    @property
    def added(self) -> List[str]:
        return sorted(self.new_names - self.current_names)

    @property
    def removed(self) -> List[str]:
        return sorted(self.current_names - self.new_names)

    def describe(self) -> str:
        """One-line human readable summary."""
        if self.status is SyncStatus.UPDATED:
            return f"Task definition updated: {self.revision_arn}"
        if self.status is SyncStatus.UNCHANGED:
            return f"No changes in secret names for '{self.task_definition}'"
        if self.status is SyncStatus.DRIFTED:
            return (
                f"Secret names drifted for '{self.task_definition}' "
                f"(added: {', '.join(self.added) or '-'}; "
                f"removed: {', '.join(self.removed) or '-'})"
            )
        return f"{self.status.value}: {self.error}"
