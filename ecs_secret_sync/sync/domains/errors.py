"""Exceptions raised by the reconciliation domain."""


class SyncError(Exception):
    """Base class for errors that end a reconciliation pass."""

    def __init__(self, message: str, cause: Exception = None):
        super().__init__(message)
        self.cause = cause


class FetchError(SyncError):
    """Secret could not be resolved or read from Secrets Manager."""

    def __init__(self, secret_id: str, cause: Exception = None):
        super().__init__(f"Error fetching secret '{secret_id}': {cause}", cause)
        self.secret_id = secret_id


class DescribeError(SyncError):
    """Task definition could not be described."""

    def __init__(self, task_definition: str, cause: Exception = None):
        super().__init__(
            f"Error describing task definition '{task_definition}': {cause}", cause
        )
        self.task_definition = task_definition


class RegisterError(SyncError):
    """New task definition revision was rejected or could not be submitted."""

    def __init__(self, family: str, cause: Exception = None):
        super().__init__(
            f"Error registering task definition '{family}': {cause}", cause
        )
        self.family = family
