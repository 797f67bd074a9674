"""Input validation for CLI arguments."""
import re
import sys

SECRET_NAME_PATTERN = r'^[A-Za-z0-9/_+=.@-]{1,512}$'
SECRET_ARN_PATTERN = r'^arn:aws[a-z-]*:secretsmanager:[a-z0-9-]+:\d{12}:secret:[A-Za-z0-9/_+=.@-]+$'
TASK_FAMILY_PATTERN = r'^[A-Za-z0-9_-]{1,255}(:\d+)?$'
TASK_ARN_PATTERN = r'^arn:aws[a-z-]*:ecs:[a-z0-9-]+:\d{12}:task-definition/[A-Za-z0-9_-]{1,255}(:\d+)?$'


def validate_secret_id(secret_id: str) -> None:
    """
    Validate a Secrets Manager secret name or ARN.

    Secret names allow letters, numbers and /_+=.@-

    Raises:
        SystemExit with code 2 if validation fails
    """
    if not secret_id:
        print("Error: Secret identifier cannot be empty", file=sys.stderr)
        sys.exit(2)

    if re.match(SECRET_NAME_PATTERN, secret_id) or re.match(SECRET_ARN_PATTERN, secret_id):
        return

    print(f"Error: Invalid secret identifier '{secret_id}'", file=sys.stderr)
    print("\nAllowed: a secret name (letters, numbers, /_+=.@-) or a full secret ARN", file=sys.stderr)
    print("\nExamples of valid identifiers:", file=sys.stderr)
    print("  ✓ my-app/prod", file=sys.stderr)
    print("  ✓ arn:aws:secretsmanager:eu-west-1:123456789012:secret:my-app/prod-AbCdEf", file=sys.stderr)
    sys.exit(2)


def validate_task_definition(name: str) -> None:
    """
    Validate a task definition family, family:revision, or ARN.

    Raises:
        SystemExit with code 2 if validation fails
    """
    if not name:
        print("Error: Task definition cannot be empty", file=sys.stderr)
        sys.exit(2)

    if re.match(TASK_FAMILY_PATTERN, name) or re.match(TASK_ARN_PATTERN, name):
        return

    print(f"Error: Invalid task definition '{name}'", file=sys.stderr)
    print("\nAllowed: family, family:revision, or a task definition ARN", file=sys.stderr)
    print("Family names may contain letters, numbers, underscores (_) and hyphens (-)", file=sys.stderr)
    sys.exit(2)


def validate_interval(seconds: int) -> None:
    """Interval must be a positive number of seconds."""
    if seconds is None or seconds <= 0:
        print(f"Error: Interval must be a positive number of seconds, got {seconds}", file=sys.stderr)
        sys.exit(2)
