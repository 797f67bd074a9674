"""Tests for the ecs-secret-sync command line interface."""
from unittest import mock

import pytest

from ecs_secret_sync.cli import main as cli
from ecs_secret_sync.cli.validators import (
    validate_interval,
    validate_secret_id,
    validate_task_definition,
)
from ecs_secret_sync.sync.domains.errors import DescribeError
from ecs_secret_sync.sync.domains.models import SyncOutcome, SyncStatus


@pytest.fixture
def sync_env(monkeypatch, tmp_path):
    """Minimal environment for commands that need a SyncConfig."""
    monkeypatch.setattr(cli, "load_dotenv", lambda: None)
    monkeypatch.setenv("HOME", str(tmp_path))
    monkeypatch.delenv("ECS_SECRET_SYNC_CONFIG", raising=False)
    monkeypatch.delenv("CHECK_INTERVAL", raising=False)
    monkeypatch.setenv("AWS_SECRET_NAME", "my-app/prod")
    monkeypatch.setenv("ECS_TASK_DEFINITION", "my-app")
    monkeypatch.setenv("AWS_REGION", "eu-west-1")


@pytest.fixture
def reconciler():
    reconciler = mock.MagicMock()
    with mock.patch(
        "ecs_secret_sync.sync.workflows.reconcile.TaskDefinitionReconciler.from_config",
        return_value=reconciler,
    ):
        yield reconciler


def _outcome(status, **kwargs):
    return SyncOutcome(status=status, secret_id="my-app/prod", task_definition="my-app", **kwargs)


class TestMain:
    """Test suite for argument parsing and dispatch."""

    def test_no_command_is_usage_error(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            cli.main([])

        assert exc_info.value.code == 2

    def test_version(self, sync_env, capsys):
        cli.main(["version"])

        assert cli.VERSION in capsys.readouterr().out

    def test_config_without_subcommand(self, sync_env):
        with pytest.raises(SystemExit) as exc_info:
            cli.main(["config"])

        assert exc_info.value.code == 2

    def test_missing_settings_is_runtime_error(self, sync_env, monkeypatch, capsys):
        monkeypatch.delenv("ECS_TASK_DEFINITION")

        with pytest.raises(SystemExit) as exc_info:
            cli.main(["once"])

        assert exc_info.value.code == 1
        assert "Configuration error" in capsys.readouterr().err


class TestOnceAndCheck:
    """Test suite for the single-pass commands."""

    def test_once_updated(self, sync_env, reconciler, capsys):
        reconciler.reconcile.return_value = _outcome(
            SyncStatus.UPDATED,
            revision_arn="arn:aws:ecs:eu-west-1:123456789012:task-definition/my-app:4",
        )

        cli.main(["once", "--task-definition", "my-app:3"])

        reconciler.reconcile.assert_called_once_with("my-app/prod", "my-app:3", dry_run=False)
        assert "task-definition/my-app:4" in capsys.readouterr().out

    def test_once_failed_pass_exits_1(self, sync_env, reconciler, capsys):
        error = DescribeError("my-app", RuntimeError("unreachable"))
        reconciler.reconcile.return_value = _outcome(SyncStatus.DESCRIBE_FAILED, error=error)

        with pytest.raises(SystemExit) as exc_info:
            cli.main(["once"])

        assert exc_info.value.code == 1
        assert "my-app" in capsys.readouterr().err

    def test_check_is_dry_run(self, sync_env, reconciler, capsys):
        reconciler.reconcile.return_value = _outcome(
            SyncStatus.DRIFTED,
            current_names=frozenset({"A", "C"}),
            new_names=frozenset({"A", "B"}),
        )

        cli.main(["check"])

        reconciler.reconcile.assert_called_once_with("my-app/prod", "my-app", dry_run=True)
        out = capsys.readouterr().out
        assert "added: B" in out
        assert "removed: C" in out

    def test_invalid_task_definition_flag(self, sync_env, reconciler):
        with pytest.raises(SystemExit) as exc_info:
            cli.main(["once", "--task-definition", "not a family"])

        assert exc_info.value.code == 2
        reconciler.reconcile.assert_not_called()


class TestRun:
    """Test suite for the periodic run command."""

    def test_run_starts_scheduler_and_stops_on_interrupt(self, sync_env, reconciler):
        with mock.patch("ecs_secret_sync.sync.workflows.scheduler.PeriodicReconciler") as periodic_cls:
            periodic = periodic_cls.return_value
            periodic.start.side_effect = KeyboardInterrupt

            cli.main(["run", "--interval", "15", "--no-initial-pass"])

        config = periodic_cls.call_args[0][1]
        assert config.interval_seconds == 15
        periodic.start.assert_called_once_with(run_immediately=False)
        periodic.shutdown.assert_called_once_with()

    def test_run_rejects_non_positive_interval(self, sync_env, reconciler):
        with pytest.raises(SystemExit) as exc_info:
            cli.main(["run", "--interval", "0"])

        assert exc_info.value.code == 2

    def test_bad_interval_from_environment_is_runtime_error(self, sync_env, reconciler, monkeypatch):
        monkeypatch.setenv("CHECK_INTERVAL", "0")

        with pytest.raises(SystemExit) as exc_info:
            cli.main(["once"])

        assert exc_info.value.code == 1
        reconciler.reconcile.assert_not_called()


class TestValidators:
    """Test suite for CLI input validation."""

    @pytest.mark.parametrize("secret_id", [
        "my-app/prod",
        "DB_PASSWORD",
        "team+svc=x.y@z",
        "arn:aws:secretsmanager:eu-west-1:123456789012:secret:my-app/prod-AbCdEf",
    ])
    def test_valid_secret_ids(self, secret_id):
        validate_secret_id(secret_id)

    @pytest.mark.parametrize("secret_id", ["", "has space", "semi;colon"])
    def test_invalid_secret_ids(self, secret_id):
        with pytest.raises(SystemExit) as exc_info:
            validate_secret_id(secret_id)

        assert exc_info.value.code == 2

    @pytest.mark.parametrize("name", [
        "my-app",
        "my_app:12",
        "arn:aws:ecs:eu-west-1:123456789012:task-definition/my-app:7",
    ])
    def test_valid_task_definitions(self, name):
        validate_task_definition(name)

    @pytest.mark.parametrize("name", ["", "my app", "my-app:latest"])
    def test_invalid_task_definitions(self, name):
        with pytest.raises(SystemExit) as exc_info:
            validate_task_definition(name)

        assert exc_info.value.code == 2

    def test_invalid_interval(self):
        with pytest.raises(SystemExit) as exc_info:
            validate_interval(0)

        assert exc_info.value.code == 2
