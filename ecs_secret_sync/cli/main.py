"""CLI entrypoint for ecs-secret-sync."""
import sys
import argparse
import logging

from dotenv import load_dotenv

from .validators import validate_interval, validate_secret_id, validate_task_definition

VERSION = "0.1.0"

logger = logging.getLogger(__name__)

# Third-party loggers that are only interesting at -vv
NOISY_LOGGERS = ("boto3", "botocore", "urllib3", "apscheduler")


def _configure_logging(verbosity: int) -> None:
    """Log to stderr; -v for INFO, -vv for DEBUG including AWS SDK output."""
    if verbosity >= 2:
        level = logging.DEBUG
    elif verbosity == 1:
        level = logging.INFO
    else:
        level = logging.WARNING

    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr
    )

    if verbosity < 2:
        for name in NOISY_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)


def _load_sync_config(args):
    """Resolve SyncConfig from --config, environment and flags, then validate it."""
    from ecs_secret_sync.sync.domains.config_loader import load_config

    # --interval is a usage error (exit 2); bad file/env intervals are ConfigError (exit 1)
    if getattr(args, "interval", None) is not None:
        validate_interval(args.interval)

    overrides = {
        "secret_id": getattr(args, "secret_id", None),
        "task_definition": getattr(args, "task_definition", None),
        "region": getattr(args, "region", None),
        "interval_seconds": getattr(args, "interval", None),
    }
    config = load_config(getattr(args, "config", None), overrides=overrides)

    validate_secret_id(config.secret_id)
    validate_task_definition(config.task_definition)
    return config


def cmd_version(args):
    """Show version information."""
    print(f"ecs-secret-sync {VERSION}")


def cmd_config_show(args):
    """Show the resolved configuration."""
    from ecs_secret_sync.sync.domains.config_loader import find_config_path

    config_path = find_config_path(getattr(args, "config", None))
    config = _load_sync_config(args)

    print(f"Config file: {config_path or '(none, environment only)'}")
    print(f"Secret: {config.secret_id}")
    print(f"Task definition: {config.task_definition}")
    print(f"Interval: {config.interval_seconds}s")
    print(f"Region: {config.region or '(SDK default)'}")
    print(f"Dry run: {'yes' if config.dry_run else 'no'}")


def cmd_once(args):
    """Run a single reconciliation pass."""
    from ecs_secret_sync.sync.workflows.reconcile import TaskDefinitionReconciler

    config = _load_sync_config(args)
    reconciler = TaskDefinitionReconciler.from_config(config)
    outcome = reconciler.reconcile(config.secret_id, config.task_definition, dry_run=config.dry_run)

    if outcome.status.failed:
        print(f"Error: {outcome.error}", file=sys.stderr)
        sys.exit(1)

    print(outcome.describe())


def cmd_check(args):
    """Report drift without registering a new revision."""
    from ecs_secret_sync.sync.workflows.reconcile import TaskDefinitionReconciler

    config = _load_sync_config(args)
    reconciler = TaskDefinitionReconciler.from_config(config)
    outcome = reconciler.reconcile(config.secret_id, config.task_definition, dry_run=True)

    if outcome.status.failed:
        print(f"Error: {outcome.error}", file=sys.stderr)
        sys.exit(1)

    print(outcome.describe())


def cmd_run(args):
    """Start the periodic reconciler in the foreground."""
    from ecs_secret_sync.sync.workflows.reconcile import TaskDefinitionReconciler
    from ecs_secret_sync.sync.workflows.scheduler import PeriodicReconciler

    config = _load_sync_config(args)
    periodic = PeriodicReconciler(TaskDefinitionReconciler.from_config(config), config)

    print(
        f"Watching secret '{config.secret_id}' for task definition "
        f"'{config.task_definition}' every {config.interval_seconds}s (Ctrl+C to stop)",
        file=sys.stderr
    )
    try:
        periodic.start(run_immediately=not args.no_initial_pass)
    except (KeyboardInterrupt, SystemExit):
        periodic.shutdown()


def _add_sync_arguments(parser):
    """Options shared by every command that needs a SyncConfig."""
    parser.add_argument(
        "--config",
        help="Path to YAML config file (default: $ECS_SECRET_SYNC_CONFIG or ~/.config/ecs-secret-sync/config.yml)"
    )
    parser.add_argument(
        "--secret-id",
        help="Secrets Manager secret name or ARN (overrides AWS_SECRET_NAME)"
    )
    parser.add_argument(
        "--task-definition",
        help="Task definition family or ARN; a pinned :revision is ignored and the latest revision compared (overrides ECS_TASK_DEFINITION)"
    )
    parser.add_argument(
        "--region",
        help="AWS region (overrides AWS_REGION)"
    )


def build_parser():
    parser = argparse.ArgumentParser(
        prog="ecs-secret-sync",
        description="Keep ECS task definition secret references in sync with a Secrets Manager secret",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Exit codes:
  0 - Success
  1 - Runtime error (configuration, AWS access, failed reconciliation pass)
  2 - Usage error (invalid arguments, invalid secret or task definition name)

Environment variables (a .env file in the working directory is also read):
  AWS_SECRET_NAME        - Secret name or ARN
  ECS_TASK_DEFINITION    - Task definition family or ARN
  CHECK_INTERVAL         - Seconds between passes (default: 60)
  AWS_REGION             - AWS region
  ECS_SECRET_SYNC_CONFIG - Path to YAML config file
        """
    )
    parser.add_argument(
        "-v", "--verbose",
        action="count",
        default=0,
        help="Increase log output (-v info, -vv debug)"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    subparsers.add_parser(
        "version",
        help="Show version information",
        description="Display the current version of ecs-secret-sync"
    )

    run_parser = subparsers.add_parser(
        "run",
        help="Reconcile periodically",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        description="""
Compare the secret's keys with the task definition's secret references on a
fixed interval, registering a new revision whenever the key set changes.

A failed pass is logged and retried at the next interval. Passes never overlap.
        """
    )
    _add_sync_arguments(run_parser)
    run_parser.add_argument(
        "--interval",
        type=int,
        help="Seconds between passes (overrides CHECK_INTERVAL, default: 60)"
    )
    run_parser.add_argument(
        "--no-initial-pass",
        action="store_true",
        help="Wait one interval before the first pass"
    )

    once_parser = subparsers.add_parser(
        "once",
        help="Run a single reconciliation pass",
        description="Run one pass and exit. Exit code 1 if the pass failed."
    )
    _add_sync_arguments(once_parser)

    check_parser = subparsers.add_parser(
        "check",
        help="Report drift without updating",
        description="Show which secret names would be added or removed. Never registers a revision."
    )
    _add_sync_arguments(check_parser)

    config_parser = subparsers.add_parser(
        "config",
        help="Configuration management",
        description="Inspect ecs-secret-sync configuration"
    )
    config_subparsers = config_parser.add_subparsers(dest="config_command")
    config_show_parser = config_subparsers.add_parser(
        "show",
        help="Show resolved configuration",
        description="Display the configuration after merging config file, environment and flags"
    )
    _add_sync_arguments(config_show_parser)

    return parser, config_parser


def main(argv=None):
    """Main CLI entrypoint.

    Exit codes:
        0 - Success
        1 - Runtime errors (configuration, AWS access, failed pass)
        2 - Usage errors (invalid arguments, invalid names)
    """
    from ecs_secret_sync.sync.domains.config_loader import ConfigError

    parser, config_parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        sys.exit(2)

    load_dotenv()
    _configure_logging(args.verbose)

    handlers = {
        "version": cmd_version,
        "run": cmd_run,
        "once": cmd_once,
        "check": cmd_check,
    }

    try:
        if args.command == "config":
            if args.config_command == "show":
                cmd_config_show(args)
            else:
                config_parser.print_help()
                sys.exit(2)
        else:
            handlers[args.command](args)
    except ConfigError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        sys.exit(1)
    except KeyboardInterrupt:
        print("\nInterrupted", file=sys.stderr)
        sys.exit(1)
    except Exception as e:
        logger.debug("Unhandled error", exc_info=True)
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
