"""Periodic execution of reconciliation passes."""
import logging
import threading
from datetime import datetime
from typing import Optional

from apscheduler.schedulers.blocking import BlockingScheduler
from apscheduler.triggers.interval import IntervalTrigger

from ..domains.config_loader import SyncConfig
from ..domains.models import SyncOutcome
from .reconcile import TaskDefinitionReconciler

logger = logging.getLogger(__name__)

JOB_ID = "reconcile_secrets"


class PeriodicReconciler:
    """
    Runs TaskDefinitionReconciler.reconcile on a fixed interval.

    Passes never overlap: APScheduler allows one running instance of the job,
    and run_pass() itself refuses to start while another pass holds the lock,
    which also covers passes started outside the scheduler.
    """

    def __init__(self, reconciler: TaskDefinitionReconciler, config: SyncConfig,
                 scheduler=None):
        self.reconciler = reconciler
        self.config = config
        self.scheduler = scheduler if scheduler is not None else BlockingScheduler()
        self._in_flight = threading.Lock()

    def run_pass(self) -> Optional[SyncOutcome]:
        """Run one pass, or return None if another pass is still in flight."""
        if not self._in_flight.acquire(blocking=False):
            logger.warning("Previous reconciliation pass still running, skipping this one")
            return None

        try:
            logger.info(f"Checking for updates to secret: {self.config.secret_id}")
            outcome = self.reconciler.reconcile(
                self.config.secret_id,
                self.config.task_definition,
                dry_run=self.config.dry_run,
            )
        finally:
            self._in_flight.release()

        if outcome.status.failed:
            logger.warning(f"Pass failed, retrying in {self.config.interval_seconds}s: {outcome.describe()}")
        else:
            logger.info(outcome.describe())
        return outcome

    def schedule(self, run_immediately: bool = True) -> None:
        """Register the interval job with the scheduler."""
        job_kwargs = {}
        if run_immediately:
            job_kwargs["next_run_time"] = datetime.now()

        self.scheduler.add_job(
            self.run_pass,
            IntervalTrigger(seconds=self.config.interval_seconds),
            id=JOB_ID,
            name=f"Reconcile {self.config.task_definition} with {self.config.secret_id}",
            max_instances=1,
            coalesce=True,
            replace_existing=True,
            **job_kwargs,
        )

    def start(self, run_immediately: bool = True) -> None:
        """Schedule the job and block until the scheduler is shut down."""
        self.schedule(run_immediately=run_immediately)
        logger.info(
            f"Scheduler started: every {self.config.interval_seconds}s "
            f"for task definition '{self.config.task_definition}'"
        )
        self.scheduler.start()

    def shutdown(self) -> None:
        if self.scheduler.running:
            self.scheduler.shutdown(wait=False)
        logger.info("Scheduler stopped")
