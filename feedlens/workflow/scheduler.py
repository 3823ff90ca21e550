"""
Cron scheduling for recurring workflows.
"""

import logging

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger

from feedlens.utils.error_handling import ConfigurationError
from feedlens.workflow.runtime import WorkflowRuntime


logger = logging.getLogger(__name__)


def build_scheduler(runtime: WorkflowRuntime, workflow: str, cron: str) -> AsyncIOScheduler:
    """
    Build a scheduler that starts ``workflow`` on every cron firing.

    Args:
        runtime: Runtime used to create instances
        workflow: Registered workflow name
        cron: Five-field crontab expression, evaluated in UTC

    Returns:
        An unstarted AsyncIOScheduler
    """
    try:
        trigger = CronTrigger.from_crontab(cron, timezone="UTC")
    except ValueError as e:
        raise ConfigurationError(f"Invalid cron expression {cron!r}: {e}", component="scheduler") from e

    async def _fire():
        instance = await runtime.create(workflow)
        logger.info(f"Scheduled {workflow} run started: {instance.id}")

    scheduler = AsyncIOScheduler(timezone="UTC")
    scheduler.add_job(_fire, trigger, id=f"{workflow}-cron", replace_existing=True, coalesce=True)
    return scheduler
