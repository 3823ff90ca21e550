"""
Workflow runtime with replay-safe steps.

A workflow is an object with ``async run(step) -> dict``. Each ``step.do``
call runs at most once successfully per instance: its JSON output is stored,
and a replay of the same instance returns the stored value. Transient step
failures are retried with tenacity; nothing else in Feedlens retries.
"""

import asyncio
import json
import logging
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Dict, Optional, Protocol, Set

from sqlalchemy.engine import Engine
from sqlmodel import select
from tenacity import AsyncRetrying, stop_after_attempt, wait_exponential
from tenacity.wait import wait_base

from feedlens.utils.database import session_scope
from feedlens.utils.error_handling import ConfigurationError, NotFoundError
from feedlens.workflow.models import (
    InstanceView,
    StepView,
    WorkflowInstance,
    WorkflowStatus,
    WorkflowStepRecord,
)


logger = logging.getLogger(__name__)


class Workflow(Protocol):
    async def run(self, step: "Step") -> Dict[str, Any]:
        ...


WorkflowFactory = Callable[[], Workflow]


class Step:
    """
    Step handle passed to a running workflow.
    """

    def __init__(self, engine: Engine, instance_id: str, max_attempts: int, wait: wait_base):
        self.engine = engine
        self.instance_id = instance_id
        self.max_attempts = max_attempts
        self.wait = wait

    def _load(self, name: str) -> Optional[WorkflowStepRecord]:
        with session_scope(self.engine) as session:
            return session.exec(
                select(WorkflowStepRecord).where(
                    WorkflowStepRecord.instance_id == self.instance_id,
                    WorkflowStepRecord.name == name,
                )
            ).first()

    def _save(self, name: str, output: Any, attempts: int) -> None:
        record = WorkflowStepRecord(
            instance_id=self.instance_id,
            name=name,
            output=json.dumps(output),
            attempts=attempts,
        )
        with session_scope(self.engine) as session:
            session.add(record)
            session.commit()

    async def do(self, name: str, fn: Callable[[], Awaitable[Any]]) -> Any:
        """
        Run a named step, or return its stored output on replay.

        Args:
            name: Step name, unique within the workflow
            fn: Coroutine function producing a JSON-serializable value

        Returns:
            The step output
        """
        existing = self._load(name)
        if existing is not None:
            logger.debug(f"Replaying step {name} for instance {self.instance_id}")
            return json.loads(existing.output)

        attempts = 0
        retrying = AsyncRetrying(
            stop=stop_after_attempt(self.max_attempts),
            wait=self.wait,
            reraise=True,
        )
        async for attempt in retrying:
            with attempt:
                attempts += 1
                if attempts > 1:
                    logger.warning(f"Retrying step {name} (attempt {attempts}/{self.max_attempts})")
                output = await fn()

        self._save(name, output, attempts)
        logger.info(f"Step {name} completed for instance {self.instance_id}")
        return output


class WorkflowRuntime:
    """
    Creates, runs and reports on workflow instances.
    """

    def __init__(self,
                 engine: Engine,
                 max_attempts: int = 3,
                 wait: Optional[wait_base] = None):
        """
        Initialize the runtime.

        Args:
            engine: Database engine holding workflow tables
            max_attempts: Attempts per step before the instance errors
            wait: tenacity wait strategy between attempts
        """
        self.engine = engine
        self.max_attempts = max(1, max_attempts)
        self.wait = wait or wait_exponential(multiplier=1, min=1, max=60)
        self._workflows: Dict[str, WorkflowFactory] = {}
        self._tasks: Set[asyncio.Task] = set()

    def register(self, name: str, factory: WorkflowFactory) -> None:
        """Register a workflow factory under a name."""
        self._workflows[name] = factory

    def _touch(self, instance_id: str, **values: Any) -> None:
        with session_scope(self.engine) as session:
            instance = session.get(WorkflowInstance, instance_id)
            for key, value in values.items():
                setattr(instance, key, value)
            instance.updated_at = datetime.now(timezone.utc)
            session.add(instance)
            session.commit()

    def create_instance(self, name: str) -> WorkflowInstance:
        """Persist a queued instance without starting it."""
        if name not in self._workflows:
            raise ConfigurationError(f"Unknown workflow: {name}", component="workflow_runtime")

        instance = WorkflowInstance(workflow=name)
        with session_scope(self.engine) as session:
            session.add(instance)
            session.commit()
            session.refresh(instance)

        logger.info(f"Created {name} workflow instance {instance.id}")
        return instance

    async def create(self, name: str) -> WorkflowInstance:
        """
        Create an instance and start it in the background.

        Returns:
            The queued instance
        """
        instance = self.create_instance(name)
        task = asyncio.get_running_loop().create_task(self.run_instance(instance.id))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return instance

    async def run_instance(self, instance_id: str) -> InstanceView:
        """
        Run (or resume) an instance to completion.

        A failing step marks the instance as errored; the error is recorded
        on the instance rather than raised.

        Returns:
            Final status of the instance
        """
        view = self.status(instance_id)
        if view.status == WorkflowStatus.COMPLETE:
            return view

        workflow = self._workflows[view.workflow]()
        step = Step(self.engine, instance_id, self.max_attempts, self.wait)

        self._touch(instance_id, status=WorkflowStatus.RUNNING.value, error=None)
        try:
            output = await workflow.run(step)
        except Exception as e:
            self._fail(instance_id, e)
        else:
            self._touch(
                instance_id,
                status=WorkflowStatus.COMPLETE.value,
                output=json.dumps(output),
            )
            logger.info(f"Workflow instance {instance_id} completed: {output.get('status')}")

        return self.status(instance_id)

    def _fail(self, instance_id: str, error: BaseException) -> None:
        logger.error(f"Workflow instance {instance_id} failed: {error}")
        self._touch(instance_id, status=WorkflowStatus.ERRORED.value, error=str(error))

    def status(self, instance_id: str) -> InstanceView:
        """
        Return the current status of an instance with its completed steps.

        Raises:
            NotFoundError: Unknown instance id
        """
        with session_scope(self.engine) as session:
            instance = session.get(WorkflowInstance, instance_id)
            if instance is None:
                raise NotFoundError(
                    "Workflow instance not found",
                    component="workflow_runtime",
                    details={"id": instance_id}
                )
            steps = session.exec(
                select(WorkflowStepRecord)
                .where(WorkflowStepRecord.instance_id == instance_id)
                .order_by(WorkflowStepRecord.id)
            ).all()

            return InstanceView(
                id=instance.id,
                workflow=instance.workflow,
                status=WorkflowStatus(instance.status),
                output=json.loads(instance.output) if instance.output else None,
                error=instance.error,
                created_at=instance.created_at,
                updated_at=instance.updated_at,
                steps=[
                    StepView(name=s.name, attempts=s.attempts, completed_at=s.completed_at)
                    for s in steps
                ],
            )

    async def shutdown(self) -> None:
        """Wait for in-flight instances to finish."""
        if self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)
