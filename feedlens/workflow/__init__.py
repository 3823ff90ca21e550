"""
Workflow runtime component.

Replay-safe step execution and cron scheduling for background jobs.
"""

from feedlens.workflow.models import WorkflowInstance, WorkflowStatus, InstanceView
from feedlens.workflow.runtime import WorkflowRuntime, Step

__all__ = [
    "WorkflowInstance",
    "WorkflowStatus",
    "InstanceView",
    "WorkflowRuntime",
    "Step"
]
