"""
Tests for the workflow runtime, the digest workflow and the scheduler.
"""

import pytest

from feedlens.digest.workflow import DIGEST_WORKFLOW
from feedlens.utils.error_handling import ConfigurationError, LLMError, NotFoundError
from feedlens.workflow.models import WorkflowStatus
from feedlens.workflow.scheduler import build_scheduler


@pytest.mark.asyncio
async def test_digest_skipped_without_analyzed_feedback(services, llm):
    services.store.create("Not analyzed yet", "email")
    instance = services.runtime.create_instance(DIGEST_WORKFLOW)

    result = await services.runtime.run_instance(instance.id)

    assert result.status == WorkflowStatus.COMPLETE
    assert result.output == {"status": "skipped", "reason": "No analyzed feedback"}
    assert [step.name for step in result.steps] == ["fetch-feedback"]
    llm.complete.assert_not_called()


@pytest.mark.asyncio
async def test_digest_completes_without_webhook(services, seeded_store, llm):
    llm.complete.return_value = "Login crashes are the top issue."
    instance = services.runtime.create_instance(DIGEST_WORKFLOW)

    result = await services.runtime.run_instance(instance.id)

    assert result.status == WorkflowStatus.COMPLETE
    assert result.output == {
        "status": "completed",
        "discord": {"sent": False, "reason": "No webhook URL configured"},
    }
    assert [step.name for step in result.steps] == ["fetch-feedback", "generate-summary", "send-discord"]

    prompt = llm.complete.call_args.args[0]
    assert "daily digest" in prompt
    assert "login crash" in prompt
    assert "Export to CSV" not in prompt


@pytest.mark.asyncio
async def test_digest_caps_rows(services, config, llm, make_analyzed):
    config.digest_row_limit = 2
    for i in range(4):
        make_analyzed(f"message {i}", "email", f"theme-{i}", "neutral", "low", f"summary {i}")
    llm.complete.return_value = "Digest"
    instance = services.runtime.create_instance(DIGEST_WORKFLOW)

    await services.runtime.run_instance(instance.id)

    prompt = llm.complete.call_args.args[0]
    assert "theme-3" in prompt and "theme-2" in prompt
    assert "theme-1" not in prompt and "theme-0" not in prompt


@pytest.mark.asyncio
async def test_step_retried_until_success(services, seeded_store, llm):
    llm.complete.side_effect = [LLMError("rate limited"), "Digest"]
    instance = services.runtime.create_instance(DIGEST_WORKFLOW)

    result = await services.runtime.run_instance(instance.id)

    assert result.status == WorkflowStatus.COMPLETE
    attempts = {step.name: step.attempts for step in result.steps}
    assert attempts["generate-summary"] == 2
    assert attempts["fetch-feedback"] == 1


@pytest.mark.asyncio
async def test_failed_instance_replays_completed_steps(services, seeded_store, llm, make_analyzed):
    """Test that a re-run reuses stored step outputs instead of recomputing them."""
    llm.complete.side_effect = LLMError("model unavailable")
    instance = services.runtime.create_instance(DIGEST_WORKFLOW)

    failed = await services.runtime.run_instance(instance.id)

    assert failed.status == WorkflowStatus.ERRORED
    assert "model unavailable" in failed.error
    assert [step.name for step in failed.steps] == ["fetch-feedback"]
    assert llm.complete.call_count == 2

    make_analyzed("Search is broken", "reddit", "search", "negative", "high", "Search fails")
    llm.complete.side_effect = None
    llm.complete.return_value = "Digest"

    resumed = await services.runtime.run_instance(instance.id)

    assert resumed.status == WorkflowStatus.COMPLETE
    assert resumed.error is None
    assert "Search fails" not in llm.complete.call_args.args[0]


@pytest.mark.asyncio
async def test_completed_instance_is_not_rerun(services, seeded_store, llm):
    llm.complete.return_value = "Digest"
    instance = services.runtime.create_instance(DIGEST_WORKFLOW)
    await services.runtime.run_instance(instance.id)
    llm.complete.reset_mock()

    result = await services.runtime.run_instance(instance.id)

    assert result.status == WorkflowStatus.COMPLETE
    llm.complete.assert_not_called()


@pytest.mark.asyncio
async def test_create_runs_in_background(services, seeded_store, llm):
    llm.complete.return_value = "Digest"

    instance = await services.runtime.create(DIGEST_WORKFLOW)
    await services.runtime.shutdown()

    assert services.runtime.status(instance.id).status == WorkflowStatus.COMPLETE


def test_create_unknown_workflow(services):
    with pytest.raises(ConfigurationError):
        services.runtime.create_instance("weekly-report")


def test_status_unknown_instance(services):
    with pytest.raises(NotFoundError):
        services.runtime.status("does-not-exist")


def test_new_instance_is_queued(services):
    instance = services.runtime.create_instance(DIGEST_WORKFLOW)

    view = services.runtime.status(instance.id)

    assert view.status == WorkflowStatus.QUEUED
    assert view.steps == []


def test_build_scheduler_registers_job(services):
    scheduler = build_scheduler(services.runtime, DIGEST_WORKFLOW, "0 9 * * *")

    jobs = scheduler.get_jobs()

    assert len(jobs) == 1
    assert jobs[0].id == "digest-cron"


def test_build_scheduler_rejects_bad_cron(services):
    with pytest.raises(ConfigurationError):
        build_scheduler(services.runtime, DIGEST_WORKFLOW, "every morning")
