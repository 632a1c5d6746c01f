import asyncio

from taskboard.board.coordinator import MutationCoordinator, MutationOutcome
from taskboard.schemas.project import ProjectCreate

VALID = {"name": "Apollo", "description": "Moon", "start_date": "2024-01-01", "end_date": "2024-02-01"}


async def test_commit_runs_refresh_then_close(store):
    events = []
    coordinator = MutationCoordinator("create project")

    async def refresh():
        events.append("refresh")

    result = await coordinator.submit(
        VALID, store.create_project, schema=ProjectCreate,
        on_refresh=refresh, on_close=lambda: events.append("close"),
    )

    assert result.outcome == MutationOutcome.COMMITTED
    assert result.value.name == "Apollo"
    assert events == ["refresh", "close"]
    assert coordinator.is_submitting is False


async def test_invalid_payloads_never_reach_store(store):
    coordinator = MutationCoordinator("create project")
    cases = {
        "blank name": ({**VALID, "name": "  "}, "Project name is required"),
        "blank description": ({**VALID, "description": ""}, "Project description is required"),
        "only start date": ({**VALID, "end_date": None}, "Both start date and end date are required"),
        "start after end": ({**VALID, "start_date": "2024-03-01"}, "End date must be after start date."),
    }

    for payload, message in cases.values():
        result = await coordinator.submit(payload, store.create_project, schema=ProjectCreate)
        assert result.outcome == MutationOutcome.INVALID
        assert result.message == message
        assert coordinator.is_submitting is False

    assert store.count("create_project") == 0


async def test_failure_message_and_flag_reset(store):
    store.fail_on.add("create_project")
    closed = []
    coordinator = MutationCoordinator("create project", on_close=lambda: closed.append(True))

    result = await coordinator.submit(VALID, store.create_project, schema=ProjectCreate)

    assert result.outcome == MutationOutcome.FAILED
    assert result.message == "Failed to create project: create_project unavailable"
    assert coordinator.is_submitting is False
    assert closed == []


async def test_concurrent_submissions_make_one_store_call(store):
    store.gate = asyncio.Event()
    coordinator = MutationCoordinator("create project")

    first = asyncio.create_task(coordinator.submit(VALID, store.create_project, schema=ProjectCreate))
    await asyncio.sleep(0)
    assert coordinator.is_submitting is True

    second = await coordinator.submit(VALID, store.create_project, schema=ProjectCreate)
    assert second.outcome == MutationOutcome.REJECTED
    assert coordinator.is_submitting is True

    store.gate.set()
    assert (await first).outcome == MutationOutcome.COMMITTED
    assert store.count("create_project") == 1
    assert len(store.projects) == 1


async def test_disposed_coordinator_skips_callbacks(store):
    store.gate = asyncio.Event()
    events = []
    coordinator = MutationCoordinator(
        "create project",
        on_refresh=lambda: events.append("refresh"),
        on_close=lambda: events.append("close"),
    )

    pending = asyncio.create_task(coordinator.submit(VALID, store.create_project, schema=ProjectCreate))
    await asyncio.sleep(0)
    coordinator.dispose()
    store.gate.set()

    result = await pending
    assert result.outcome == MutationOutcome.COMMITTED
    assert events == []

    after = await coordinator.submit(VALID, store.create_project, schema=ProjectCreate)
    assert after.outcome == MutationOutcome.REJECTED
    assert store.count("create_project") == 1


async def test_callback_error_does_not_fail_committed_mutation(store):
    def broken():
        raise RuntimeError("boom")

    coordinator = MutationCoordinator("create project")
    result = await coordinator.submit(VALID, store.create_project, schema=ProjectCreate, on_refresh=broken)

    assert result.outcome == MutationOutcome.COMMITTED
    assert coordinator.is_submitting is False


async def test_precheck_rejection_leaves_form_free(store):
    from taskboard.core.exceptions import ValidationException

    coordinator = MutationCoordinator("create project")
    seen = []

    async def check(data):
        seen.append(coordinator.is_submitting)
        raise ValidationException("Both start date and end date are required")

    result = await coordinator.submit(VALID, store.create_project, schema=ProjectCreate, precheck=check)

    assert result.outcome == MutationOutcome.INVALID
    assert result.message == "Both start date and end date are required"
    assert seen == [False]
    assert store.count("create_project") == 0


async def test_validation_error_from_store_is_invalid_not_failed():
    from taskboard.core.exceptions import ValidationException

    coordinator = MutationCoordinator("update project")

    async def operation(data):
        raise ValidationException("End date must be after start date.")

    result = await coordinator.submit({}, operation)

    assert result.outcome == MutationOutcome.INVALID
    assert result.message == "End date must be after start date."
    assert coordinator.is_submitting is False
