from datetime import datetime, timedelta, timezone

from app.services import reminder_service
from app.services.connection_registry import ConnectionRegistry
from app.services.scheduler import HEARTBEAT_JOB_ID, build_scheduler


def test_scheduler_registers_independent_jobs():
    scheduler = build_scheduler(ConnectionRegistry())
    jobs = {job.id: job for job in scheduler.get_jobs()}

    assert set(jobs) == {
        HEARTBEAT_JOB_ID,
        reminder_service.TASK_DEADLINE,
        reminder_service.INTERNSHIP_DEADLINE,
        reminder_service.PENDING_APPLICATION,
        reminder_service.LOW_APPLICATION_COUNT,
    }
    assert jobs[HEARTBEAT_JOB_ID].trigger.interval == timedelta(seconds=30)
    assert jobs[reminder_service.TASK_DEADLINE].trigger.interval == timedelta(hours=1)
    assert jobs[reminder_service.INTERNSHIP_DEADLINE].trigger.interval == timedelta(hours=6)
    assert jobs[reminder_service.PENDING_APPLICATION].trigger.interval == timedelta(hours=12)
    assert jobs[reminder_service.LOW_APPLICATION_COUNT].trigger.interval == timedelta(hours=24)
    assert all(job.max_instances == 1 for job in jobs.values())


def test_sweep_jobs_start_staggered():
    before = datetime.now(timezone.utc)
    scheduler = build_scheduler(ConnectionRegistry())
    after = datetime.now(timezone.utc)
    jobs = {job.id: job for job in scheduler.get_jobs()}

    task_first = jobs[reminder_service.TASK_DEADLINE].next_run_time
    assert before + timedelta(seconds=10) <= task_first <= after + timedelta(seconds=10)

    offsets = [
        jobs[job_id].next_run_time - task_first
        for job_id in (
            reminder_service.TASK_DEADLINE,
            reminder_service.INTERNSHIP_DEADLINE,
            reminder_service.PENDING_APPLICATION,
            reminder_service.LOW_APPLICATION_COUNT,
        )
    ]
    assert offsets == [timedelta(seconds=s) for s in (0, 10, 20, 30)]
