"""리마인더 sweep과 스트림 heartbeat를 APScheduler job으로 등록합니다."""

import logging
from datetime import datetime, timedelta, timezone

from apscheduler.schedulers.background import BackgroundScheduler

from app.config import settings
from app.services import reminder_service
from app.services.connection_registry import ConnectionRegistry

logger = logging.getLogger(__name__)

HEARTBEAT_JOB_ID = "notification_heartbeat"


def sweep_jobs():
    # (job id, sweep, 주기(시간), 기동 후 첫 실행 지연(초))
    return [
        (
            reminder_service.TASK_DEADLINE,
            reminder_service.sweep_task_deadlines,
            settings.TASK_DEADLINE_SWEEP_HOURS,
            settings.TASK_DEADLINE_STARTUP_DELAY_SECONDS,
        ),
        (
            reminder_service.INTERNSHIP_DEADLINE,
            reminder_service.sweep_internship_deadlines,
            settings.INTERNSHIP_DEADLINE_SWEEP_HOURS,
            settings.INTERNSHIP_DEADLINE_STARTUP_DELAY_SECONDS,
        ),
        (
            reminder_service.PENDING_APPLICATION,
            reminder_service.sweep_pending_applications,
            settings.PENDING_APPLICATION_SWEEP_HOURS,
            settings.PENDING_APPLICATION_STARTUP_DELAY_SECONDS,
        ),
        (
            reminder_service.LOW_APPLICATION_COUNT,
            reminder_service.sweep_low_application_counts,
            settings.LOW_APPLICATION_SWEEP_HOURS,
            settings.LOW_APPLICATION_STARTUP_DELAY_SECONDS,
        ),
    ]


def build_scheduler(registry: ConnectionRegistry) -> BackgroundScheduler:
    scheduler = BackgroundScheduler(timezone="UTC")
    scheduler.add_job(
        registry.heartbeat,
        "interval",
        seconds=settings.HEARTBEAT_INTERVAL_SECONDS,
        id=HEARTBEAT_JOB_ID,
        max_instances=1,
        coalesce=True,
    )
    now = datetime.now(timezone.utc)
    for job_id, sweep, hours, delay in sweep_jobs():
        scheduler.add_job(
            reminder_service.run_sweep,
            "interval",
            hours=hours,
            args=[job_id, sweep, registry],
            id=job_id,
            next_run_time=now + timedelta(seconds=delay),
            max_instances=1,
            coalesce=True,
        )
    return scheduler


def start_scheduler(registry: ConnectionRegistry) -> BackgroundScheduler:
    scheduler = build_scheduler(registry)
    scheduler.start()
    logger.info("[reminders] scheduler started with jobs: %s", ", ".join(job.id for job in scheduler.get_jobs()))
    return scheduler
