import logging
from dataclasses import dataclass
from apscheduler.jobstores.base import JobLookupError
from apscheduler.jobstores.memory import MemoryJobStore
from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger
from apscheduler.triggers.interval import IntervalTrigger
from app.core.config import settings
from app.core.utils import parse_time, to_trigger_weekday
from app.models.reminder import REMINDER_FIXED
from app.services.push_service import send_push

logger = logging.getLogger(__name__)

# Indexed by trigger weekday - 1 (1=Sunday..7=Saturday)
CRON_DAYS = ("sun", "mon", "tue", "wed", "thu", "fri", "sat")

def _build_scheduler() -> BackgroundScheduler:
    if settings.SCHEDULER_JOBSTORE_URL:
        from apscheduler.jobstores.sqlalchemy import SQLAlchemyJobStore
        jobstore = SQLAlchemyJobStore(url=settings.SCHEDULER_JOBSTORE_URL, tablename="reminder_jobs")
    else:
        jobstore = MemoryJobStore()

    return BackgroundScheduler(
        jobstores={"default": jobstore},
        job_defaults={"coalesce": True, "max_instances": 1, "misfire_grace_time": 60},
        timezone=settings.APP_TIMEZONE,
    )

class ReminderScheduler:
    """
    Registry of recurring reminder triggers. Every trigger is one APScheduler
    job and its job id is the handle stored on the reminder.
    """

    def __init__(self, scheduler: BackgroundScheduler | None = None):
        self.scheduler = scheduler or _build_scheduler()

    def start(self, paused: bool = False):
        if not self.scheduler.running:
            self.scheduler.start(paused=paused)

    def shutdown(self):
        if self.scheduler.running:
            self.scheduler.shutdown(wait=False)

    def _push_kwargs(self, name: str, message: str, token: str | None):
        return {
            "tokens": [token],
            "body": message or name,
            "title": name,
            "data": {"type": "reminder"},
        }

    def schedule_weekly(self, name: str, message: str, weekday: int, hour: int, minute: int, token: str | None = None) -> str:
        """Weekly trigger on one weekday, encoded 1=Sunday..7=Saturday."""
        trigger = CronTrigger(
            day_of_week=CRON_DAYS[weekday - 1],
            hour=hour,
            minute=minute,
            timezone=settings.APP_TIMEZONE,
        )
        job = self.scheduler.add_job(
            send_push,
            trigger,
            kwargs=self._push_kwargs(name, message, token),
            name=f"reminder:{name}:{CRON_DAYS[weekday - 1]}",
        )
        return job.id

    def schedule_fixed(self, name: str, message: str, time: str, repeat_days, token: str | None = None) -> list[str]:
        # one trigger per weekday; a Mon/Wed/Fri reminder is three handles
        hour, minute = parse_time(time)
        handles = []

        for day in repeat_days:
            handles.append(
                self.schedule_weekly(name, message, to_trigger_weekday(day), hour, minute, token)
            )

        logger.info("Scheduled fixed reminder '%s' at %s on %d day(s)", name, time, len(handles))
        return handles

    def schedule_interval(self, name: str, message: str, interval_minutes: int, token: str | None = None) -> str:
        job = self.scheduler.add_job(
            send_push,
            IntervalTrigger(minutes=interval_minutes, timezone=settings.APP_TIMEZONE),
            kwargs=self._push_kwargs(name, message, token),
            name=f"reminder:{name}:every-{interval_minutes}m",
        )
        logger.info("Scheduled interval reminder '%s' every %d min", name, interval_minutes)
        return job.id

    def schedule(self, definition, token: str | None = None) -> list[str]:
        """Schedule triggers for anything shaped like a reminder definition."""
        if definition.type == REMINDER_FIXED:
            return self.schedule_fixed(
                definition.name, definition.message, definition.time, definition.repeat_days, token
            )
        return [
            self.schedule_interval(definition.name, definition.message, definition.interval_minutes, token)
        ]

    def cancel(self, handle: str) -> bool:
        try:
            self.scheduler.remove_job(handle)
        except JobLookupError:
            logger.info("Trigger %s already cancelled", handle)
            return False
        return True

    def cancel_all(self, handles) -> list[str]:
        """Cancel every handle; returns the ones that failed. Never raises."""
        failed = []

        for handle in handles or []:
            try:
                self.cancel(handle)
            except Exception:
                logger.exception("Failed to cancel trigger %s", handle)
                failed.append(handle)

        return failed

    def is_scheduled(self, handle: str) -> bool:
        return self.scheduler.get_job(handle) is not None

    def live_handles(self) -> list[str]:
        return [job.id for job in self.scheduler.get_jobs()]

@dataclass
class ReminderDefinition:
    """The fields a reminder's triggers are derived from, detached from the row."""
    type: str
    name: str
    message: str
    time: str | None = None
    repeat_days: list[int] | None = None
    interval_minutes: int | None = None

    @classmethod
    def of(cls, source):
        return cls(
            type=source.type,
            name=source.name,
            message=source.message,
            time=source.time,
            repeat_days=list(source.repeat_days) if source.repeat_days is not None else None,
            interval_minutes=source.interval_minutes,
        )

class TriggerReplacement:
    """
    Cancel-before-reschedule swap of one reminder's triggers. ``revert`` is
    the inverse of ``apply``: it cancels what ``apply`` scheduled and, when the
    reminder was active before, schedules its previous definition again.
    """

    def __init__(self, scheduler: ReminderScheduler, reminder=None):
        self.scheduler = scheduler
        self.current_handles = list(reminder.notification_ids or []) if reminder is not None else []
        # snapshot before the caller mutates the row
        if reminder is not None and reminder.is_active:
            self.previous = ReminderDefinition.of(reminder)
        else:
            self.previous = None
        self.new_handles: list[str] = []
        self.token: str | None = None

    def apply(self, definition, enabled: bool, token: str | None = None) -> list[str]:
        self.token = token
        self.scheduler.cancel_all(self.current_handles)

        if enabled:
            self.new_handles = self.scheduler.schedule(definition, token)
        else:
            self.new_handles = []

        return list(self.new_handles)

    def revert(self) -> list[str]:
        """Undo ``apply``; returns the handles of the restored triggers."""
        self.scheduler.cancel_all(self.new_handles)
        self.new_handles = []

        if self.previous is None:
            return []

        restored = self.scheduler.schedule(self.previous, self.token)
        logger.info("Restored %d trigger(s) for reminder '%s'", len(restored), self.previous.name)
        return restored

reminder_scheduler = ReminderScheduler()
