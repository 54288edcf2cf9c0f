import logging
import threading
from dataclasses import asdict, dataclass
from datetime import datetime

import pytz

from mailer import build_subject
from repository import ReminderLogEntry
from utils import days_until_expiry, matching_interval

logger = logging.getLogger(__name__)

class SweepError(Exception):
    """The sweep could not run at all (renewables could not be listed)."""

class SweepInProgressError(SweepError):
    """Another sweep is still running."""

@dataclass
class SweepSummary:
    evaluated: int = 0
    due: int = 0
    sent: int = 0
    failed: int = 0
    skipped_duplicate: int = 0

    def to_dict(self):
        return asdict(self)

class ReminderEngine:
    def __init__(self, repository, notifier, timezone: str = "UTC", clock=None, idempotent: bool = True):
        self.repository = repository
        self.notifier = notifier
        self.tz = pytz.timezone(timezone)
        self.clock = clock or (lambda: datetime.now(self.tz))
        self.idempotent = idempotent
        self._running = threading.Lock()

    def now(self) -> datetime:
        """Current local wall-clock time, naive, comparable with stored dates."""
        current = self.clock()
        if current.tzinfo is not None:
            current = current.astimezone(self.tz).replace(tzinfo=None)
        return current

    def run_sweep(self) -> SweepSummary:
        if not self._running.acquire(blocking=False):
            raise SweepInProgressError("A reminder sweep is already running")
        try:
            return self._sweep()
        finally:
            self._running.release()

    def trigger_manually(self) -> SweepSummary:
        logger.info("Manually triggering reminders...")
        return self.run_sweep()

    def run_scheduled(self):
        logger.info("Running daily reminder check...")
        try:
            return self.run_sweep()
        except SweepInProgressError:
            logger.warning("Skipping scheduled reminder check: a sweep is already running")
        except SweepError as e:
            logger.error("Scheduled reminder check failed: %s", e)
        return None

    def _sweep(self) -> SweepSummary:
        now = self.now()
        summary = SweepSummary()

        try:
            renewables = self.repository.list_active_renewables()
        except Exception as e:
            logger.exception("Could not load renewables")
            raise SweepError(f"Could not load renewables: {e}") from e

        for renewable in renewables:
            if renewable.status != "active":
                continue
            if renewable.assigned_to_id is None:
                continue
            summary.evaluated += 1
            try:
                self._process(renewable, now, summary)
            except Exception:
                summary.failed += 1
                logger.exception("Error processing reminder for renewable %s", renewable.id)

        logger.info(
            "Reminder check completed: evaluated=%d due=%d sent=%d failed=%d duplicates=%d",
            summary.evaluated, summary.due, summary.sent, summary.failed, summary.skipped_duplicate,
        )
        return summary

    def resolve_intervals(self, renewable) -> list[int]:
        if renewable.reminder_intervals:
            return renewable.reminder_intervals
        item_type = self.repository.get_item_type(renewable.type_id)
        if item_type and item_type.default_reminder_intervals:
            return item_type.default_reminder_intervals
        return []

    def _process(self, renewable, now: datetime, summary: SweepSummary) -> None:
        days = days_until_expiry(renewable.end_date, now)
        interval = matching_interval(days, self.resolve_intervals(renewable))
        if interval is None:
            return
        summary.due += 1

        client = self.repository.get_client(renewable.client_id)
        item_type = self.repository.get_item_type(renewable.type_id)
        user = self.repository.get_user(renewable.assigned_to_id)
        if not client or not item_type or not user:
            summary.failed += 1
            logger.error("Missing related data for renewable %s", renewable.id)
            return

        run_date = now.date()
        if self.idempotent and not self.repository.claim_dispatch(renewable.id, interval, run_date):
            summary.skipped_duplicate += 1
            logger.info(
                "Reminder for renewable %s (%d days) already sent on %s", renewable.id, interval, run_date
            )
            return

        try:
            body = self.notifier.render(
                client_name=client.name,
                item_name=renewable.name,
                item_type=item_type.name,
                expiry_date=renewable.end_date,
                days_left=interval,
                notes=renewable.notes,
            )
            sent = self.notifier.send(
                to=user.email,
                subject=build_subject(client.name, renewable.name, interval),
                body=body,
            )
        except Exception:
            self._release(renewable.id, interval, run_date)
            raise
        if not sent:
            summary.failed += 1
            logger.error("Failed to send reminder for renewable %s to %s", renewable.id, user.email)
            self._release(renewable.id, interval, run_date)
            return

        # Sent: the claim stays even if the log write below fails.
        self.repository.create_reminder_log(ReminderLogEntry(
            renewable_id=renewable.id,
            sent_to_id=user.id,
            days_before_expiry=interval,
            email_content=body,
            email_sent_to=user.email,
        ))
        summary.sent += 1
        logger.info(
            "Reminder sent for %s - %s to %s", client.name, renewable.name, user.email
        )

    def _release(self, renewable_id: int, interval: int, run_date) -> None:
        if self.idempotent:
            self.repository.release_dispatch(renewable_id, interval, run_date)
