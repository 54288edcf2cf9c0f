import logging
from dataclasses import dataclass
from datetime import date, datetime

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from models import db, Client, ItemType, Renewable, ReminderDispatch, ReminderLog, User
from utils import parse_intervals

logger = logging.getLogger(__name__)

@dataclass
class RenewableRecord:
    id: int
    name: str
    client_id: int
    type_id: int
    assigned_to_id: int | None
    end_date: datetime
    status: str
    reminder_intervals: list[int] | None = None  # None => use item type defaults
    notes: str | None = None

@dataclass
class ClientRecord:
    id: int
    name: str

@dataclass
class ItemTypeRecord:
    id: int
    name: str
    default_reminder_intervals: list[int]

@dataclass
class UserRecord:
    id: int
    email: str
    full_name: str
    role: str

@dataclass
class ReminderLogEntry:
    renewable_id: int
    sent_to_id: int
    days_before_expiry: int
    email_content: str
    email_sent_to: str

class Repository:
    """Database access for the reminder engine.

    Interval lists are normalized here so callers always see list[int] or None.
    """

    def __init__(self, session=None):
        self._session = session

    @property
    def session(self):
        return self._session if self._session is not None else db.session

    # Reads

    def list_active_renewables(self) -> list[RenewableRecord]:
        rows = self.session.query(Renewable).filter_by(status="active").all()
        return [self._to_renewable_record(r) for r in rows]

    def get_client(self, client_id: int) -> ClientRecord | None:
        row = self.session.get(Client, client_id)
        if row is None:
            return None
        return ClientRecord(id=row.id, name=row.name)

    def get_item_type(self, type_id: int) -> ItemTypeRecord | None:
        row = self.session.get(ItemType, type_id)
        if row is None:
            return None
        return ItemTypeRecord(
            id=row.id,
            name=row.name,
            default_reminder_intervals=parse_intervals(row.default_reminder_intervals) or [],
        )

    def get_user(self, user_id: int) -> UserRecord | None:
        row = self.session.get(User, user_id)
        if row is None:
            return None
        return UserRecord(id=row.id, email=row.email, full_name=row.full_name, role=row.role)

    def get_reminder_logs(self, renewable_id: int | None = None) -> list[ReminderLog]:
        q = self.session.query(ReminderLog)
        if renewable_id is not None:
            q = q.filter_by(renewable_id=renewable_id)
        return q.order_by(ReminderLog.sent_at.desc(), ReminderLog.id.desc()).all()

    def get_recent_reminder_logs(self, limit: int = 10) -> list[ReminderLog]:
        return (
            self.session.query(ReminderLog)
            .order_by(ReminderLog.sent_at.desc(), ReminderLog.id.desc())
            .limit(limit)
            .all()
        )

    # Writes

    def create_reminder_log(self, entry: ReminderLogEntry) -> ReminderLog:
        log = ReminderLog(
            renewable_id=entry.renewable_id,
            sent_to_id=entry.sent_to_id,
            days_before_expiry=entry.days_before_expiry,
            email_content=entry.email_content,
            email_sent_to=entry.email_sent_to,
        )
        self.session.add(log)
        self._commit()
        return log

    def claim_dispatch(self, renewable_id: int, days_before_expiry: int, run_date: date) -> bool:
        """Record that a reminder is going out. False if already recorded."""
        self.session.add(ReminderDispatch(
            renewable_id=renewable_id,
            days_before_expiry=days_before_expiry,
            run_date=run_date,
        ))
        try:
            self.session.commit()
        except IntegrityError:
            self.session.rollback()
            return False
        except SQLAlchemyError:
            self.session.rollback()
            raise
        return True

    def release_dispatch(self, renewable_id: int, days_before_expiry: int, run_date: date) -> None:
        self.session.query(ReminderDispatch).filter_by(
            renewable_id=renewable_id,
            days_before_expiry=days_before_expiry,
            run_date=run_date,
        ).delete()
        self._commit()

    def _commit(self) -> None:
        try:
            self.session.commit()
        except SQLAlchemyError:
            self.session.rollback()
            raise

    @staticmethod
    def _to_renewable_record(row: Renewable) -> RenewableRecord:
        return RenewableRecord(
            id=row.id,
            name=row.name,
            client_id=row.client_id,
            type_id=row.type_id,
            assigned_to_id=row.assigned_to_id,
            end_date=row.end_date,
            status=row.status,
            reminder_intervals=parse_intervals(row.reminder_intervals),
            notes=row.notes,
        )
