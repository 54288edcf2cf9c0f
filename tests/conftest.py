from datetime import datetime, timedelta

import pytest

from app import create_app
from config import Config
from mailer import Notifier
from models import db
from reminders import ReminderEngine
from repository import ClientRecord, ItemTypeRecord, RenewableRecord, UserRecord

NOW = datetime(2026, 3, 1, 9, 30)
TODAY = datetime(2026, 3, 1)


class TestingConfig(Config):
    __test__ = False

    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite://"
    APP_TZ = "UTC"
    SMTP_HOST = ""
    EMAIL_DRY_RUN = True
    SCHEDULER_ENABLED = False
    REMINDER_IDEMPOTENCY = True


class FakeRepository:
    """In-memory stand-in for repository.Repository."""

    def __init__(self):
        self.renewables = []
        self.clients = {}
        self.item_types = {}
        self.users = {}
        self.logs = []
        self.dispatches = set()
        self.list_calls = 0
        self.fail_listing = False
        self.fail_log_for = set()

    def list_active_renewables(self):
        self.list_calls += 1
        if self.fail_listing:
            raise RuntimeError("database is down")
        return list(self.renewables)

    def get_client(self, client_id):
        return self.clients.get(client_id)

    def get_item_type(self, type_id):
        return self.item_types.get(type_id)

    def get_user(self, user_id):
        return self.users.get(user_id)

    def create_reminder_log(self, entry):
        if entry.renewable_id in self.fail_log_for:
            raise RuntimeError("write failed")
        self.logs.append(entry)
        return entry

    def claim_dispatch(self, renewable_id, days_before_expiry, run_date):
        key = (renewable_id, days_before_expiry, run_date)
        if key in self.dispatches:
            return False
        self.dispatches.add(key)
        return True

    def release_dispatch(self, renewable_id, days_before_expiry, run_date):
        self.dispatches.discard((renewable_id, days_before_expiry, run_date))


class FakeNotifier(Notifier):
    """Real rendering, recorded delivery."""

    def __init__(self, fail_for=()):
        super().__init__(dry_run=True)
        self.sent = []
        self.fail_for = set(fail_for)

    def send(self, to, subject, body):
        if to in self.fail_for:
            return False
        self.sent.append({"to": to, "subject": subject, "body": body})
        return True


def make_renewable(id=1, days=7, intervals=(30, 15, 7), status="active", assigned_to_id=1,
                   client_id=1, type_id=1, notes=None, name=None):
    return RenewableRecord(
        id=id,
        name=name or f"renewable-{id}.example.com",
        client_id=client_id,
        type_id=type_id,
        assigned_to_id=assigned_to_id,
        end_date=TODAY + timedelta(days=days),
        status=status,
        reminder_intervals=list(intervals) if intervals is not None else None,
        notes=notes,
    )


@pytest.fixture
def repo():
    r = FakeRepository()
    r.clients[1] = ClientRecord(id=1, name="Acme Corp")
    r.item_types[1] = ItemTypeRecord(id=1, name="Domain", default_reminder_intervals=[30, 15, 7])
    r.users[1] = UserRecord(id=1, email="rina@example.com", full_name="Rina Staff", role="staff")
    r.users[2] = UserRecord(id=2, email="budi@example.com", full_name="Budi Admin", role="admin")
    return r


@pytest.fixture
def notifier():
    return FakeNotifier()


@pytest.fixture
def engine(repo, notifier):
    return ReminderEngine(repo, notifier, timezone="UTC", clock=lambda: NOW)


@pytest.fixture
def app():
    app = create_app(TestingConfig)
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def session(app):
    with app.app_context():
        yield db.session


@pytest.fixture
def client(app):
    return app.test_client()
