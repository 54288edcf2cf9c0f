from flask_sqlalchemy import SQLAlchemy
from utils import utcnow

db = SQLAlchemy()

RENEWABLE_STATUSES = ("active", "renewed", "expired", "cancelled")
USER_ROLES = ("admin", "staff")

class User(db.Model):
    __tablename__ = "users"
    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(255), nullable=False, unique=True)
    full_name = db.Column(db.String(255), nullable=False)
    email = db.Column(db.String(255), nullable=False, unique=True)
    role = db.Column(db.Enum(*USER_ROLES, name="user_role"), nullable=False, default="staff")
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)

class Client(db.Model):
    __tablename__ = "clients"
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False)
    email = db.Column(db.String(255), nullable=False)
    phone = db.Column(db.String(255), nullable=True)
    address = db.Column(db.String(512), nullable=True)
    notes = db.Column(db.String(1000), nullable=True)
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)

class ItemType(db.Model):
    __tablename__ = "item_types"
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False, unique=True)   # e.g., Domain, SSL Certificate
    default_renewal_period = db.Column(db.Integer, nullable=False)  # days
    # Days before expiry, e.g. [30, 15, 7]. Older rows may hold the list as text.
    default_reminder_intervals = db.Column(db.JSON, nullable=False)
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)

class Renewable(db.Model):
    __tablename__ = "renewables"
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False)
    client_id = db.Column(db.Integer, db.ForeignKey("clients.id", ondelete="CASCADE"), nullable=False)
    type_id = db.Column(db.Integer, db.ForeignKey("item_types.id", ondelete="RESTRICT"), nullable=False)
    assigned_to_id = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    start_date = db.Column(db.DateTime, nullable=False)
    end_date = db.Column(db.DateTime, nullable=False)
    amount = db.Column(db.Integer, nullable=True)

    # Custom reminder intervals. If empty, uses the item type's defaults.
    reminder_intervals = db.Column(db.JSON, nullable=True)
    notes = db.Column(db.String(1000), nullable=True)
    status = db.Column(db.Enum(*RENEWABLE_STATUSES, name="renewable_status"), nullable=False, default="active")

    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    client = db.relationship("Client", backref=db.backref("renewables", passive_deletes=True))
    item_type = db.relationship("ItemType", backref="renewables")
    assigned_to = db.relationship("User", backref="assigned_renewables")

class ReminderLog(db.Model):
    __tablename__ = "reminder_logs"
    id = db.Column(db.Integer, primary_key=True)
    renewable_id = db.Column(db.Integer, db.ForeignKey("renewables.id", ondelete="CASCADE"), nullable=False)
    sent_to_id = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    sent_at = db.Column(db.DateTime, default=utcnow, nullable=False)
    days_before_expiry = db.Column(db.Integer, nullable=False)      # the matched interval
    email_content = db.Column(db.Text, nullable=False)
    email_sent_to = db.Column(db.String(255), nullable=False)       # address at send time

    renewable = db.relationship("Renewable", backref=db.backref("reminder_logs", passive_deletes=True))
    sent_to = db.relationship("User", backref="reminders_sent")

    def to_dict(self):
        return {
            "id": self.id,
            "renewableId": self.renewable_id,
            "sentToId": self.sent_to_id,
            "sentAt": self.sent_at.isoformat() if self.sent_at else None,
            "daysBeforeExpiry": self.days_before_expiry,
            "emailContent": self.email_content,
            "emailSentTo": self.email_sent_to,
        }

class ReminderDispatch(db.Model):
    """One row per (renewable, interval, day) a reminder was attempted for."""
    __tablename__ = "reminder_dispatches"
    __table_args__ = (
        db.UniqueConstraint("renewable_id", "days_before_expiry", "run_date", name="uq_reminder_dispatch"),
    )
    id = db.Column(db.Integer, primary_key=True)
    renewable_id = db.Column(db.Integer, db.ForeignKey("renewables.id", ondelete="CASCADE"), nullable=False)
    days_before_expiry = db.Column(db.Integer, nullable=False)
    run_date = db.Column(db.Date, nullable=False)
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)
