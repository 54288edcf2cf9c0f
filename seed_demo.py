from datetime import datetime, timedelta
from app import create_app
from models import db, User, Client, ItemType, Renewable

app = create_app(start_scheduler=False)

with app.app_context():
    db.drop_all()
    db.create_all()

    today = datetime.combine(datetime.now().date(), datetime.min.time())

    admin = User(username="admin", full_name="Office Admin", email="admin@example.com", role="admin")
    staff = User(username="rina", full_name="Rina Staff", email="rina@example.com", role="staff")
    acme = Client(name="Acme Corp", email="it@acme.example.com")
    globex = Client(name="Globex", email="ops@globex.example.com", phone="+1 555 0100")
    domain = ItemType(name="Domain", default_renewal_period=365, default_reminder_intervals=[30, 15, 7, 0])
    ssl = ItemType(name="SSL Certificate", default_renewal_period=90, default_reminder_intervals=[14, 7, 1])
    db.session.add_all([admin, staff, acme, globex, domain, ssl])
    db.session.flush()

    demo = [
        {
            "name": "acme.example.com",
            "client_id": acme.id,
            "type_id": domain.id,
            "assigned_to_id": staff.id,
            "start_date": today - timedelta(days=358),
            "end_date": today + timedelta(days=7),
            "amount": 15,
            "reminder_intervals": None,
            "notes": "Auto-renew is off at the registrar.",
        },
        {
            "name": "*.globex.example.com",
            "client_id": globex.id,
            "type_id": ssl.id,
            "assigned_to_id": admin.id,
            "start_date": today - timedelta(days=75),
            "end_date": today + timedelta(days=15),
            "amount": 120,
            "reminder_intervals": [30, 15, 7],
        },
        {
            "name": "globex.example.net",
            "client_id": globex.id,
            "type_id": domain.id,
            "assigned_to_id": None,
            "start_date": today - timedelta(days=300),
            "end_date": today + timedelta(days=65),
        },
    ]

    for d in demo:
        db.session.add(Renewable(**d))
    db.session.commit()
    print("Seeded demo data.")
