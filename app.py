import logging
import sys
from flask import Flask, jsonify, request
from config import Config
from models import db
from mailer import Notifier
from repository import Repository
from reminders import ReminderEngine, SweepError, SweepInProgressError
from scheduler import init_scheduler

def create_app(config_object=Config, start_scheduler=None):
    app = Flask(__name__)
    app.config.from_object(config_object)

    logging.basicConfig(
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        level=getattr(logging, app.config.get("LOG_LEVEL", "INFO")),
        stream=sys.stdout,
    )

    db.init_app(app)
    with app.app_context():
        db.create_all()

    engine = ReminderEngine(
        Repository(),
        Notifier.from_config(config_object),
        timezone=app.config["APP_TZ"],
        idempotent=app.config.get("REMINDER_IDEMPOTENCY", True),
    )
    app.extensions["reminder_engine"] = engine

    if start_scheduler is None:
        start_scheduler = app.config.get("SCHEDULER_ENABLED", True)
    if start_scheduler:
        app.extensions["reminder_scheduler"] = init_scheduler(app, engine)

    register_routes(app)
    return app

def register_routes(app: Flask):
    def engine() -> ReminderEngine:
        return app.extensions["reminder_engine"]

    @app.route("/api/admin/trigger-reminders", methods=["POST"])
    def trigger_reminders():
        try:
            summary = engine().trigger_manually()
        except SweepInProgressError as e:
            return jsonify({"message": str(e)}), 409
        except SweepError as e:
            app.logger.error("Manual reminder trigger failed: %s", e)
            return jsonify({"message": "Failed to trigger reminders"}), 500
        return jsonify({
            "message": "Reminders triggered successfully",
            "summary": summary.to_dict(),
        })

    @app.route("/api/reminder-logs")
    def reminder_logs():
        renewable_id = request.args.get("renewableId", type=int)
        logs = engine().repository.get_reminder_logs(renewable_id)
        return jsonify([log.to_dict() for log in logs])

    @app.route("/api/reminder-logs/recent")
    def recent_reminder_logs():
        logs = engine().repository.get_recent_reminder_logs()
        return jsonify([log.to_dict() for log in logs])

if __name__ == "__main__":
    app = create_app()
    app.run(debug=False, host="0.0.0.0", port=5000)
