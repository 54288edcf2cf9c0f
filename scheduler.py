from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger
from config import Config

JOB_ID = "daily_renewal_reminders"

def init_scheduler(app, engine, start=True):
    def run_daily_reminders():
        with app.app_context():
            engine.run_scheduled()

    tz = app.config.get("APP_TZ", Config.APP_TZ)
    hour = app.config.get("DAILY_JOB_HOUR", Config.DAILY_JOB_HOUR)
    minute = app.config.get("DAILY_JOB_MINUTE", Config.DAILY_JOB_MINUTE)

    scheduler = BackgroundScheduler(timezone=tz)
    trigger = CronTrigger(hour=hour, minute=minute, timezone=tz)
    scheduler.add_job(
        run_daily_reminders,
        trigger,
        id=JOB_ID,
        replace_existing=True,
        max_instances=1,  # never overlap with itself
        coalesce=True,
    )
    if start:
        scheduler.start()
        app.logger.info("Scheduler is running (daily at %02d:%02d %s).", hour, minute, tz)
    return scheduler
