import logging
from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger
from datetime import datetime
from pytz import timezone
from config import DEFAULT_ANNOUNCE_HOURS, CHANNEL_USERNAME, TIMEZONE
from database import db_manager
from telebot import TeleBot

logger = logging.getLogger(__name__)

scheduler = BackgroundScheduler(timezone=timezone(TIMEZONE))

ANNOUNCE_HEADER = "📢 <b>إعلان</b>"
SEPARATOR = "\n\n✎﹏﹏﹏﹏﹏﹏﹏﹏﹏﹏﹏﹏﹏﹏\n\n"


def init_scheduler(bot: TeleBot, admin_id: int):
    if not CHANNEL_USERNAME:
        logger.warning("CHANNEL_USERNAME is not set, scheduled announcements are disabled.")
        return

    if not DEFAULT_ANNOUNCE_HOURS:
        logger.warning("DEFAULT_ANNOUNCE_HOURS is empty, scheduled announcements are disabled.")
        return

    scheduler.add_job(
        publish_announcements,
        CronTrigger(minute=0, hour=','.join(map(str, DEFAULT_ANNOUNCE_HOURS))),
        args=[bot, admin_id],
        id="announcements_job",
        replace_existing=True
    )
    scheduler.start()


def build_announcement_message(texts):
    return ANNOUNCE_HEADER + "\n\n" + SEPARATOR.join(texts)


def publish_announcements(bot: TeleBot, admin_id: int):
    current_hour = datetime.now(timezone(TIMEZONE)).hour
    pending = db_manager.get_pending_announcements()

    if not pending:
        logger.info("No pending announcements at %s:00", current_hour)
        return

    final_message = build_announcement_message([a['text'] for a in pending])

    try:
        bot.send_message(CHANNEL_USERNAME, final_message, parse_mode='HTML')
    except Exception as e:
        logger.error("Failed to publish announcements: %s", e)
        if admin_id:
            bot.send_message(admin_id, f"⚠️ خطأ في نشر الإعلانات في القناة: {e}")
        return

    db_manager.mark_announcements_sent([a['id'] for a in pending])
    logger.info("Published %d announcement(s) at %s:00", len(pending), current_hour)

    if admin_id:
        bot.send_message(admin_id, f"✅ تم نشر <b>{len(pending)}</b> إعلان في القناة الساعة <b>{current_hour}:00</b>.")
