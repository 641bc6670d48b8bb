import telebot
import logging
from config import BOT_TOKEN, ADMIN_USER_IDS, ADMIN_ID
from database import db_manager
from handlers import result_handlers
from utils import job_scheduler

logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')
logger = logging.getLogger(__name__)

if not BOT_TOKEN:
    logger.error("BOT_TOKEN is not set in .env file.")
    raise SystemExit(1)

if ADMIN_ID is None:
    # بدون ADMIN_USER_IDS يبقى البحث متاحاً للطلاب فقط
    logger.warning("ADMIN_USER_IDS is not set correctly in .env file. Admin features will be disabled.")

# قاعدة البيانات يجب أن تكون جاهزة قبل تسجيل المعالجات
db_manager.init_db()

bot = telebot.TeleBot(BOT_TOKEN, parse_mode='HTML')

result_handlers.register_result_handlers(bot)

if ADMIN_USER_IDS:
    job_scheduler.init_scheduler(bot, ADMIN_ID)

logger.info("Bot is starting...")

if __name__ == '__main__':
    try:
        bot.infinity_polling()
    except Exception as e:
        logger.error(f"Bot failed: {e}")
