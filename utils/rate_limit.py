import logging
from time import time
from datetime import datetime
from pytz import timezone
import config

logger = logging.getLogger(__name__)

# Bot Start Time
bot_start_time = datetime.now(timezone(config.TIMEZONE)).timestamp()

message_tracker = {}

WINDOW_SECONDS = 1
MAX_PER_WINDOW = 2
BLOCK_SECONDS = 30


def is_message_valid(message) -> bool:
    # تجاهل الرسائل التي وصلت قبل تشغيل البوت
    return message.date >= bot_start_time


def check_rate_limit(user_id: int, now: float | None = None) -> tuple[bool, str]:
    current_time = time() if now is None else now

    if user_id in config.ADMIN_USER_IDS:
        return True, ""

    tracker = message_tracker.setdefault(
        user_id, {'count': 0, 'last_time': current_time, 'temp_block_until': 0}
    )

    if current_time < tracker['temp_block_until']:
        remaining = int(tracker['temp_block_until'] - current_time)
        return False, f"لقد أرسلت عدداً كبيراً من الطلبات، يمكنك البحث مرة أخرى بعد {remaining} ثانية 😕"

    if current_time - tracker['last_time'] > WINDOW_SECONDS:
        tracker['count'] = 0
        tracker['last_time'] = current_time

    tracker['count'] += 1

    if tracker['count'] > MAX_PER_WINDOW:
        tracker['temp_block_until'] = current_time + BLOCK_SECONDS
        logger.info("User %s blocked for %s seconds", user_id, BLOCK_SECONDS)
        return False, f"لقد أرسلت عدداً كبيراً من الطلبات! يمكنك البحث مرة أخرى بعد {BLOCK_SECONDS} ثانية 😕"

    return True, ""
