# -*- coding: utf-8 -*-

import io
import logging
from html import escape

from telebot import TeleBot
from telebot.apihelper import ApiTelegramException
from telebot.types import Message, CallbackQuery

from config import ADMIN_USER_IDS, MIN_SIMILARITY
from database import db_manager
from states import S, get_state, set_state, get_data, reset
from handlers.result_db import SqliteResultRepository
from handlers.result_errors import ResultsError, ValidationError, CONNECTION_MSG, describe_error
from handlers.result_format import MAX_TG_MSG_LEN, format_result_card, format_leaderboard, format_stats, chunk_text
from handlers.result_fuzzy_search import fuzzy_match
from handlers.result_import import load_results_csv
from handlers.result_keyboards import (
    back_btn, user_result_kb, admin_menu_kb, categories_kb,
    admin_del_results_kb, confirm_delete_kb
)
from handlers.result_rank import rank_all
from handlers.result_search import search, extract_terms
from handlers.result_stats import calculate_stats
from utils.rate_limit import check_rate_limit, is_message_valid

logger = logging.getLogger(__name__)

PART_HEADER_RESERVE = 32
MAX_SKIPPED_LISTED = 20

NOT_FOUND_MSG = (
    "😕 لم نعثر على نتيجة بهذا الاسم.\n\n"
    "• اكتب الاسم الأول والثاني على الأقل\n"
    "• يمكن البحث بجزء من الاسم (مثل: أحمد محمد)\n"
    "• البحث يتجاهل الهمزات والمسافات الزائدة"
)


def sort_categories(categories):
    return sorted(categories, key=lambda c: (not str(c).isdigit(), int(c) if str(c).isdigit() else 0, str(c)))


def format_announcements(items: list[dict]) -> str:
    if not items:
        return "📢 لا توجد إعلانات حالياً."
    blocks = [f"🗓️ {a['created_date'][:10]}\n{escape(a['text'])}" for a in items]
    return "📢 <b>آخر الإعلانات</b>\n\n" + "\n\n━━━━━━━━━━\n\n".join(blocks)


def register_result_handlers(bot: TeleBot, repository=None):
    repo = repository or SqliteResultRepository()
    repo.init_db()

    def is_admin(user_id: int) -> bool:
        return user_id in ADMIN_USER_IDS

    def reply(message_or_call, text: str, reply_markup=None):
        if isinstance(message_or_call, CallbackQuery):
            bot.edit_message_text(text, chat_id=message_or_call.message.chat.id,
                                  message_id=message_or_call.message.message_id,
                                  reply_markup=reply_markup)
        else:
            bot.send_message(message_or_call.chat.id, text, reply_markup=reply_markup)

    def go_home(message_or_call, text: str | None = None):
        uid = message_or_call.from_user.id

        if is_admin(uid):
            set_state(uid, S.ADMIN_MENU, {})
            reply(message_or_call, text or "👑 <b>لوحة الإدارة</b>\n\nاختر أحد الخيارات:", admin_menu_kb())
        else:
            set_state(uid, S.USER_WAIT_NAME, {})
            reply(message_or_call, text or "🔎 اكتب <b>اسمك</b> لمعرفة نتيجتك في المسابقة:")

    def send_long(chat_id: int, text: str):
        # room for the "(الجزء N من M)" header on follow-up parts
        parts = chunk_text(text, limit=MAX_TG_MSG_LEN - PART_HEADER_RESERVE)
        for idx, p in enumerate(parts, 1):
            prefix = "" if idx == 1 else f"(الجزء {idx} من {len(parts)})\n\n"
            try:
                bot.send_message(chat_id, prefix + p)
            except ApiTelegramException as e:
                logger.error("Failed to send part %d/%d to %s: %s", idx, len(parts), chat_id, e)

    def deny(call: CallbackQuery) -> bool:
        if not is_admin(call.from_user.id):
            bot.answer_callback_query(call.id, "⛔ ليس لديك صلاحية!")
            return True
        return False

    # ---------------------------
    # /start و /news
    # ---------------------------
    @bot.message_handler(commands=["start"])
    def start_cmd(message: Message):
        db_manager.save_user(message.from_user)
        if is_admin(message.from_user.id):
            go_home(message, "👋 أهلاً بك!\n\n👑 هذه لوحة إدارة نتائج المسابقة.")
        else:
            go_home(message, "👋 السلام عليكم!\n\n🏆 أهلاً بك في بوت <b>نتائج المسابقة</b>.\n🔎 اكتب اسمك (الاسم الأول والثاني على الأقل) لمعرفة درجتك وترتيبك.")

    @bot.message_handler(commands=["cancel"])
    def cancel_cmd(message: Message):
        reset(message.from_user.id)
        go_home(message, "👌 تم الإلغاء.")

    @bot.message_handler(commands=["news"])
    def news_cmd(message: Message):
        bot.send_message(message.chat.id, format_announcements(db_manager.get_latest_announcements()))

    # ---------------------------
    # أزرار المستخدم
    # ---------------------------
    @bot.callback_query_handler(func=lambda c: c.data == "BACK")
    def cb_back(call: CallbackQuery):
        go_home(call)

    @bot.callback_query_handler(func=lambda c: c.data == "U_AGAIN")
    def cb_user_again(call: CallbackQuery):
        bot.answer_callback_query(call.id)
        go_home(call)

    @bot.callback_query_handler(func=lambda c: c.data == "U_NEWS")
    def cb_user_news(call: CallbackQuery):
        bot.answer_callback_query(call.id)
        bot.send_message(call.message.chat.id, format_announcements(db_manager.get_latest_announcements()))

    # ---------------------------
    # لوحة الإدارة
    # ---------------------------
    @bot.callback_query_handler(func=lambda c: c.data == "A_ALL")
    def cb_admin_all(call: CallbackQuery):
        if deny(call):
            return
        try:
            categories = sort_categories(repo.get_categories())
        except ResultsError as e:
            logger.error("Error fetching categories: %s", e)
            bot.answer_callback_query(call.id, describe_error(e))
            return
        reply(call, "🏆 اختر الفئة لعرض الترتيب:", categories_kb(categories))

    @bot.callback_query_handler(func=lambda c: c.data.startswith("A_CAT:"))
    def cb_admin_category(call: CallbackQuery):
        if deny(call):
            return
        category = call.data.split(":", 1)[1]
        try:
            ranked = rank_all(repo.get_all_results())
        except ResultsError as e:
            logger.error("Error fetching results: %s", e)
            bot.answer_callback_query(call.id, describe_error(e))
            return

        if category != "*":
            ranked = [r for r in ranked if r.category == category]

        bot.answer_callback_query(call.id)
        send_long(call.message.chat.id, format_leaderboard(ranked) + f"\n\n📋 إجمالي النتائج: {len(ranked)} نتيجة")

    @bot.callback_query_handler(func=lambda c: c.data == "A_STATS")
    def cb_admin_stats(call: CallbackQuery):
        if deny(call):
            return
        try:
            stats = calculate_stats(repo.get_all_results())
        except ResultsError as e:
            logger.error("Error fetching results stats: %s", e)
            bot.answer_callback_query(call.id, describe_error(e))
            return

        searches, found = db_manager.get_search_totals()
        text = format_stats(stats)
        text += f"\n👤 مستخدمو البوت: {len(db_manager.get_all_users_id())}\n"
        text += f"🔎 عمليات البحث: {searches} (منها {found} ناجحة)\n"
        reply(call, text, back_btn("BACK"))

    @bot.callback_query_handler(func=lambda c: c.data == "A_IMPORT")
    def cb_admin_import(call: CallbackQuery):
        if deny(call):
            return
        set_state(call.from_user.id, S.ADMIN_IMPORT_WAIT_FILE, {})
        reply(call, "📥 أرسل ملف <b>CSV</b> يحتوي على الأعمدة:\n<code>no, name, category, grade</code>", back_btn("BACK"))

    @bot.callback_query_handler(func=lambda c: c.data == "A_DEL")
    def cb_admin_del(call: CallbackQuery):
        if deny(call):
            return
        set_state(call.from_user.id, S.ADMIN_DEL_WAIT_QUERY, {})
        reply(call, "🗑️ <b>حذف نتيجة</b>\n\n🔎 اكتب اسم الطالب للبحث عنه:", back_btn("BACK"))

    @bot.callback_query_handler(func=lambda c: c.data == "A_NEWS")
    def cb_admin_news(call: CallbackQuery):
        if deny(call):
            return
        set_state(call.from_user.id, S.ADMIN_NEWS_WAIT_TEXT, {})
        reply(call, "📢 اكتب نص <b>الإعلان</b>:", back_btn("BACK"))

    @bot.callback_query_handler(func=lambda c: c.data.startswith("A_DEL_PICK:"))
    def cb_admin_del_pick(call: CallbackQuery):
        if deny(call):
            return

        no = int(call.data.split(":")[1])
        try:
            record = repo.get_result_by_no(no)
        except ResultsError as e:
            logger.error("Error fetching result %s: %s", no, e)
            bot.answer_callback_query(call.id, describe_error(e))
            return

        if not record:
            bot.answer_callback_query(call.id, "❌ لم يتم العثور على النتيجة.")
            go_home(call, "❌ النتيجة غير موجودة.\n\n👑 لوحة الإدارة:")
            return

        set_state(call.from_user.id, S.ADMIN_DEL_CONFIRM, {"no": no})
        reply(call, f"⚠️ هل أنت متأكد من حذف هذه النتيجة؟\n\n📌 <b>{escape(record.name)}</b> ({record.identifier})",
              confirm_delete_kb(no))

    @bot.callback_query_handler(func=lambda c: c.data.startswith("A_DEL_YES:"))
    def cb_admin_del_yes(call: CallbackQuery):
        if deny(call):
            return

        no = int(call.data.split(":")[1])
        if get_data(call.from_user.id).get("no") != no:
            bot.answer_callback_query(call.id, "⚠️ انتهت صلاحية هذا الطلب.")
            go_home(call)
            return

        try:
            deleted = repo.delete_result(no)
        except ResultsError as e:
            logger.error("Error deleting result %s: %s", no, e)
            bot.answer_callback_query(call.id, describe_error(e))
            return

        if deleted:
            logger.info("Result %s deleted by %s", no, call.from_user.id)
            bot.answer_callback_query(call.id, "✅ تم الحذف!")
            go_home(call, "✅ تم حذف النتيجة بنجاح.\n\n👑 لوحة الإدارة:")
        else:
            bot.answer_callback_query(call.id, "❌ لم يتم الحذف.")
            go_home(call, "❌ لم يتم الحذف (ربما حُذفت سابقاً).\n\n👑 لوحة الإدارة:")

    @bot.callback_query_handler(func=lambda c: c.data == "A_DEL_NO")
    def cb_admin_del_no(call: CallbackQuery):
        if deny(call):
            return
        bot.answer_callback_query(call.id, "👌 تم الإلغاء.")
        go_home(call, "👌 تم إلغاء الحذف.\n\n👑 لوحة الإدارة:")

    # ---------------------------
    # البحث عن النتيجة
    # ---------------------------
    def handle_search(message: Message, txt: str):
        uid = message.from_user.id

        is_allowed, error_msg = check_rate_limit(uid)
        if not is_allowed:
            bot.send_message(message.chat.id, error_msg)
            return

        try:
            extract_terms(txt)
        except ValidationError as e:
            bot.send_message(message.chat.id, f"⚠️ {describe_error(e)}")
            return

        if not repo.connection_healthy():
            bot.send_message(message.chat.id, f"⚠️ {CONNECTION_MSG}")
            return

        bot.send_chat_action(message.chat.id, "typing")
        try:
            result = search(txt, repo)
        except ResultsError as e:
            logger.error("Search error: %s", e)
            bot.send_message(message.chat.id, f"⚠️ {describe_error(e)}")
            return

        db_manager.record_search(uid, result is not None)

        if result is None:
            bot.send_message(message.chat.id, NOT_FOUND_MSG, reply_markup=user_result_kb())
            return

        set_state(uid, S.USER_SHOW_RESULT, {"last_query": txt, "no": result.identifier})
        bot.send_message(message.chat.id, format_result_card(result), reply_markup=user_result_kb())

    @bot.message_handler(func=lambda m: True, content_types=["text"])
    def on_text(message: Message):
        if not is_message_valid(message):
            return

        uid = message.from_user.id
        st = get_state(uid)
        txt = message.text.strip()

        # ---------- الطالب: أي نص هو اسم للبحث ----------
        if not is_admin(uid):
            if st == S.IDLE:
                db_manager.save_user(message.from_user)
            handle_search(message, txt)
            return

        # ---------- الإدارة: حذف نتيجة (بحث) ----------
        if st == S.ADMIN_DEL_WAIT_QUERY:
            try:
                choices = repo.get_all_for_search()
            except ResultsError as e:
                logger.error("Error loading names for delete lookup: %s", e)
                bot.send_message(message.chat.id, f"⚠️ {describe_error(e)}", reply_markup=back_btn("BACK"))
                return

            results = fuzzy_match(txt, choices, min_score=MIN_SIMILARITY, limit=10)

            if not results:
                bot.send_message(
                    message.chat.id,
                    "😕 لم أجد اسماً مشابهاً.\n\n🔎 اكتب الاسم مرة أخرى:",
                    reply_markup=back_btn("BACK")
                )
                return

            set_state(uid, S.ADMIN_DEL_SHOW_RESULTS, {"last_query": txt})
            bot.send_message(
                message.chat.id,
                "🗑️ اختر النتيجة التي تريد حذفها 👇",
                reply_markup=admin_del_results_kb(results)
            )
            return

        # ---------- الإدارة: إضافة إعلان ----------
        if st == S.ADMIN_NEWS_WAIT_TEXT:
            announcement_id = db_manager.add_announcement(txt, created_by=uid)
            logger.info("Announcement %s added by %s", announcement_id, uid)
            go_home(message, "✅ تم حفظ الإعلان، وسيُنشر في القناة في الموعد القادم.\n\n👑 لوحة الإدارة:")
            return

        # المشرف يمكنه أيضاً البحث من لوحة الإدارة
        if st in (S.IDLE, S.ADMIN_MENU):
            handle_search(message, txt)
            return

        go_home(message, "🙂 للمتابعة استخدم القائمة:")

    # ---------------------------
    # استلام ملف النتائج
    # ---------------------------
    @bot.message_handler(content_types=["document"])
    def on_document(message: Message):
        uid = message.from_user.id

        if not is_admin(uid):
            bot.send_message(message.chat.id, "⛔ فقط المشرف يمكنه رفع ملف النتائج.")
            return

        if get_state(uid) != S.ADMIN_IMPORT_WAIT_FILE:
            bot.send_message(message.chat.id, "🙂 لسنا في مرحلة استلام الملف. ابدأ من لوحة الإدارة.", reply_markup=admin_menu_kb())
            return

        try:
            file_info = bot.get_file(message.document.file_id)
            content = bot.download_file(file_info.file_path)
            records, skipped = load_results_csv(io.BytesIO(content))
        except ValueError as e:
            logger.error("Invalid results file: %s", e)
            bot.send_message(message.chat.id, f"⚠️ الملف غير صالح:\n{escape(str(e))}", reply_markup=back_btn("BACK"))
            return

        try:
            count = repo.bulk_insert(records)
        except ResultsError as e:
            logger.error("Results import failed: %s", e)
            bot.send_message(message.chat.id, f"⚠️ {describe_error(e)}", reply_markup=admin_menu_kb())
            return

        logger.info("Imported %d result(s) by %s, skipped %d", count, uid, len(skipped))
        set_state(uid, S.ADMIN_MENU, {})
        text = f"✅ تم استيراد <b>{count}</b> نتيجة."
        if skipped:
            text += f"\n\n⚠️ تم تجاهل {len(skipped)} صف برقم طالب غير صالح:\n"
            text += "\n".join(escape(s) for s in skipped[:MAX_SKIPPED_LISTED])
        bot.send_message(message.chat.id, text, reply_markup=admin_menu_kb())

    return repo
