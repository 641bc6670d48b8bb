from telebot.types import InlineKeyboardMarkup, InlineKeyboardButton

from handlers.result_format import category_name


def back_btn(cb_data="BACK"):
    kb = InlineKeyboardMarkup()
    kb.add(InlineKeyboardButton("🔙 رجوع", callback_data=cb_data))
    return kb


def user_result_kb():
    kb = InlineKeyboardMarkup()
    kb.add(InlineKeyboardButton("🔎 بحث عن اسم آخر", callback_data="U_AGAIN"))
    kb.add(InlineKeyboardButton("📢 الإعلانات", callback_data="U_NEWS"))
    return kb


def admin_menu_kb():
    kb = InlineKeyboardMarkup()
    kb.add(InlineKeyboardButton("🏆 جميع النتائج", callback_data="A_ALL"))
    kb.add(InlineKeyboardButton("📊 الإحصائيات", callback_data="A_STATS"))
    kb.add(InlineKeyboardButton("📥 استيراد ملف نتائج (CSV)", callback_data="A_IMPORT"))
    kb.add(InlineKeyboardButton("🗑️ حذف نتيجة", callback_data="A_DEL"))
    kb.add(InlineKeyboardButton("📢 إضافة إعلان", callback_data="A_NEWS"))
    return kb


def categories_kb(categories: list[str]):
    kb = InlineKeyboardMarkup(row_width=2)
    kb.add(InlineKeyboardButton("📋 كل الفئات", callback_data="A_CAT:*"))
    buttons = [InlineKeyboardButton(category_name(c), callback_data=f"A_CAT:{c}") for c in categories]
    for i in range(0, len(buttons), 2):
        kb.row(*buttons[i:i + 2])
    kb.add(InlineKeyboardButton("🔙 رجوع", callback_data="BACK"))
    return kb


def admin_del_results_kb(results: list[dict]):
    kb = InlineKeyboardMarkup()
    for r in results:
        kb.add(InlineKeyboardButton(f"🗑️ {r['name']} ({r['score']}٪)", callback_data=f"A_DEL_PICK:{r['no']}"))
    kb.add(InlineKeyboardButton("🔙 رجوع", callback_data="BACK"))
    return kb


def confirm_delete_kb(no):
    kb = InlineKeyboardMarkup()
    kb.add(
        InlineKeyboardButton("✅ نعم، احذف", callback_data=f"A_DEL_YES:{no}"),
        InlineKeyboardButton("❌ لا", callback_data="A_DEL_NO"),
    )
    kb.add(InlineKeyboardButton("🔙 رجوع", callback_data="BACK"))
    return kb
