from html import escape
from typing import Iterable

from config import PASS_GRADE
from handlers.result_models import MatchResult, RankedResult, category_key
from handlers.result_stats import ContestStats

MAX_TG_MSG_LEN = 4096  # محدودية طول رسالة تلغرام

CATEGORY_NAMES = {
    "3": "فئة ثلاثة أجزاء",
    "5": "فئة خمسة أجزاء",
    "8": "فئة ثمانية أجزاء",
    "10": "فئة عشرة أجزاء",
    "15": "فئة خمسة عشر جزءا",
    "20": "فئة عشرون جزءا",
    "25": "فئة خمسة وعشرون جزءا",
    "30": "فئة ثلاثون جزءا",
}

RANK_ICONS = {1: "🥇", 2: "🥈", 3: "🥉"}


def category_name(category) -> str:
    key = category_key(category)
    return CATEGORY_NAMES.get(key, f"فئة {key}")


def format_grade(grade) -> str:
    if grade is None:
        return "0"
    grade = float(grade)
    return str(int(grade)) if grade.is_integer() else f"{grade:g}"


def rank_text(rank: int, category) -> str:
    name = category_name(category)
    if rank == 1:
        return f"المركز الأول في {name}"
    if rank == 2:
        return f"المركز الثاني في {name}"
    if rank == 3:
        return f"المركز الثالث في {name}"
    if rank <= 10:
        return f"المركز {rank} في {name}"
    return f"الترتيب {rank} في {name}"


def success_message(grade) -> tuple[str, str]:
    if (grade or 0) >= PASS_GRADE:
        return ("مبروك! لقد نجحت بتفوق في المسابقة",
                "أداء ممتاز ومشرف، استمر في حفظ كتاب الله")
    return ("لا تيأس، المحاولة القادمة ستكون أفضل بإذن الله",
            "كل خطوة في طريق حفظ القرآن لها أجر عظيم، واصل المحاولة")


def format_result_card(result: MatchResult) -> str:
    icon = RANK_ICONS.get(result.rank, "🏅")
    headline, sub = success_message(result.grade)

    lines = [
        f"{icon} <b>{rank_text(result.rank, result.category)}</b>",
        "",
        f"👤 الاسم: <b>{escape(result.name)}</b>",
        f"🆔 رقم الطالب: {result.identifier}",
        f"📚 الفئة: {category_name(result.category)}",
        f"📝 الدرجة: <b>{format_grade(result.grade)}</b>",
        "",
        f"✨ {headline}",
        sub,
    ]
    if result.rank_degraded:
        lines += ["", "⚠️ تعذر حساب الترتيب بدقة حالياً، حاول لاحقاً."]
    return "\n".join(lines)


def format_leaderboard(ranked: Iterable[RankedResult]) -> str:
    blocks: list[str] = []
    current = None
    for r in ranked:
        if r.category != current:
            current = r.category
            blocks.append(f"\n📚 <b>{category_name(current)}</b>")
        icon = RANK_ICONS.get(r.rank, f"{r.rank}.")
        blocks.append(f"{icon} {escape(r.name)} : {format_grade(r.grade)}")

    if not blocks:
        return "لا توجد نتائج متاحة حالياً."
    return "🏆 <b>النتائج حسب الفئات</b>\n" + "\n".join(blocks)


def format_stats(stats: ContestStats) -> str:
    text = "📊 <b>إحصائيات المسابقة</b>:\n"
    text += f"👥 عدد الطلاب: {stats.total_students}\n"
    text += f"📈 متوسط الدرجات: {stats.average_grade}\n"
    text += f"🏆 أعلى درجة: {format_grade(stats.top_grade)}\n"
    text += f"📚 عدد الفئات: {len(stats.categories)}\n"
    if stats.categories_count:
        text += "\n"
        for category, count in stats.categories_count.items():
            text += f"• {category_name(category)}: {count}\n"
    return text


def chunk_text(full_text: str, limit: int = MAX_TG_MSG_LEN) -> list[str]:
    """
    Split a long message into parts under Telegram's limit, cutting on line
    breaks where possible.
    """
    if len(full_text) <= limit:
        return [full_text]

    parts = []
    start = 0
    while start < len(full_text):
        end = min(start + limit, len(full_text))
        if end < len(full_text):
            nl_idx = full_text.rfind("\n", start, end)
            if nl_idx > start:
                end = nl_idx + 1
        parts.append(full_text[start:end])
        start = end
    return parts
