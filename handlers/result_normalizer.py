import re

_ARABIC_VARIANTS = str.maketrans({
    "أ": "ا",
    "إ": "ا",
    "آ": "ا",
    "ى": "ي",
    "ة": "ه",
    "ؤ": "ء",
    "ئ": "ء",
})

_WHITESPACE = re.compile(r"\s+")


def normalize_ar(text: str) -> str:
    if not text:
        return ""

    t = text.strip()
    t = _WHITESPACE.sub(" ", t)

    # توحيد الألف والياء والتاء المربوطة والهمزة
    t = t.translate(_ARABIC_VARIANTS)

    return t.lower()
