"""Japanese text helpers: script density and full-width digit folding."""

import re

# Hiragana, Katakana, CJK Extension A, CJK Unified Ideographs, CJK Compatibility Ideographs
JAPANESE_CHAR_PATTERN = re.compile(
    "[\u3040-\u309f\u30a0-\u30ff\u3400-\u4dbf\u4e00-\u9fff\uf900-\ufaff]"
)

FULL_WIDTH_DIGIT_PATTERN = re.compile("[０-９]")

FULL_WIDTH_OFFSET = 0xFEE0


def count_japanese_chars(text: str) -> int:
    """Count Hiragana, Katakana and CJK ideograph code points in ``text``."""
    if not text:
        return 0
    return len(JAPANESE_CHAR_PATTERN.findall(text))


def to_half_width(text: str) -> str:
    """Convert full-width digits (０-９) to ASCII digits."""
    return FULL_WIDTH_DIGIT_PATTERN.sub(lambda m: chr(ord(m.group()) - FULL_WIDTH_OFFSET), text)


def strip_thousands_separators(digits: str) -> str:
    return digits.replace(",", "").replace("，", "")


def first_line(text: str) -> str:
    """Return the first non-blank line of ``text``, stripped, or an empty string."""
    for line in text.splitlines():
        if line.strip():
            return line.strip()
    return ""
