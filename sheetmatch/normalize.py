import re
from typing import List

_MP4_SUFFIX_RE = re.compile(r"\.mp4$", re.IGNORECASE)
_BRACKETS_RE = re.compile(r"[{}\[\]()]")
_Q_NUMBER_RE = re.compile(r"q\s*\d+", re.IGNORECASE)


def normalize_text(s: str) -> str:
    return " ".join(s.strip().lower().split())


def normalize_title(title: str) -> str:
    """Clean a media title for comparison against sheet row names."""
    cleaned = _MP4_SUFFIX_RE.sub("", title.strip())
    cleaned = _BRACKETS_RE.sub("", cleaned)
    cleaned = cleaned.replace("--", "-")
    return normalize_text(cleaned)


def extract_q_numbers(title: str) -> List[str]:
    return ["".join(m.lower().split()) for m in _Q_NUMBER_RE.findall(title)]


def core_title(title: str) -> str:
    # Question markers vary between uploads of the same lesson
    return normalize_text(_Q_NUMBER_RE.sub("", normalize_title(title)))
