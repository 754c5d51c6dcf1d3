"""
String similarity engine for fuzzy title and name matching.

Combines Levenshtein edit distance and Jaro-Winkler similarity into a
0-100 score used to reconcile video titles against spreadsheet row names.
Every function here is pure and deterministic.
"""

import math
import re
from typing import List

# Hard ceiling on input size; edit_distance allocates a (|a|+1) x (|b|+1) table.
MAX_INPUT_LENGTH = 1000

WINKLER_PREFIX_LIMIT = 4
WINKLER_SCALING = 0.1

JARO_WINKLER_WEIGHT = 0.6
LEVENSHTEIN_WEIGHT = 0.4
CONTAINS_BONUS = 0.1

PARTIAL_MATCH_POINTS = 10
PARTIAL_MATCH_CAP = 20
MIN_TOKEN_LENGTH = 3

_WHITESPACE_RE = re.compile(r"\s+")
_NAME_PREFIX_RE = re.compile(r"^(el|al|dr)")
_TOKEN_SPLIT_RE = re.compile(r"[\s.]+")


class InputTooLongError(ValueError):
    """Raised when an input exceeds MAX_INPUT_LENGTH characters."""
    pass


def _check_text(value, arg_name: str) -> None:
    if not isinstance(value, str):
        raise TypeError(
            f"{arg_name} must be a str, got {type(value).__name__}"
        )
    if len(value) > MAX_INPUT_LENGTH:
        raise InputTooLongError(
            f"{arg_name} is {len(value)} characters long "
            f"(maximum {MAX_INPUT_LENGTH})"
        )


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def edit_distance(a: str, b: str) -> int:
    """
    Levenshtein distance between two strings.

    Args:
        a: Source string
        b: Target string

    Returns:
        Minimum number of single-character insertions, deletions and
        substitutions turning a into b

    Raises:
        TypeError: If either argument is not a str
        InputTooLongError: If either argument exceeds MAX_INPUT_LENGTH
    """
    _check_text(a, "a")
    _check_text(b, "b")

    len_a = len(a)
    len_b = len(b)

    table = [[0] * (len_b + 1) for _ in range(len_a + 1)]
    for j in range(len_b + 1):
        table[0][j] = j
    for i in range(len_a + 1):
        table[i][0] = i

    for i in range(1, len_a + 1):
        for j in range(1, len_b + 1):
            cost = 0 if a[i - 1] == b[j - 1] else 1
            table[i][j] = min(
                table[i - 1][j] + 1,         # deletion
                table[i][j - 1] + 1,         # insertion
                table[i - 1][j - 1] + cost,  # substitution
            )

    return table[len_a][len_b]


def common_prefix_length(a: str, b: str) -> int:
    """Length of the longest common leading substring of a and b."""
    length = 0
    for ch_a, ch_b in zip(a, b):
        if ch_a != ch_b:
            break
        length += 1
    return length


def jaro_winkler(a: str, b: str) -> float:
    """
    Jaro-Winkler similarity between two strings.

    Args:
        a: First string
        b: Second string

    Returns:
        Similarity in [0, 1]; 0 if either string is empty, 1 if identical

    Raises:
        TypeError: If either argument is not a str
        InputTooLongError: If either argument exceeds MAX_INPUT_LENGTH
    """
    _check_text(a, "a")
    _check_text(b, "b")

    if not a or not b:
        return 0.0
    if a == b:
        return 1.0

    match_window = max(len(a), len(b)) // 2 - 1

    matched_a = [False] * len(a)
    matched_b = [False] * len(b)
    matches = 0

    for i, ch in enumerate(a):
        start = max(0, i - match_window)
        end = min(i + match_window + 1, len(b))
        for j in range(start, end):
            if not matched_b[j] and ch == b[j]:
                matched_a[i] = True
                matched_b[j] = True
                matches += 1
                break

    if matches == 0:
        return 0.0

    # Walk both match sequences in order; each disagreement is half a transposition
    transpositions = 0
    k = 0
    for i, ch in enumerate(a):
        if not matched_a[i]:
            continue
        while not matched_b[k]:
            k += 1
        if ch != b[k]:
            transpositions += 1
        k += 1

    m = float(matches)
    t = transpositions / 2
    jaro = (m / len(a) + m / len(b) + (m - t) / m) / 3

    prefix = min(WINKLER_PREFIX_LIMIT, common_prefix_length(a, b))
    return jaro + prefix * WINKLER_SCALING * (1 - jaro)


def similarity(str1: str, str2: str) -> int:
    """
    Combined similarity score between two strings.

    Both strings are lower-cased and trimmed; punctuation and internal
    whitespace are kept. The score blends Jaro-Winkler (60%) with
    normalized Levenshtein similarity (40%) and adds 10 points when one
    string contains the other.

    Args:
        str1: First string
        str2: Second string

    Returns:
        Integer score in [0, 100]

    Raises:
        TypeError: If either argument is not a str
        InputTooLongError: If either argument exceeds MAX_INPUT_LENGTH
    """
    _check_text(str1, "str1")
    _check_text(str2, "str2")

    norm1 = str1.lower().strip()
    norm2 = str2.lower().strip()

    if norm1 == norm2:
        return 100
    if not norm1 or not norm2:
        return 0

    jw = jaro_winkler(norm1, norm2)
    lev = 1 - edit_distance(norm1, norm2) / max(len(norm1), len(norm2))
    contains_bonus = CONTAINS_BONUS if (norm1 in norm2 or norm2 in norm1) else 0.0

    combined = JARO_WINKLER_WEIGHT * jw + LEVENSHTEIN_WEIGHT * lev + contains_bonus

    # The containment bonus can push near-identical strings past 1.0
    return min(_round_half_up(combined * 100), 100)


def normalize_name(name: str) -> str:
    """
    Normalize a person name or title for name matching.

    Lower-cases, removes all whitespace, drops every character that is not
    a Unicode letter or digit, then strips one leading "el", "al" or "dr".
    """
    if not isinstance(name, str):
        raise TypeError(f"name must be a str, got {type(name).__name__}")

    lowered = _WHITESPACE_RE.sub("", name.lower())
    letters_and_digits = "".join(ch for ch in lowered if ch.isalnum())
    return _NAME_PREFIX_RE.sub("", letters_and_digits, count=1)


def _name_tokens(normalized: str) -> List[str]:
    return [part for part in _TOKEN_SPLIT_RE.split(normalized) if part]


def name_similarity(name1: str, name2: str) -> int:
    """
    Similarity tuned for person names and media titles.

    Args:
        name1: First name
        name2: Second name

    Returns:
        Integer score in [0, 100]

    Raises:
        TypeError: If either argument is not a str
        InputTooLongError: If either argument exceeds MAX_INPUT_LENGTH
    """
    _check_text(name1, "name1")
    _check_text(name2, "name2")

    norm1 = normalize_name(name1)
    norm2 = normalize_name(name2)

    if norm1 == norm2:
        return 100

    base = similarity(norm1, norm2)

    # normalize_name already removed separators, so this rarely splits
    bonus = 0
    tokens2 = [t for t in _name_tokens(norm2) if len(t) >= MIN_TOKEN_LENGTH]
    for token1 in _name_tokens(norm1):
        if len(token1) < MIN_TOKEN_LENGTH:
            continue
        if token1 in tokens2:
            bonus += PARTIAL_MATCH_POINTS

    bonus = min(bonus, PARTIAL_MATCH_CAP)
    return min(base + bonus, 100)
