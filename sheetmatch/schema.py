from typing import Any, Dict, List, Tuple

from .config import SCORERS

MIN_TITLE_LENGTH = 3


def _is_non_empty_str(v: Any) -> bool:
    return isinstance(v, str) and v.strip() != ""


def validate_match_request(data: Dict[str, Any]) -> List[str]:
    """
    Returns a list of validation error messages. Empty list means valid.
    """
    errors: List[str] = []

    if not isinstance(data, dict):
        return ["Request must be a JSON object"]

    if "title" not in data:
        errors.append("Missing required field: title")
    elif not _is_non_empty_str(data["title"]):
        errors.append("Field 'title' must be a non-empty string")

    if "candidates" not in data:
        errors.append("Missing required field: candidates")
    elif not isinstance(data["candidates"], list):
        errors.append("Field 'candidates' must be a list of strings")
    else:
        for i, c in enumerate(data["candidates"]):
            if not isinstance(c, str):
                errors.append(f"Candidate at index {i} must be a string")

    if "threshold" in data:
        t = data["threshold"]
        # bool is an int subclass
        if isinstance(t, bool) or not isinstance(t, int) or not 0 <= t <= 100:
            errors.append("Field 'threshold' must be an integer between 0 and 100")

    if "scorer" in data and data["scorer"] not in SCORERS:
        errors.append(f"Field 'scorer' must be one of: {', '.join(SCORERS)}")

    return errors


def validate_match_request_strict(data: Dict[str, Any]) -> Tuple[List[str], List[str]]:
    """
    Validate a request and collect non-fatal warnings.

    Returns:
        Tuple of (errors, warnings)
    """
    errors = validate_match_request(data)
    warnings: List[str] = []
    if errors:
        return errors, warnings

    title = data["title"].strip()
    if len(title) < MIN_TITLE_LENGTH:
        warnings.append(f"Title is shorter than {MIN_TITLE_LENGTH} characters")

    candidates = data["candidates"]
    if not candidates:
        warnings.append("Candidate list is empty")
    elif len(set(candidates)) != len(candidates):
        warnings.append("Candidate list contains duplicates")

    return errors, warnings
