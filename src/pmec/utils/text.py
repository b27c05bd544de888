"""
Pure text transforms over definition and matcher strings.
No regular expressions: every transform is literal.
"""

from typing import Iterable, List

from ..config import DEFINITION_COMMENT, MATCHER_AND, MATCHER_EQUALITY


def split_and_trim(text: str, separator: str) -> List[str]:
    """
    Split text on a separator and strip whitespace from each piece.

    Args:
        text: Text to split
        separator: Literal separator

    Returns:
        List of trimmed pieces (empty pieces are kept)
    """
    return [piece.strip() for piece in text.split(separator)]


def remove_comments(text: str) -> str:
    """
    Drop everything from the first comment marker onward.

    Args:
        text: Definition text

    Returns:
        Text without its trailing comment, whitespace trimmed
    """
    pos = text.find(DEFINITION_COMMENT)
    if pos == -1:
        return text.strip()
    return text[:pos].strip()


def remove_first(text: str, pattern: str) -> str:
    """Remove the first literal occurrence of pattern from text."""
    return text.replace(pattern, "", 1)


def strip_equalities(matcher: str, fields: Iterable[str]) -> str:
    """
    Remove one `r.<field> == p.<field>` comparison per field.

    Args:
        matcher: Matcher expression text
        fields: Raw request field names (no key prefix)

    Returns:
        Whatever text remains after the removals
    """
    for field in fields:
        matcher = remove_first(matcher, MATCHER_EQUALITY.format(field=field))
    return matcher


def conjunction_skeleton(field_count: int) -> str:
    """Separator-only text left by a pure equality conjunction."""
    if field_count < 1:
        return ""
    return MATCHER_AND * (field_count - 1)


def remove_duplicates(values: Iterable[str]) -> List[str]:
    """
    Deduplicate values, keeping first-seen order.

    Args:
        values: Values to deduplicate

    Returns:
        New list without repeats
    """
    seen = set()
    result = []
    for value in values:
        if value not in seen:
            seen.add(value)
            result.append(value)
    return result
