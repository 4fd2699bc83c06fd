"""Page range parsing helpers.

Ranges use the human 1-based syntax ``"1,3-5"``; every function here returns
zero-based page indices.
"""

from __future__ import annotations

from typing import Iterable, List, Sequence

from .exceptions import ValidationError


def _parse_int(text: str) -> int | None:
    try:
        return int(text.strip())
    except ValueError:
        return None


def _token_pages(token: str) -> List[int]:
    """Expand one token into 1-based page numbers without bounds checks."""

    if "-" in token:
        start_text, end_text = token.split("-", 1)
        start = _parse_int(start_text)
        end = _parse_int(end_text)
        if start is None or end is None:
            return []
        return list(range(start, end + 1))
    number = _parse_int(token)
    return [] if number is None else [number]


def parse_ranges(text: str | None, max_pages: int) -> List[int]:
    """Parse ``text`` into a sorted list of unique zero-based page indices.

    Tokens are separated by commas and are either a page number or an
    inclusive ``start-end`` range. Values outside ``1..max_pages`` are
    dropped, reversed ranges expand to nothing and unparsable tokens are
    ignored. Blank input yields an empty list.
    """

    if not text or not text.strip():
        return []

    pages: set[int] = set()
    for token in text.split(","):
        for number in _token_pages(token):
            pages.add(number - 1)
    return sorted(index for index in pages if 0 <= index < max_pages)


def split_range_groups(text: str | None, max_pages: int) -> List[List[int]]:
    """Return one list of zero-based indices per range token.

    Empty groups (out of bounds or malformed tokens) are omitted; order of
    tokens is preserved.
    """

    if not text or not text.strip():
        return []
    groups: List[List[int]] = []
    for token in text.split(","):
        indices = [number - 1 for number in _token_pages(token) if 1 <= number <= max_pages]
        if indices:
            groups.append(indices)
    return groups


def to_range_string(indices: Iterable[int]) -> str:
    """Collapse zero-based ``indices`` into compact 1-based range syntax."""

    ordered = sorted(set(indices))
    parts: List[str] = []
    start = previous = None
    for index in ordered:
        if start is None:
            start = previous = index
            continue
        if index == previous + 1:
            previous = index
            continue
        parts.append(_format_run(start, previous))
        start = previous = index
    if start is not None:
        parts.append(_format_run(start, previous))
    return ",".join(parts)


def _format_run(start: int, end: int) -> str:
    if start == end:
        return str(start + 1)
    return f"{start + 1}-{end + 1}"


def validate_page_order(order: Sequence[int], page_count: int) -> List[int]:
    """Validate a 1-based permutation and return it as zero-based indices.

    Raises:
        ValidationError: If ``order`` is not a permutation of ``1..page_count``.
    """

    try:
        numbers = [int(value) for value in order]
    except (TypeError, ValueError) as exc:
        raise ValidationError(f"Page order must contain integers: {order!r}") from exc
    if len(numbers) != page_count or sorted(numbers) != list(range(1, page_count + 1)):
        raise ValidationError(
            f"Page order must list every page from 1 to {page_count} exactly once"
        )
    return [number - 1 for number in numbers]


def validate_page_selection(order: Sequence[int], page_count: int) -> List[int]:
    """Validate an ordered subset of 1-based pages without repeats."""

    try:
        numbers = [int(value) for value in order]
    except (TypeError, ValueError) as exc:
        raise ValidationError(f"Page order must contain integers: {order!r}") from exc
    if not numbers:
        raise ValidationError("At least one page must be kept")
    if len(set(numbers)) != len(numbers):
        raise ValidationError("Page order must not repeat pages")
    out_of_range = [number for number in numbers if number < 1 or number > page_count]
    if out_of_range:
        raise ValidationError(f"Pages out of range: {out_of_range}")
    return [number - 1 for number in numbers]


__all__ = [
    "parse_ranges",
    "split_range_groups",
    "to_range_string",
    "validate_page_order",
    "validate_page_selection",
]
