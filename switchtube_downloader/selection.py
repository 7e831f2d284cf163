from __future__ import annotations

import re
from typing import List, Set

SEPARATORS = re.compile(r"[,\s]+")
NUMBER = re.compile(r"[0-9]+")


class SelectionError(ValueError):
    pass


class InvalidRangeFormat(SelectionError):
    pass


class InvalidNumber(SelectionError):
    pass


class InvalidStartNumber(SelectionError):
    pass


class InvalidEndNumber(SelectionError):
    pass


class NumberOutOfRange(SelectionError):
    pass


class InvalidRange(SelectionError):
    pass


class NoValidSelections(SelectionError):
    pass


def _to_int(text: str) -> int | None:
    if NUMBER.fullmatch(text):
        return int(text)
    return None


def _parse_range(token: str, count: int) -> range:
    parts = token.split("-")
    if len(parts) != 2 or not all(parts):
        raise InvalidRangeFormat(f"invalid range format: {token}")
    start = _to_int(parts[0])
    if start is None:
        raise InvalidStartNumber(f"invalid start number: {parts[0]}")
    end = _to_int(parts[1])
    if end is None:
        raise InvalidEndNumber(f"invalid end number: {parts[1]}")
    if start < 1 or end > count or start > end:
        raise InvalidRange(f"invalid range: {start}-{end} (must be 1-{count})")
    return range(start - 1, end)


def _parse_single(token: str, count: int) -> int:
    num = _to_int(token)
    if num is None:
        raise InvalidNumber(f"invalid number: {token}")
    if num < 1 or num > count:
        raise NumberOutOfRange(f"number out of range: {num} (must be 1-{count})")
    return num - 1


def parse_selection(text: str, count: int) -> List[int]:
    """Parse ``"1-3,5 7"`` style input into sorted 0-based indices.

    Tokens are separated by commas and/or whitespace. Numbers are 1-based and
    ranges inclusive. Duplicates collapse silently; any invalid token aborts
    the whole parse.
    """
    seen: Set[int] = set()
    for token in SEPARATORS.split(text):
        if not token:
            continue
        if "-" in token:
            seen.update(_parse_range(token, count))
        else:
            seen.add(_parse_single(token, count))
    if not seen:
        raise NoValidSelections("no valid selections found")
    return sorted(seen)


__all__ = [
    "parse_selection",
    "SelectionError",
    "InvalidRangeFormat",
    "InvalidNumber",
    "InvalidStartNumber",
    "InvalidEndNumber",
    "NumberOutOfRange",
    "InvalidRange",
    "NoValidSelections",
]
