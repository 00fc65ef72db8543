from __future__ import annotations

import re
from dataclasses import dataclass

_NUMBERED_LINE_RE = re.compile(r"^(\d+)\.\s(.+)")


def parse_numbered_range(raw_output: str, range_min: int, range_max: int) -> list[str]:
    """Items whose leading ``N. `` number lies in ``[range_min, range_max]``, in line order."""
    items: list[str] = []
    for line in (raw_output or "").splitlines():
        match = _NUMBERED_LINE_RE.match(line.strip())
        if not match:
            continue
        number = int(match.group(1))
        if range_min <= number <= range_max:
            item = match.group(2).strip()
            if item:
                items.append(item)
    return items


@dataclass(frozen=True)
class ParsedPair:
    first: list[str]
    second: list[str]

    def accepted(self, min_items: int) -> bool:
        return len(self.first) >= min_items or len(self.second) >= min_items


def parse_pair(raw_output: str, first_range: tuple[int, int], second_range: tuple[int, int]) -> ParsedPair:
    return ParsedPair(
        first=parse_numbered_range(raw_output, *first_range),
        second=parse_numbered_range(raw_output, *second_range),
    )


def pad_to(items: list[str], count: int, filler: str) -> list[str]:
    padded = list(items[:count])
    while len(padded) < count:
        padded.append(filler)
    return padded
