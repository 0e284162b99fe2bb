# Copyright (c) 2025 Efstratios Goudelis
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU General Public License for more details.
#
# You should have received a copy of the GNU General Public License
# along with this program. If not, see <https://www.gnu.org/licenses/>.


"""
Windowed reads over log sequences.

Windows are half-open `[start, end)`. A missing `start` means 0 and a
missing `end` means the sequence length. `end` is clamped to the length,
a `start` at or beyond the length yields nothing, and `start >= end`
yields nothing as well.
"""

from typing import List, Optional, Sequence, TypeVar, Union

from common.exceptions import RangeParseError

T = TypeVar("T")

Bound = Union[int, str, None]


def parse_bound(value: Bound, name: str) -> Optional[int]:
    """
    Parse one window bound.

    Accepts None (bound omitted), a non-negative int, or a string of decimal
    digits. Anything else raises RangeParseError.
    """
    if value is None:
        return None

    if isinstance(value, bool):
        raise RangeParseError(name, value)

    if isinstance(value, int):
        if value < 0:
            raise RangeParseError(name, value)
        return value

    if isinstance(value, str):
        text = value.strip()
        if text.isascii() and text.isdigit():
            return int(text)

    raise RangeParseError(name, value)


def slice_window(entries: Sequence[T], start: Bound = None, end: Bound = None) -> List[T]:
    """Return a copy of `entries[start:end]` with the clamping rules above."""
    first = parse_bound(start, "start")
    last = parse_bound(end, "end")

    length = len(entries)
    if first is None:
        first = 0
    if last is None or last > length:
        last = length

    if first >= length or first >= last:
        return []

    return list(entries[first:last])
