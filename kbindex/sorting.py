"""Natural ordering for version labels and document paths."""

import re

_PART_PATTERN = re.compile(r"(\d+)|(\D+)")


def natural_sort_key(value: str) -> tuple:
    """Sort key treating embedded digit runs as integers.

    ["file1", "file10", "file2"] sorts as ["file1", "file2", "file10"].
    """
    key = []
    for digits, text in _PART_PATTERN.findall(value):
        if digits:
            key.append((0, int(digits), ""))
        else:
            key.append((1, 0, text.casefold()))
    return tuple(key)
