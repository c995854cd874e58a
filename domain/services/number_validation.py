"""
Validation of chosen and drawn number sets.
"""

from collections.abc import Iterable

MIN_NUMBER = 0
MAX_NUMBER = 99


def validate_numbers(numbers: Iterable, count: int) -> list[int]:
    """
    Check that ``numbers`` holds exactly ``count`` unique integers in [0, 99].

    Returns the numbers sorted ascending (their canonical stored form).

    Raises:
        ValueError: if the set has the wrong size, duplicates, non-integers
            or out-of-range values
    """
    if numbers is None or isinstance(numbers, (str, bytes)):
        raise ValueError(f"Expected a list of {count} numbers.")

    values = list(numbers)
    if len(values) != count:
        raise ValueError(f"Expected exactly {count} numbers, got {len(values)}.")

    for value in values:
        # bool is an int subclass; True must not pass as 1
        if isinstance(value, bool) or not isinstance(value, int):
            raise ValueError(f"Invalid number: {value!r}.")
        if not MIN_NUMBER <= value <= MAX_NUMBER:
            raise ValueError(f"Number {value} is outside {MIN_NUMBER}-{MAX_NUMBER}.")

    if len(set(values)) != count:
        raise ValueError("Numbers must not repeat.")

    return sorted(values)


def parse_numbers(raw: str) -> list[int]:
    """
    Split user input like "3 14 15, 92 65 35" into integers.

    Raises:
        ValueError: if a token is not an integer
    """
    tokens = raw.replace(",", " ").replace(";", " ").split()
    try:
        return [int(token) for token in tokens]
    except ValueError as exc:
        raise ValueError(f"Could not read numbers from {raw!r}.") from exc


def count_hits(chosen: Iterable[int], winning: Iterable[int]) -> int:
    return len(set(chosen) & set(winning))
