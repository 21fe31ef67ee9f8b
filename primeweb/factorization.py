"""Prime factorization of user-supplied entries."""

from __future__ import annotations

import re
from itertools import count
from typing import Any, Iterator

_INT64_MIN = -(2**63)
_INT64_MAX = 2**63 - 1
_LEADING_INTEGER = re.compile(r"[ \t\n\v\f\r]*([+-]?[0-9]+)")


def _parse_leading_integer(text: str) -> int:
    """Read a base-10 integer prefix as a 64-bit value; -1 when impossible."""
    match = _LEADING_INTEGER.match(text)
    if match is None:
        return -1
    value = int(match.group(1))
    if not _INT64_MIN <= value <= _INT64_MAX:
        return -1
    return value


class Factorization:
    """One entry typed by the user together with its prime factors."""

    def __init__(self, text: str, job: Any = None) -> None:
        self.text = text
        self.job = job
        self.valid = False
        self.number = -1
        self.factors: list[tuple[int, int]] = []
        if text:
            self.number = _parse_leading_integer(text)
            if self.number >= 2:
                # Reject entries such as "25abc" whose digits do not span the text
                if len(str(self.number)) == len(text):
                    self.valid = True
                else:
                    self.number = -1

    def add_factor(self, base: int, exponent: int) -> None:
        """Append a (prime, power) pair."""
        self.factors.append((base, exponent))

    def to_html(self) -> str:
        """Render this entry as an HTML list item."""
        opening = "<li>" if self.valid else "<li class='err'>"
        if self.valid and self.number >= 2:
            result = " * ".join(
                f"{base}^{exponent}" if exponent > 1 else str(base)
                for base, exponent in self.factors
            )
        elif self.number >= 0:
            result = "NA"
        else:
            result = "error"
        return f"    {opening}{self.text}: {result}</li>"

    def __str__(self) -> str:
        return self.to_html()


def _candidate_divisors() -> Iterator[int]:
    """Yield 5, 7, 11, 13, 17, 19, ...: numbers of the form 6k +/- 1."""
    for k in count(6, 6):
        yield k - 1
        yield k + 1


def prime_factors(number: int) -> list[tuple[int, int]]:
    """Return the (prime, power) pairs of ``number`` in ascending order.

    Numbers below 2 have no factorization and give an empty list.
    """
    if number < 2:
        return []
    factors: list[tuple[int, int]] = []

    def divide_out(divisor: int) -> None:
        nonlocal number
        exponent = 0
        while number % divisor == 0:
            number //= divisor
            exponent += 1
        if exponent:
            factors.append((divisor, exponent))

    divide_out(2)
    divide_out(3)
    for divisor in _candidate_divisors():
        if divisor * divisor > number:
            break
        divide_out(divisor)
    if number > 2:
        factors.append((number, 1))
    return factors


def calculate_factors(factorization: Factorization) -> None:
    """Fill in the prime factors of a valid factorization."""
    if factorization.number < 2:
        return
    for base, exponent in prime_factors(factorization.number):
        factorization.add_factor(base, exponent)