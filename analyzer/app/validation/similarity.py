"""
String similarity used for duplicate-candidate detection.

similarity(a, b) = (len(longer) - levenshtein(a, b)) / len(longer)

Two empty strings are identical (similarity 1.0).
"""

from __future__ import annotations

from typing import List


def levenshtein_distance(a: str, b: str) -> int:
    """Minimum number of single-character insertions, deletions or substitutions."""
    if len(a) < len(b):
        a, b = b, a

    previous: List[int] = list(range(len(b) + 1))
    for i, char_a in enumerate(a, start=1):
        current = [i]
        for j, char_b in enumerate(b, start=1):
            current.append(
                min(
                    previous[j] + 1,
                    current[j - 1] + 1,
                    previous[j - 1] + (char_a != char_b),
                )
            )
        previous = current

    return previous[-1]


def string_similarity(a: str, b: str) -> float:
    longest = max(len(a), len(b))
    if longest == 0:
        return 1.0
    return (longest - levenshtein_distance(a, b)) / longest
