"""Running version and version string comparison.

Versions are compared segment by segment after splitting them into runs of
digits and runs of letters, so ``3.10.0`` sorts after ``3.9.2`` and
``3.0.0-rc1`` sorts before ``3.0.0``.
"""
import re
from typing import List

VERSION = "3.14.0"

_SEGMENT_RE = re.compile(r"[0-9]+|[A-Za-z]+")

# Prefix-matched in order; "#" stands for any numeric segment.
_SPECIAL_FORMS = (
    ("dev", 0),
    ("alpha", 1),
    ("a", 1),
    ("beta", 2),
    ("b", 2),
    ("RC", 3),
    ("rc", 3),
    ("#", 4),
    ("pl", 5),
    ("p", 5),
)
_NUMBER = "#"
_UNKNOWN_RANK = -6


def split_version(version: str) -> List[str]:
    """Split a version string into digit and letter segments."""
    return _SEGMENT_RE.findall(version or "")


def _special_rank(form: str) -> int:
    for name, rank in _SPECIAL_FORMS:
        if form.startswith(name):
            return rank
    return _UNKNOWN_RANK


def _cmp(left: int, right: int) -> int:
    return (left > right) - (left < right)


def _compare_segments(left: str, right: str) -> int:
    if left.isdigit() and right.isdigit():
        return _cmp(int(left), int(right))
    if not left.isdigit() and not right.isdigit():
        return _cmp(_special_rank(left), _special_rank(right))
    if left.isdigit():
        return _cmp(_special_rank(_NUMBER), _special_rank(right))
    return _cmp(_special_rank(left), _special_rank(_NUMBER))


def compare_versions(version1: str, version2: str) -> int:
    """Compare two version strings.

    Args:
        version1: First version
        version2: Second version

    Returns:
        -1 if version1 is older, 0 if equal, 1 if version1 is newer
    """
    left = split_version(version1)
    right = split_version(version2)

    for left_segment, right_segment in zip(left, right):
        result = _compare_segments(left_segment, right_segment)
        if result != 0:
            return result

    if len(left) == len(right):
        return 0

    # The longer version decides: a trailing number means newer,
    # a trailing pre-release word means older.
    if len(left) > len(right):
        extra = left[len(right)]
        return 1 if extra.isdigit() else _compare_segments(extra, _NUMBER)

    extra = right[len(left)]
    return -1 if extra.isdigit() else -_compare_segments(extra, _NUMBER)


def is_newer_version(candidate: str, current: str = VERSION) -> bool:
    """Return True if ``candidate`` is strictly newer than ``current``."""
    return compare_versions(current, candidate) == -1
