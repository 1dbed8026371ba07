"""Double-out rules: which scores can be finished and which segments finish."""

from typing import Optional, Sequence

# Scores of 170 or less with no three-dart finish
BOGEY_NUMBERS = frozenset({169, 168, 166, 165, 163, 162, 159})

MAX_CHECKOUT = 170

_THREE_DART_TWO_DIGIT = frozenset({99, 102, 103, 105, 106, 108, 109})

BULLSEYE_LABELS = frozenset({'DB', 'BULL', '50', 'D25'})


def min_darts_to_finish(score: int) -> int:
    if score > 110 or score in _THREE_DART_TWO_DIGIT:
        return 3
    if score == 50 or (score <= 40 and score % 2 == 0):
        return 1
    return 2


def is_finishable(score: int) -> bool:
    return 2 <= score <= MAX_CHECKOUT and score not in BOGEY_NUMBERS


def normalize_segment(label) -> str:
    return str(label).strip().upper()


def is_finishing_segment(label) -> bool:
    """True for D1..D20 and the bullseye."""
    seg = normalize_segment(label)
    if seg in BULLSEYE_LABELS:
        return True
    if seg.startswith('D') and seg[1:].isdigit():
        return 1 <= int(seg[1:]) <= 20
    return False


def is_valid_checkout(segments: Optional[Sequence[str]]) -> bool:
    """A finish counts when the last dart was a double or bull; no dart data means trust it."""
    if not segments:
        return True
    return is_finishing_segment(segments[-1])
