"""Deterministic sensor and fetch acceptance policy.

Pure functions only; nothing here touches the store or the platform.
"""

from __future__ import annotations

from enum import StrEnum

from pyqibla.models.location import HeadingSample


class HeadingVerdict(StrEnum):
    DISCARD = "discard"
    ACCURATE = "accurate"
    INACCURATE = "inaccurate"


def classify_heading(sample: HeadingSample, threshold: float) -> HeadingVerdict:
    """Decide what a heading sample does to the snapshot.

    Policy:
    - ``accuracy <= 0``: the reading is invalid; flag inaccurate, keep the old heading.
    - ``0 < accuracy <= threshold``: accurate, publish.
    - ``accuracy > threshold``: inaccurate, still publish for display continuity.
    """
    if not sample.is_usable:
        return HeadingVerdict.DISCARD
    if sample.is_accurate_within(threshold):
        return HeadingVerdict.ACCURATE
    return HeadingVerdict.INACCURATE


def should_accept_completion(*, current_generation: int, completed_generation: int) -> bool:
    """Only the most recently started lookup may publish its outcome.

    Older overlapping lookups are not cancelled, but their late results must
    not overwrite a newer one.
    """
    return completed_generation == current_generation
