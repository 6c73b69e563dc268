"""Abstract base class and shared statistics for all pattern detectors."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Hashable, Iterable, Mapping, Sequence, TypeVar

import numpy as np

from moodinsights.history import MoodHistory
from moodinsights.models import PatternKind, PatternResult

K = TypeVar("K", bound=Hashable)


class PatternDetector(ABC):
    """Abstract base class for all pattern detectors.

    Each detector encapsulates one statistical comparison over a
    :class:`~moodinsights.history.MoodHistory`.  Detectors are pure: they
    keep their thresholds as read-only attributes set in ``__init__`` and
    never mutate the history.  The
    :class:`~moodinsights.synthesizer.InsightSynthesizer` runs every
    detector in its catalogue and turns each result into an insight.

    Returning ``None`` means "no signal" and is the expected steady state
    for new users; it is never an error.
    """

    #: Short name used in logs.
    name: str = "detector"

    @abstractmethod
    def detect(self, history: MoodHistory) -> PatternResult | None:
        """Return a :class:`~moodinsights.models.PatternResult` or ``None``.

        Args:
            history: The analysis window, anchored on ``history.today``.

        Returns:
            A result when the minimum-sample gate and the significance
            threshold are both met, otherwise ``None``.
        """

    def _result(
        self,
        kind: PatternKind,
        magnitude: float,
        confidence: float,
        sample_count: int,
        **data: object,
    ) -> PatternResult:
        return PatternResult(
            kind=kind,
            magnitude=float(magnitude),
            confidence=confidence,
            sample_count=sample_count,
            data=dict(data, magnitude=float(magnitude)),
        )


# ---------------------------------------------------------------------------
# Shared statistics
# ---------------------------------------------------------------------------


def group_values(pairs: Iterable[tuple[K, float]]) -> dict[K, list[float]]:
    """Group ``(key, value)`` pairs into lists, preserving first-seen key order."""
    groups: dict[K, list[float]] = {}
    for key, value in pairs:
        groups.setdefault(key, []).append(value)
    return groups


def group_means(
    groups: Mapping[K, Sequence[float]],
    min_size: int = 1,
    order: Sequence[K] | None = None,
) -> dict[K, float]:
    """Return the mean of every group with at least *min_size* values.

    Args:
        groups: Values keyed by group.
        min_size: Groups smaller than this are dropped.
        order: Optional key order for the result; defaults to the order of
            *groups*.  Detectors pass the enum declaration order so the
            tie-break in :func:`pick_extremes` is stable across runs.

    Returns:
        Ordered mapping of group key to mean.
    """
    keys = order if order is not None else list(groups)
    return {
        key: float(np.mean(groups[key]))
        for key in keys
        if key in groups and len(groups[key]) >= min_size
    }


def pick_extremes(means: Mapping[K, float]) -> tuple[K, K]:
    """Return ``(best_key, worst_key)`` of a non-empty mapping.

    Ties resolve to the first key in iteration order.
    """
    best = worst = None
    for key, value in means.items():
        if best is None or value > means[best]:
            best = key
        if worst is None or value < means[worst]:
            worst = key
    if best is None or worst is None:
        raise ValueError("pick_extremes() requires at least one group")
    return best, worst


def scaled_confidence(
    magnitude: float,
    samples: int,
    magnitude_scale: float,
    sample_scale: float,
) -> float:
    """Confidence in [0, 1] that grows with both effect size and evidence.

    ``min(1, magnitude / magnitude_scale) * min(1, samples / sample_scale)``,
    so it never decreases when either input grows and never exceeds 1.0.
    """
    effect = min(max(magnitude, 0.0) / magnitude_scale, 1.0)
    evidence = min(max(samples, 0) / sample_scale, 1.0)
    return float(effect * evidence)


def mean(values: Sequence[float]) -> float:
    return float(np.mean(values)) if len(values) else 0.0
