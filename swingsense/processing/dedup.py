"""Suppression of repeated detections of the same physical swing."""

from __future__ import annotations

import logging
from enum import StrEnum

from ..models import SwingEvent

LOGGER = logging.getLogger(__name__)


class DedupDecision(StrEnum):
    ACCEPTED = "accepted"
    RAPID = "rapid"
    DUPLICATE = "duplicate"

    @property
    def emitted(self) -> bool:
        return self is not DedupDecision.DUPLICATE


def _within(new: float, previous: float, tolerance: float) -> bool:
    return abs(new - previous) < abs(previous) * tolerance


class Deduplicator:
    """Keep only the most recently accepted event and compare against it."""

    def __init__(self, min_sep_seconds: float, tolerance: float) -> None:
        self.min_sep_seconds = float(min_sep_seconds)
        self.tolerance = float(tolerance)
        self.last_event: SwingEvent | None = None

    @property
    def last_timestamp(self) -> float | None:
        return self.last_event.timestamp if self.last_event is not None else None

    def reset(self) -> None:
        self.last_event = None

    def classify(self, event: SwingEvent) -> DedupDecision:
        """Classify *event* without changing state."""
        previous = self.last_event
        if previous is None:
            return DedupDecision.ACCEPTED
        dt = event.timestamp - previous.timestamp
        if dt >= self.min_sep_seconds:
            return DedupDecision.ACCEPTED
        if _within(event.max_tip_speed, previous.max_tip_speed, self.tolerance) and _within(
            event.estimated_force_n, previous.estimated_force_n, self.tolerance
        ):
            return DedupDecision.DUPLICATE
        return DedupDecision.RAPID

    def offer(self, event: SwingEvent) -> DedupDecision:
        """Classify *event* and remember it when it is emitted."""
        decision = self.classify(event)
        previous = self.last_event
        dt = event.timestamp - previous.timestamp if previous is not None else 0.0
        if decision is DedupDecision.DUPLICATE:
            LOGGER.info(
                "Duplicate swing suppressed: dt=%.3fs tip_speed=%.2f m/s",
                dt,
                event.max_tip_speed,
            )
            return decision
        if decision is DedupDecision.RAPID:
            LOGGER.info("Rapid-succession swing accepted: dt=%.3fs", dt)
        self.last_event = event
        return decision
