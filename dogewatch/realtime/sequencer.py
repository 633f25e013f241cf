"""
Request sequencing for polled feeds.

Every fetch is tagged with a monotonically increasing number. A completed
fetch may update state only if it carries the latest tag issued and the
sequencer is still active. Out-of-order completions, and anything that
completes after deactivation, are dropped.
"""

from __future__ import annotations

import logging

logger = logging.getLogger(__name__)


class RequestSequencer:
    def __init__(self, name: str):
        self.name = name
        self._issued = 0
        self._active = False
        self._discarded = 0

    @property
    def active(self) -> bool:
        return self._active

    @property
    def latest(self) -> int:
        return self._issued

    @property
    def discarded(self) -> int:
        return self._discarded

    def activate(self) -> None:
        self._active = True

    def deactivate(self) -> None:
        self._active = False
        # Retire the outstanding tag so a later activate() cannot revive it
        self._issued += 1

    def issue(self) -> int:
        self._issued += 1
        return self._issued

    def is_current(self, seq: int) -> bool:
        return self._active and seq == self._issued

    def accept(self, seq: int) -> bool:
        """is_current() that also records and logs a rejection."""
        if self.is_current(seq):
            return True
        self._discarded += 1
        reason = "inactive" if not self._active else f"superseded by #{self._issued}"
        logger.debug("Dropping %s result #%d (%s)", self.name, seq, reason)
        return False
