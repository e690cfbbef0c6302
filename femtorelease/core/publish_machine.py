"""Deterministic publish state machine.

Enforces the ordered pipeline::

    RESOLVE -> [CREATE] -> VALIDATE -> RECONCILE -> DONE

Any state may fall to FAILED.  CREATE is entered only when RESOLVE found no
release for the tag, so a rerun can never create a second release.  Every
transition is kept in ``history`` for the publish report.
"""

from __future__ import annotations

import logging

from femtorelease.core.errors import InvalidTransitionError
from femtorelease.models.release import (
    VALID_TRANSITIONS,
    PublishState,
    PublishTransition,
)

logger = logging.getLogger(__name__)


class PublishMachine:
    """Tracks the current publish state and validates each move."""

    def __init__(self, tag: str) -> None:
        self.tag = tag
        self._state = PublishState.RESOLVE
        self._history: list[PublishTransition] = []

    @property
    def state(self) -> PublishState:
        return self._state

    @property
    def history(self) -> list[PublishTransition]:
        return list(self._history)

    @property
    def is_terminal(self) -> bool:
        return not VALID_TRANSITIONS[self._state]

    def transition(self, target: PublishState, reason: str = "") -> PublishTransition:
        """Move to *target*, raising ``InvalidTransitionError`` if not allowed."""
        allowed = VALID_TRANSITIONS.get(self._state, set())
        if target not in allowed:
            raise InvalidTransitionError(
                f"Cannot transition publish of {self.tag} from {self._state.value} "
                f"to {target.value}. Allowed: {sorted(s.value for s in allowed)}"
            )
        record = PublishTransition(from_state=self._state, to_state=target, reason=reason)
        self._history.append(record)
        logger.debug("%s: %s -> %s %s", self.tag, self._state.value, target.value, reason)
        self._state = target
        return record

    def fail(self, reason: str) -> None:
        """Move to FAILED unless already terminal."""
        if not self.is_terminal:
            self.transition(PublishState.FAILED, reason)
