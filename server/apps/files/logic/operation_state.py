"""State tracking for two-store file operations.

An upload or delete moves through::

    VALIDATING -> WRITING_PRIMARY -> WRITING_SECONDARY -> DONE

Upload may instead go ``WRITING_SECONDARY -> COMPENSATING -> FAILED``
and any step before DONE may go straight to FAILED.
"""

import enum
import logging
from typing import Final, final

logger = logging.getLogger(__name__)


class OperationState(enum.Enum):
    """Step an operation has reached."""

    VALIDATING = 'validating'
    WRITING_PRIMARY = 'writing_primary'
    WRITING_SECONDARY = 'writing_secondary'
    COMPENSATING = 'compensating'
    DONE = 'done'
    FAILED = 'failed'


_TRANSITIONS: Final[dict[OperationState, frozenset[OperationState]]] = {
    OperationState.VALIDATING: frozenset((
        OperationState.WRITING_PRIMARY,
        OperationState.FAILED,
    )),
    OperationState.WRITING_PRIMARY: frozenset((
        OperationState.WRITING_SECONDARY,
        OperationState.FAILED,
    )),
    OperationState.WRITING_SECONDARY: frozenset((
        OperationState.DONE,
        OperationState.COMPENSATING,
        OperationState.FAILED,
    )),
    OperationState.COMPENSATING: frozenset((OperationState.FAILED,)),
    OperationState.DONE: frozenset(),
    OperationState.FAILED: frozenset(),
}


class InvalidTransitionError(Exception):
    """Raised when an operation skips or revisits a step."""


@final
class OperationTracker:
    """Current state and history of one upload or delete."""

    def __init__(self, operation: str, subject: str) -> None:
        """Start tracking in VALIDATING.

        Args:
            operation: Operation name for logs, e.g. 'upload'.
            subject: What is operated on, e.g. a key or file id.
        """
        self.operation = operation
        self.subject = subject
        self.history = [OperationState.VALIDATING]

    @property
    def state(self) -> OperationState:
        """State reached most recently."""
        return self.history[-1]

    @property
    def is_finished(self) -> bool:
        """Whether the operation reached DONE or FAILED."""
        return not _TRANSITIONS[self.state]

    def advance(self, new_state: OperationState) -> None:
        """Move to the next state.

        Args:
            new_state: State to enter.

        Raises:
            InvalidTransitionError: If the move is not allowed from here.
        """
        if new_state not in _TRANSITIONS[self.state]:
            raise InvalidTransitionError(
                f'{self.operation} cannot go from {self.state.value} '
                f'to {new_state.value}',
            )
        logger.debug(
            '%s %s: %s -> %s',
            self.operation,
            self.subject,
            self.state.value,
            new_state.value,
        )
        self.history.append(new_state)
