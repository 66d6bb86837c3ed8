"""Content lifecycle state machine.

The transition table is the single source of truth for which lifecycle
actions are legal from which state. Services compute the target state here
and then apply it with a conditional update guarded by the source state.
"""

from datetime import datetime

from persona_studio.domain.enums import ContentAction, ContentStatus
from persona_studio.domain.errors import InvalidScheduleError, InvalidTransitionError

TRANSITIONS: dict[ContentStatus, dict[ContentAction, ContentStatus]] = {
    ContentStatus.DRAFT: {
        ContentAction.SUBMIT_FOR_REVIEW: ContentStatus.PENDING_REVIEW,
        ContentAction.APPROVE: ContentStatus.APPROVED,
        ContentAction.REJECT: ContentStatus.REJECTED,
        ContentAction.SCHEDULE: ContentStatus.SCHEDULED,
    },
    ContentStatus.PENDING_REVIEW: {
        ContentAction.APPROVE: ContentStatus.APPROVED,
        ContentAction.REJECT: ContentStatus.REJECTED,
        ContentAction.SCHEDULE: ContentStatus.SCHEDULED,
    },
    ContentStatus.APPROVED: {
        ContentAction.REJECT: ContentStatus.REJECTED,
        ContentAction.SCHEDULE: ContentStatus.SCHEDULED,
        ContentAction.PUBLISH: ContentStatus.PUBLISHED,
    },
    ContentStatus.SCHEDULED: {
        ContentAction.SCHEDULE: ContentStatus.SCHEDULED,
        ContentAction.PUBLISH: ContentStatus.PUBLISHED,
    },
    ContentStatus.REJECTED: {},
    ContentStatus.PUBLISHED: {},
}

PUBLISHABLE_STATES = frozenset({ContentStatus.APPROVED, ContentStatus.SCHEDULED})
TERMINAL_STATES = frozenset(
    status for status, actions in TRANSITIONS.items() if not actions
)


def allowed_actions(status: ContentStatus) -> list[ContentAction]:
    """Actions that are legal from ``status``."""
    return list(TRANSITIONS[status])


def can_publish(status: ContentStatus) -> bool:
    return status in PUBLISHABLE_STATES


def is_terminal(status: ContentStatus) -> bool:
    return status in TERMINAL_STATES


def _illegal(current: ContentStatus, action: ContentAction) -> InvalidTransitionError:
    if action == ContentAction.PUBLISH:
        return InvalidTransitionError(
            f'Cannot publish content with status "{current}". '
            "Content must be approved or scheduled first."
        )
    return InvalidTransitionError(
        f'Cannot {action.replace("_", " ")} content with status "{current}"'
    )


def next_status(current: ContentStatus, action: ContentAction) -> ContentStatus:
    """Target state for ``action`` applied to ``current``.

    Raises:
        InvalidTransitionError: If the action is not legal from ``current``.
    """
    target = TRANSITIONS[current].get(action)
    if target is None:
        raise _illegal(current, action)
    return target


def require_publishable(status: ContentStatus) -> None:
    """Raise ``InvalidTransitionError`` unless ``status`` may be published."""
    if not can_publish(status):
        raise _illegal(status, ContentAction.PUBLISH)


def review_target(
    current: ContentStatus,
    action: ContentAction,
    scheduled_for: datetime | None,
    now: datetime,
) -> ContentStatus:
    """Resolve a review action, honouring approve-with-timestamp.

    Approving with a timestamp is a schedule; scheduling always needs a
    timestamp strictly in the future.
    """
    if action == ContentAction.APPROVE and scheduled_for is not None:
        action = ContentAction.SCHEDULE

    if action == ContentAction.SCHEDULE:
        if scheduled_for is None:
            raise InvalidScheduleError("A scheduled time is required to schedule content")
        if scheduled_for <= now:
            raise InvalidScheduleError("Scheduled time must be in the future")

    return next_status(current, action)
