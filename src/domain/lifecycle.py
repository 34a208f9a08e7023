"""
Ride Lifecycle State Machine
============================

    requested -> matching -> accepted -> driver_en_route -> arrived
              -> [waiting] -> in_progress -> completed

Any non-terminal status may also move to ``cancelled``.  ``completed`` and
``cancelled`` are terminal.

Every check here is a pure function over ``RIDE_TRANSITIONS`` and the
arguments: the current status and every timestamp (matching expiry,
driver acceptance) belong to the ride service and are passed in.  Invalid
moves come back as data (``TransitionResult`` / ``ActionValidationResult``);
only ``Ride.with_status`` raises, for callers that want an exception.

Role-based actions
------------------
``validate_action`` layers *who may do what* on top of the transition
table: each ``RideAction`` has a set of permitted roles, the statuses it
may start from, and action-specific rules (matching window for
``accept_ride``, assigned driver for trip actions, fees and grace period
for ``cancel_ride``).
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime, timedelta
from typing import Optional, Union

from .clock import as_utc, resolve_now
from .compensation import is_driver_eligible_for_compensation
from .entities import ActionValidationResult, DriverMovement, TransitionResult
from .enums import (
    RIDE_TRANSITIONS,
    TERMINAL_STATUSES,
    ActionRole,
    RideAction,
    RideStatus,
)

MATCHING_WINDOW_SECONDS = 10

# Rider can cancel free within this time after the driver accepts
RIDER_CANCEL_GRACE_PERIOD = timedelta(minutes=3)


class InvalidStateTransition(Exception):
    """Raised when a ride status change violates the state machine."""


StatusLike = Union[RideStatus, str]


def _coerce(status: StatusLike) -> Optional[RideStatus]:
    try:
        return RideStatus(status)
    except ValueError:
        return None


def _label(status: StatusLike) -> str:
    return status.value if isinstance(status, RideStatus) else str(status)


# ── Transition table ──────────────────────────────────────────────────


def get_valid_next_states(current: StatusLike) -> list[RideStatus]:
    """Successors of *current*; unknown statuses have none."""
    status = _coerce(current)
    if status is None:
        return []
    return list(RIDE_TRANSITIONS[status])


def is_valid_transition(from_status: StatusLike, to_status: StatusLike) -> TransitionResult:
    source = _coerce(from_status)
    if source in TERMINAL_STATUSES:
        return TransitionResult(
            valid=False,
            error=f"Cannot transition from terminal state '{source.value}'",
        )

    valid_next = get_valid_next_states(from_status)
    if _coerce(to_status) not in valid_next:
        listed = ", ".join(s.value for s in valid_next) or "none"
        return TransitionResult(
            valid=False,
            error=(
                f"Invalid transition: '{_label(from_status)}' → "
                f"'{_label(to_status)}'. Valid transitions are: {listed}"
            ),
        )

    return TransitionResult(valid=True)


# ── Matching window ───────────────────────────────────────────────────


def is_matching_expired(
    matching_expires_at: Optional[datetime], now: Optional[datetime] = None
) -> bool:
    if matching_expires_at is None:
        return False
    return resolve_now(now) > as_utc(matching_expires_at)


def create_matching_expiration(now: Optional[datetime] = None) -> datetime:
    return resolve_now(now) + timedelta(seconds=MATCHING_WINDOW_SECONDS)


# ── Role-based actions ────────────────────────────────────────────────

_NON_TERMINAL = tuple(s for s in RideStatus if s not in TERMINAL_STATUSES)

ACTION_PERMISSIONS: dict[RideAction, frozenset[ActionRole]] = {
    RideAction.REQUEST_RIDE: frozenset({ActionRole.RIDER}),
    RideAction.ACCEPT_RIDE: frozenset({ActionRole.DRIVER}),
    # Driver tap or GPS detection
    RideAction.START_PICKUP: frozenset({ActionRole.DRIVER, ActionRole.SYSTEM}),
    # Driver tap or arrival radius
    RideAction.ARRIVE: frozenset({ActionRole.DRIVER, ActionRole.SYSTEM}),
    RideAction.START_WAITING: frozenset({ActionRole.SYSTEM}),
    RideAction.START_TRIP: frozenset({ActionRole.DRIVER}),
    RideAction.COMPLETE_TRIP: frozenset({ActionRole.DRIVER}),
    RideAction.CANCEL_RIDE: frozenset({ActionRole.RIDER, ActionRole.DRIVER}),
}

# Empty tuple: no prior status required
ACTION_REQUIRED_STATUS: dict[RideAction, tuple[RideStatus, ...]] = {
    RideAction.REQUEST_RIDE: (),
    RideAction.ACCEPT_RIDE: (RideStatus.MATCHING,),
    RideAction.START_PICKUP: (RideStatus.ACCEPTED,),
    RideAction.ARRIVE: (RideStatus.DRIVER_EN_ROUTE,),
    RideAction.START_WAITING: (RideStatus.ARRIVED,),
    RideAction.START_TRIP: (RideStatus.WAITING, RideStatus.ARRIVED),
    RideAction.COMPLETE_TRIP: (RideStatus.IN_PROGRESS,),
    RideAction.CANCEL_RIDE: _NON_TERMINAL,
}

ACTION_TARGET_STATUS: dict[RideAction, RideStatus] = {
    RideAction.REQUEST_RIDE: RideStatus.MATCHING,
    RideAction.ACCEPT_RIDE: RideStatus.ACCEPTED,
    RideAction.START_PICKUP: RideStatus.DRIVER_EN_ROUTE,
    RideAction.ARRIVE: RideStatus.ARRIVED,
    RideAction.START_WAITING: RideStatus.WAITING,
    RideAction.START_TRIP: RideStatus.IN_PROGRESS,
    RideAction.COMPLETE_TRIP: RideStatus.COMPLETED,
    RideAction.CANCEL_RIDE: RideStatus.CANCELLED,
}

_ASSIGNED_DRIVER_ACTIONS = frozenset(
    {
        RideAction.START_PICKUP,
        RideAction.ARRIVE,
        RideAction.START_TRIP,
        RideAction.COMPLETE_TRIP,
    }
)

RIDER_CAN_CANCEL: tuple[RideStatus, ...] = (
    RideStatus.REQUESTED,
    RideStatus.MATCHING,
    RideStatus.ACCEPTED,
    RideStatus.DRIVER_EN_ROUTE,
)

DRIVER_CAN_CANCEL: tuple[RideStatus, ...] = (
    RideStatus.ARRIVED,
    RideStatus.WAITING,
    RideStatus.IN_PROGRESS,
)


def get_target_status(action: RideAction) -> RideStatus:
    return ACTION_TARGET_STATUS[action]


def validate_action(
    action: RideAction,
    role: ActionRole,
    current_status: Optional[RideStatus],
    *,
    is_assigned_driver: bool = False,
    matching_expires_at: Optional[datetime] = None,
    driver_movement: Optional[DriverMovement] = None,
    driver_accepted_at: Optional[datetime] = None,
    now: Optional[datetime] = None,
) -> ActionValidationResult:
    """Check that *role* may perform *action* on a ride in *current_status*."""
    if role not in ACTION_PERMISSIONS[action]:
        return ActionValidationResult(
            allowed=False,
            error=f"{role.value} cannot perform action '{action.value}'",
        )

    required = ACTION_REQUIRED_STATUS[action]
    if required and current_status is not None and current_status not in required:
        return ActionValidationResult(
            allowed=False,
            error=(
                f"Cannot '{action.value}' when ride status is "
                f"'{current_status.value}'. Required: "
                f"{', '.join(s.value for s in required)}"
            ),
        )

    if action == RideAction.ACCEPT_RIDE:
        if is_matching_expired(matching_expires_at, now):
            return ActionValidationResult(
                allowed=False,
                error="Matching window has expired. Cannot accept this ride.",
            )
    elif action in _ASSIGNED_DRIVER_ACTIONS:
        if role == ActionRole.DRIVER and not is_assigned_driver:
            return ActionValidationResult(
                allowed=False,
                error="Only the assigned driver can perform this action",
            )
    elif action == RideAction.CANCEL_RIDE:
        return validate_cancellation(
            role,
            current_status,
            driver_movement=driver_movement,
            driver_accepted_at=driver_accepted_at,
            now=now,
        )

    return ActionValidationResult(allowed=True)


def validate_cancellation(
    role: ActionRole,
    current_status: Optional[RideStatus],
    *,
    driver_movement: Optional[DriverMovement] = None,
    driver_accepted_at: Optional[datetime] = None,
    now: Optional[datetime] = None,
) -> ActionValidationResult:
    if current_status is None:
        return ActionValidationResult(allowed=False, error="No ride to cancel")

    if role == ActionRole.RIDER:
        return _validate_rider_cancellation(
            current_status, driver_movement, driver_accepted_at, resolve_now(now)
        )

    if role == ActionRole.DRIVER:
        if current_status not in DRIVER_CAN_CANCEL:
            return ActionValidationResult(
                allowed=False,
                error=f"Driver cannot cancel when status is '{current_status.value}'",
            )
        if current_status == RideStatus.IN_PROGRESS:
            return ActionValidationResult(allowed=True, requires_reason=True)
        return ActionValidationResult(allowed=True)

    return ActionValidationResult(allowed=False, error="Invalid role for cancellation")


def _validate_rider_cancellation(
    current_status: RideStatus,
    driver_movement: Optional[DriverMovement],
    driver_accepted_at: Optional[datetime],
    now: datetime,
) -> ActionValidationResult:
    if current_status not in RIDER_CAN_CANCEL:
        return ActionValidationResult(
            allowed=False,
            error=(
                f"Rider cannot cancel when status is '{current_status.value}'. "
                "Trip is in progress."
            ),
        )

    # Before a driver accepts, cancelling is always free
    if current_status in (RideStatus.REQUESTED, RideStatus.MATCHING):
        return ActionValidationResult(allowed=True)

    since_accept = now - as_utc(driver_accepted_at) if driver_accepted_at else None
    if since_accept is not None and since_accept <= RIDER_CANCEL_GRACE_PERIOD:
        return ActionValidationResult(allowed=True, within_grace_period=True)

    if driver_movement is not None:
        decision = is_driver_eligible_for_compensation(
            driver_movement.distance_km, driver_movement.duration_sec
        )
        if decision.eligible:
            return ActionValidationResult(
                allowed=True, requires_fee=True, compensation_eligible=True
            )

    # Past the grace period with the driver already on the way
    if current_status == RideStatus.DRIVER_EN_ROUTE and since_accept is not None:
        return ActionValidationResult(
            allowed=True, requires_fee=True, compensation_eligible=True
        )

    return ActionValidationResult(allowed=True)


# ── Snapshot ──────────────────────────────────────────────────────────


@dataclass(frozen=True)
class Ride:
    """
    Read-only view of a ride's lifecycle fields, as loaded by the caller.

    ``with_status`` returns a new snapshot for the caller to persist; the
    caller still serialises concurrent writes to the same ride.
    """

    id: Optional[str] = None
    status: RideStatus = RideStatus.REQUESTED
    matching_expires_at: Optional[datetime] = None
    driver_accepted_at: Optional[datetime] = None
    waiting_started_at: Optional[datetime] = None
    last_movement_at: Optional[datetime] = None
    idle_alert_sent_at: Optional[datetime] = None

    def with_status(self, new_status: RideStatus) -> Ride:
        """Return a copy in *new_status* if the transition is legal, else raise."""
        result = is_valid_transition(self.status, new_status)
        if not result.valid:
            raise InvalidStateTransition(result.error)
        return replace(self, status=new_status)

    def apply(self, action: RideAction, now: Optional[datetime] = None) -> Ride:
        """
        Move to the status *action* leads to, stamping the timestamps the
        new status starts (matching expiry, acceptance, waiting start).
        """
        target = get_target_status(action)
        moved = self.with_status(target)
        now = resolve_now(now)
        if target == RideStatus.MATCHING:
            return replace(moved, matching_expires_at=create_matching_expiration(now))
        if target == RideStatus.ACCEPTED:
            return replace(moved, driver_accepted_at=now)
        if target == RideStatus.WAITING:
            return replace(moved, waiting_started_at=now)
        return moved
