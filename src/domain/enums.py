"""Domain enumerations and state-transition rules."""

import enum


class RideStatus(str, enum.Enum):
    REQUESTED = "requested"
    MATCHING = "matching"
    ACCEPTED = "accepted"
    DRIVER_EN_ROUTE = "driver_en_route"
    ARRIVED = "arrived"
    WAITING = "waiting"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


TERMINAL_STATUSES: frozenset[RideStatus] = frozenset(
    {RideStatus.COMPLETED, RideStatus.CANCELLED}
)

# State machine: maps current status -> ordered tuple of valid next statuses
RIDE_TRANSITIONS: dict[RideStatus, tuple[RideStatus, ...]] = {
    RideStatus.REQUESTED: (RideStatus.MATCHING, RideStatus.CANCELLED),
    RideStatus.MATCHING: (RideStatus.ACCEPTED, RideStatus.CANCELLED),
    RideStatus.ACCEPTED: (RideStatus.DRIVER_EN_ROUTE, RideStatus.CANCELLED),
    RideStatus.DRIVER_EN_ROUTE: (RideStatus.ARRIVED, RideStatus.CANCELLED),
    RideStatus.ARRIVED: (
        RideStatus.WAITING,
        RideStatus.IN_PROGRESS,
        RideStatus.CANCELLED,
    ),
    RideStatus.WAITING: (RideStatus.IN_PROGRESS, RideStatus.CANCELLED),
    RideStatus.IN_PROGRESS: (RideStatus.COMPLETED, RideStatus.CANCELLED),
    RideStatus.COMPLETED: (),
    RideStatus.CANCELLED: (),
}

_missing = set(RideStatus) - set(RIDE_TRANSITIONS)
if _missing:
    raise RuntimeError(
        f"RIDE_TRANSITIONS has no row for: {', '.join(sorted(s.value for s in _missing))}"
    )
del _missing


class ActionRole(str, enum.Enum):
    RIDER = "rider"
    DRIVER = "driver"
    SYSTEM = "system"


class RideAction(str, enum.Enum):
    REQUEST_RIDE = "request_ride"
    ACCEPT_RIDE = "accept_ride"
    START_PICKUP = "start_pickup"
    ARRIVE = "arrive"
    START_WAITING = "start_waiting"
    START_TRIP = "start_trip"
    COMPLETE_TRIP = "complete_trip"
    CANCEL_RIDE = "cancel_ride"


class DriverCancelReason(str, enum.Enum):
    RIDER_REQUESTED = "rider_requested"
    SAFETY_CONCERN = "safety_concern"
    VEHICLE_ISSUE = "vehicle_issue"
    EMERGENCY = "emergency"
    RIDER_NO_SHOW = "rider_no_show"
    OTHER = "other"


class PaymentSource(str, enum.Enum):
    TEST_WALLET = "TEST_WALLET"
    MAIN_WALLET = "MAIN_WALLET"
    CARD = "CARD"
    BANK = "BANK"
