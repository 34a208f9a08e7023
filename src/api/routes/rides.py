"""
Ride lifecycle endpoints
========================

POST /api/v1/rides/transitions/validate   -- check a status change
POST /api/v1/rides/transitions            -- apply an action to a ride snapshot
GET  /api/v1/rides/statuses/{status}/next -- list valid successors
POST /api/v1/rides/actions/validate       -- role / status / fee rules for an action
POST /api/v1/rides/waiting                -- waiting tiers and fee so far
POST /api/v1/rides/compensation           -- driver payout for a rider cancellation
POST /api/v1/rides/safety-check           -- should an idle alert fire?
POST /api/v1/rides/guard                  -- financial checks before a request

Every endpoint is stateless: the caller sends the statuses and timestamps
it has persisted and stores whatever comes back.
"""

import logging

from fastapi import APIRouter, HTTPException, Request

from src.api.middleware import limiter
from src.api.schemas import (
    ActionRequest,
    ActionResponse,
    ApplyActionRequest,
    CompensationRequest,
    CompensationResponse,
    GuardRequest,
    GuardResponse,
    NextStatesResponse,
    RideSnapshot,
    SafetyCheckRequest,
    SafetyCheckResponse,
    TransitionRequest,
    TransitionResponse,
    WaitingBreakdownResponse,
    WaitingRequest,
    WaitingResponse,
)
from src.config import settings
from src.domain.clock import resolve_now
from src.domain.compensation import calculate_cancellation_compensation
from src.domain.entities import DriverMovement
from src.domain.guards import (
    RideRequestGuardInput,
    assert_financial_engine_locked,
    validate_ride_request,
)
from src.domain.lifecycle import (
    InvalidStateTransition,
    Ride,
    get_target_status,
    get_valid_next_states,
    is_valid_transition,
    validate_action,
)
from src.domain.safety import should_trigger_safety_alert
from src.domain.waiting import (
    calculate_waiting_fee,
    calculate_waiting_time,
    can_cancel_without_penalty,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/rides", tags=["rides"])


@router.post(
    "/transitions/validate",
    response_model=TransitionResponse,
    summary="Validate a ride status transition",
)
@limiter.limit(settings.rate_limit)
async def validate_transition(request: Request, body: TransitionRequest):
    return is_valid_transition(body.from_status, body.to_status)


@router.post(
    "/transitions",
    response_model=RideSnapshot,
    summary="Apply an action to a ride",
    responses={409: {"description": "Action not allowed from the current status."}},
)
@limiter.limit(settings.rate_limit)
async def apply_action(request: Request, body: ApplyActionRequest):
    ride = Ride(**body.ride.model_dump())
    try:
        moved = ride.apply(body.action)
    except InvalidStateTransition as exc:
        raise HTTPException(status_code=409, detail=str(exc))
    logger.info(
        "Ride %s: %s -> %s", ride.id, ride.status.value, moved.status.value
    )
    return RideSnapshot.model_validate(moved)


@router.get(
    "/statuses/{status}/next",
    response_model=NextStatesResponse,
    summary="List valid next statuses",
)
@limiter.limit(settings.rate_limit)
async def next_states(request: Request, status: str):
    return NextStatesResponse(status=status, next_states=get_valid_next_states(status))


@router.post(
    "/actions/validate",
    response_model=ActionResponse,
    summary="Check whether a role may perform an action",
)
@limiter.limit(settings.rate_limit)
async def validate_ride_action(request: Request, body: ActionRequest):
    movement = (
        DriverMovement(body.driver_movement.distance_km, body.driver_movement.duration_sec)
        if body.driver_movement
        else None
    )
    result = validate_action(
        body.action,
        body.role,
        body.current_status,
        is_assigned_driver=body.is_assigned_driver,
        matching_expires_at=body.matching_expires_at,
        driver_movement=movement,
        driver_accepted_at=body.driver_accepted_at,
    )
    return ActionResponse(
        allowed=result.allowed,
        error=result.error,
        requires_fee=result.requires_fee,
        requires_reason=result.requires_reason,
        compensation_eligible=result.compensation_eligible,
        within_grace_period=result.within_grace_period,
        target_status=get_target_status(body.action) if result.allowed else None,
    )


@router.post(
    "/waiting",
    response_model=WaitingResponse,
    summary="Waiting tiers and fee accrued at pickup",
)
@limiter.limit(settings.rate_limit)
async def waiting(request: Request, body: WaitingRequest):
    # One clock read so the breakdown, fee and cancel check agree
    end = resolve_now(body.end_time)
    breakdown = calculate_waiting_time(body.waiting_started_at, end)
    fee = calculate_waiting_fee(body.waiting_started_at, end)
    free_cancel, reason = can_cancel_without_penalty(body.waiting_started_at, end)
    return WaitingResponse(
        breakdown=WaitingBreakdownResponse.model_validate(breakdown),
        total_waiting_fee=fee.total_waiting_fee,
        can_cancel_without_penalty=free_cancel,
        reason=reason,
    )


@router.post(
    "/compensation",
    response_model=CompensationResponse,
    summary="Driver compensation for a rider cancellation",
)
@limiter.limit(settings.rate_limit)
async def compensation(request: Request, body: CompensationRequest):
    assert_financial_engine_locked(settings.financial_engine_locked)
    return CompensationResponse.model_validate(
        calculate_cancellation_compensation(
            body.distance_km,
            body.duration_sec,
            waiting_started_at=body.waiting_started_at,
            cancelled_at=body.cancelled_at,
        )
    )


@router.post(
    "/safety-check",
    response_model=SafetyCheckResponse,
    summary="Decide whether an idle safety alert should fire",
)
@limiter.limit(settings.rate_limit)
async def safety_check(request: Request, body: SafetyCheckRequest):
    trigger = should_trigger_safety_alert(
        body.last_movement_at, body.idle_alert_sent_at, body.current_status
    )
    if trigger:
        logger.warning("Idle safety alert: no movement since %s", body.last_movement_at)
    return SafetyCheckResponse(trigger_alert=trigger)


@router.post(
    "/guard",
    response_model=GuardResponse,
    summary="Financial checks before accepting a ride request",
)
@limiter.limit(settings.rate_limit)
async def guard(request: Request, body: GuardRequest):
    assert_financial_engine_locked(settings.financial_engine_locked)
    return GuardResponse.model_validate(
        validate_ride_request(RideRequestGuardInput(**body.model_dump()))
    )
