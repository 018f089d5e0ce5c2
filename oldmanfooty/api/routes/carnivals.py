"""Carnival router module."""

import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Body, Header, HTTPException, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse

from ..dependencies import get_config, get_db, load_acting_user
from ...config.constants import AUSTRALIAN_STATES
from ...models.carnival import Carnival
from ...new_carnival_handler import create_or_merge, was_merged
from ...notifications import send_claim_notification
from ...ownership import ClaimResult, release_ownership, take_ownership
from ...utils.timezone import today_sydney

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/carnivals", tags=["carnivals"])


def _claim_response(result: ClaimResult) -> JSONResponse:
    return JSONResponse(
        status_code=200 if result.success else 400,
        content={"success": result.success, "message": result.message}
    )


@router.get("", response_model=List[Dict])
async def list_carnivals(request: Request, state: Optional[str] = None):
    """Get active carnivals from today onwards, optionally for one state."""
    query_state = state.upper() if state else None
    if query_state and query_state not in AUSTRALIAN_STATES:
        raise HTTPException(status_code=400, detail=f"Unknown state: {state}")

    with get_db(request).session() as session:
        query = session.query(Carnival).filter(
            Carnival.is_active.is_(True),
            Carnival.is_disabled.is_(False),
            Carnival.date >= today_sydney()
        )
        if query_state:
            query = query.filter(Carnival.state == query_state)
        carnivals = query.order_by(Carnival.date, Carnival.id).all()
        return [carnival.public_display_data() for carnival in carnivals]


@router.get("/{carnival_id}", response_model=Dict)
async def get_carnival(request: Request, carnival_id: int):
    """Get a single carnival by ID."""
    with get_db(request).session() as session:
        carnival = session.get(Carnival, carnival_id)
        if not carnival or carnival.is_disabled:
            raise HTTPException(status_code=404, detail="Carnival not found")
        return carnival.public_display_data()


@router.post("", status_code=201)
async def submit_carnival(
    request: Request,
    data: Dict[str, Any] = Body(..., media_type="application/json"),
    x_user_id: Optional[int] = Header(None)
):
    """
    Submit a carnival.

    A submission matching an unclaimed MySideline import is merged into it.
    Set "force_create" to skip duplicate detection.
    """
    force_create = bool(data.get("force_create", False))

    with get_db(request).session() as session:
        user = load_acting_user(session, x_user_id)
        try:
            carnival = create_or_merge(
                session,
                data,
                acting_user_id=user.id,
                acting_club_id=user.club_id,
                force_create=force_create
            )
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))

        merged = was_merged(carnival)
        return {
            "carnival": carnival.to_dict(),
            "merged": merged,
            "message": (
                "Carnival successfully merged with existing MySideline carnival"
                if merged else "Carnival created"
            )
        }


@router.post("/{carnival_id}/claim")
async def claim_carnival(
    request: Request,
    carnival_id: int,
    x_user_id: Optional[int] = Header(None)
):
    """Claim an unowned MySideline carnival for the acting user's club."""
    with get_db(request).session() as session:
        user = load_acting_user(session, x_user_id)
        result = take_ownership(session, carnival_id, user.id)

    # Only after the claim is committed
    if result.success and result.original_contact_email:
        await run_in_threadpool(
            send_claim_notification,
            get_config(request),
            result.carnival,
            result.claimant_name,
            result.club_name,
            result.original_contact_email
        )
    return _claim_response(result)


@router.post("/{carnival_id}/release")
async def release_carnival(
    request: Request,
    carnival_id: int,
    x_user_id: Optional[int] = Header(None)
):
    """Release ownership of a claimed MySideline carnival."""
    with get_db(request).session() as session:
        user = load_acting_user(session, x_user_id)
        result = release_ownership(session, carnival_id, user.id)
    return _claim_response(result)
