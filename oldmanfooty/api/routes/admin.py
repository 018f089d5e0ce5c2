"""Admin router module."""

import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Header, HTTPException, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse

from ..dependencies import (
    get_config,
    get_db,
    get_source_manager,
    load_acting_user,
    load_admin_user,
    verify_admin_key,
)
from ...carnival_merge import merge_carnivals
from ...models.carnival import Carnival
from ...models.sync_log import SyncLog
from ...notifications import send_claim_notification
from ...ownership import admin_claim_on_behalf
from ...sync_handler import MYSIDELINE_SOURCE_ID, run_sync

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["admin"])


def _required_id(data: Dict[str, Any], key: str) -> int:
    value = data.get(key)
    try:
        return int(value)
    except (TypeError, ValueError):
        raise HTTPException(status_code=400, detail=f"'{key}' must be a carnival or club id")


@router.post("/sync")
async def trigger_sync(
    request: Request,
    authorization: Optional[str] = Header(None)
):
    """
    Fetch MySideline and store its carnivals.
    This endpoint is protected by an authorization header.
    """
    config = get_config(request)
    verify_admin_key(config, authorization)

    # requests and the database driver block, so keep them off the event loop
    result = await run_in_threadpool(
        run_sync,
        get_db(request),
        config,
        get_source_manager(request),
        force=True,
        trigger='admin'
    )
    status_code = 502 if result['status'] == 'failed' else 200
    return JSONResponse(status_code=status_code, content=result)


@router.post("/carnivals/{carnival_id}/merge")
async def merge_carnival(
    request: Request,
    carnival_id: int,
    data: Dict[str, Any] = Body(..., media_type="application/json"),
    x_user_id: Optional[int] = Header(None)
):
    """Merge this carnival into "target_carnival_id" and archive it."""
    target_id = _required_id(data, "target_carnival_id")

    with get_db(request).session() as session:
        user = load_acting_user(session, x_user_id)
        target = merge_carnivals(session, carnival_id, target_id, user)
        return {
            "success": True,
            "message": f'Successfully merged carnival {carnival_id} into "{target.title}".',
            "carnival": target.to_dict()
        }


@router.post("/carnivals/{carnival_id}/claim-on-behalf")
async def claim_on_behalf(
    request: Request,
    carnival_id: int,
    data: Dict[str, Any] = Body(..., media_type="application/json"),
    x_user_id: Optional[int] = Header(None)
):
    """Claim an unowned MySideline carnival for "target_club_id"."""
    target_club_id = _required_id(data, "target_club_id")

    with get_db(request).session() as session:
        admin = load_admin_user(session, x_user_id)
        result = admin_claim_on_behalf(session, carnival_id, admin.id, target_club_id)

    if result.success and result.original_contact_email:
        await run_in_threadpool(
            send_claim_notification,
            get_config(request),
            result.carnival,
            result.claimant_name,
            result.club_name,
            result.original_contact_email
        )
    return JSONResponse(
        status_code=200 if result.success else 400,
        content={"success": result.success, "message": result.message}
    )


@router.get("/stats")
async def get_stats(
    request: Request,
    x_user_id: Optional[int] = Header(None)
):
    """Carnival counts and the last successful MySideline sync."""
    with get_db(request).session() as session:
        load_admin_user(session, x_user_id)
        stats = Carnival.get_statistics(session)
        last_sync = SyncLog.get_last_successful_sync(session, MYSIDELINE_SOURCE_ID)
        stats["last_sync"] = last_sync.completed_at if last_sync else None
        return stats
