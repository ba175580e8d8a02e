"""
Swap request endpoints for API v1.

Creating a request and driving it through accept/reject/cancel/
complete.  Refusals raised by ``SwapService`` are translated to HTTP
responses by the application's ``ServiceError`` handler.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status

from skill_swap_api.app.core.security import get_current_user
from skill_swap_api.app.schemas.swap import (
    SwapActionResponse,
    SwapRequestCreate,
    SwapRequestRead,
    SwapStatus,
)
from skill_swap_api.app.services.swap_service import TRANSITIONS, SwapService

router = APIRouter()


@router.post("/request", response_model=SwapActionResponse, status_code=status.HTTP_201_CREATED)
async def create_swap_request(
    data: SwapRequestCreate,
    current_user: dict = Depends(get_current_user),
) -> SwapActionResponse:
    swap = await SwapService.create(current_user, data)
    return SwapActionResponse(message="Swap request sent successfully", swap_request=swap)


@router.get("/my-requests", response_model=List[SwapRequestRead])
async def my_requests(
    status_filter: Optional[SwapStatus] = Query(None, alias="status"),
    current_user: dict = Depends(get_current_user),
) -> List[SwapRequestRead]:
    """Requests the caller sent or received, newest first."""
    return await SwapService.list_for_user(current_user, status=status_filter)


@router.get("/{swap_id}", response_model=SwapRequestRead)
async def get_swap_request(
    swap_id: int,
    current_user: dict = Depends(get_current_user),
) -> SwapRequestRead:
    return await SwapService.get(swap_id, current_user)


@router.put("/{swap_id}/accept", response_model=SwapActionResponse)
async def accept_swap_request(swap_id: int, current_user: dict = Depends(get_current_user)) -> SwapActionResponse:
    swap = await SwapService.accept(swap_id, current_user)
    return SwapActionResponse(message=TRANSITIONS["accept"].done_message, swap_request=swap)


@router.put("/{swap_id}/reject", response_model=SwapActionResponse)
async def reject_swap_request(swap_id: int, current_user: dict = Depends(get_current_user)) -> SwapActionResponse:
    swap = await SwapService.reject(swap_id, current_user)
    return SwapActionResponse(message=TRANSITIONS["reject"].done_message, swap_request=swap)


@router.put("/{swap_id}/complete", response_model=SwapActionResponse)
async def complete_swap_request(swap_id: int, current_user: dict = Depends(get_current_user)) -> SwapActionResponse:
    swap = await SwapService.complete(swap_id, current_user)
    return SwapActionResponse(message=TRANSITIONS["complete"].done_message, swap_request=swap)


@router.delete("/{swap_id}/cancel", response_model=SwapActionResponse)
async def cancel_swap_request(swap_id: int, current_user: dict = Depends(get_current_user)) -> SwapActionResponse:
    swap = await SwapService.cancel(swap_id, current_user)
    return SwapActionResponse(message=TRANSITIONS["cancel"].done_message, swap_request=swap)
