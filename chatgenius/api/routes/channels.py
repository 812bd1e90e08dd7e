"""
Channel API Routes

1. GET /api/channels - List channels ordered by name
2. POST /api/channels - Create a channel
3. DELETE /api/channels/{channel_id} - Delete a channel after typed confirmation
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from chatgenius.api.deps import get_channel_service, get_current_user
from chatgenius.integrations.supabase.client import ChatRepositoryError
from chatgenius.models.chat import Channel, User
from chatgenius.services.channel_service import (
    ChannelNotFoundError,
    ChannelService,
    ChannelValidationError,
)

logger = logging.getLogger(__name__)
router = APIRouter()


class CreateChannelRequest(BaseModel):
    name: str = Field(..., description="Lowercase letters, numbers and hyphens, 3-50 characters")
    description: Optional[str] = None


class DeleteChannelRequest(BaseModel):
    confirmation: str = Field(..., description="Must equal the channel name")


@router.get("", response_model=List[Channel])
async def list_channels(
    user: User = Depends(get_current_user),
    service: ChannelService = Depends(get_channel_service),
):
    try:
        return await service.list_channels()
    except ChatRepositoryError as e:
        raise HTTPException(status_code=500, detail=str(e))


@router.post("", response_model=Channel, status_code=201)
async def create_channel(
    request: CreateChannelRequest,
    user: User = Depends(get_current_user),
    service: ChannelService = Depends(get_channel_service),
):
    try:
        return await service.create_channel(request.name, request.description)
    except ChannelValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except ChatRepositoryError as e:
        logger.error(f"Error creating channel: {e}")
        raise HTTPException(status_code=500, detail="Failed to create channel")


@router.delete("/{channel_id}")
async def delete_channel(
    channel_id: str,
    request: DeleteChannelRequest,
    user: User = Depends(get_current_user),
    service: ChannelService = Depends(get_channel_service),
):
    try:
        await service.delete_channel(channel_id, request.confirmation)
    except ChannelNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ChannelValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except ChatRepositoryError as e:
        logger.error(f"Error deleting channel {channel_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to delete channel")

    return {"success": True, "channel_id": channel_id}
