"""
Export API Routes

GET /api/export-messages - Download all messages as CSV
"""

import logging

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import Response

from chatgenius.api.deps import get_message_repository
from chatgenius.integrations.supabase.messages import MessageRepository
from chatgenius.services.export_service import NoMessagesError, export_messages_csv

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/export-messages")
async def export_messages(repository: MessageRepository = Depends(get_message_repository)):
    try:
        csv_text = await export_messages_csv(repository)
    except NoMessagesError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception as e:
        logger.error(f"Error exporting messages: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail=str(e))

    return Response(
        content=csv_text,
        media_type="text/csv",
        headers={"Content-Disposition": "attachment; filename=messages_export.csv"},
    )
