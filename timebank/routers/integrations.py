import logging
from typing import List

import httpx
from fastapi import APIRouter, Depends, HTTPException

from timebank.config import settings
from timebank.core.auth import get_current_user
from timebank.models.profile import Profile
from timebank.schemas.integration import AsanaTaskCreate, IntegrationStatus
from timebank.core.errors import IntegrationNotConfigured
from timebank.services.asana import create_asana_task, get_http_client

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/integrations", tags=["integrations"])


@router.get("", response_model=List[IntegrationStatus])
async def list_integrations(current_user: Profile = Depends(get_current_user)):
    return [
        IntegrationStatus(
            name="asana",
            configured=settings.asana_configured,
            missing=settings.missing_asana_settings,
        ),
        IntegrationStatus(
            name="email",
            configured=settings.smtp_configured,
            missing=settings.missing_smtp_settings,
        ),
    ]


@router.post("/asana/tasks")
async def create_task_in_asana(
    task_in: AsanaTaskCreate,
    client: httpx.AsyncClient = Depends(get_http_client),
    current_user: Profile = Depends(get_current_user)
):
    try:
        task = await create_asana_task(client, task_in)
    except IntegrationNotConfigured as e:
        logger.warning("Asana integration not configured: %s", ", ".join(e.missing))
        raise HTTPException(503, f"Asana integration is not configured. {e}")
    return {"success": True, "task": task}
