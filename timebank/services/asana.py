import logging
from typing import AsyncGenerator

import httpx

from timebank.config import settings
from timebank.core.errors import IntegrationNotConfigured, UpstreamError
from timebank.schemas.integration import AsanaTaskCreate

logger = logging.getLogger(__name__)


async def get_http_client() -> AsyncGenerator[httpx.AsyncClient, None]:
    async with httpx.AsyncClient(timeout=settings.ASANA_TIMEOUT_SECONDS) as client:
        yield client


def build_task_payload(task_in: AsanaTaskCreate) -> dict:
    data = {
        "name": task_in.name,
        "projects": [settings.ASANA_PROJECT_GID],
        "workspace": settings.ASANA_WORKSPACE_GID,
    }
    if task_in.notes:
        data["notes"] = task_in.notes
    if task_in.due_on:
        data["due_on"] = task_in.due_on.isoformat()
    return {"data": data}


async def create_asana_task(client: httpx.AsyncClient, task_in: AsanaTaskCreate) -> dict:
    """POST the task to Asana once. Failures are reported with the upstream status, never retried."""
    missing = settings.missing_asana_settings
    if missing:
        raise IntegrationNotConfigured(missing)

    try:
        response = await client.post(
            f"{settings.ASANA_API_URL.rstrip('/')}/tasks",
            json=build_task_payload(task_in),
            headers={"Authorization": f"Bearer {settings.ASANA_PAT}"},
        )
    except httpx.RequestError as e:
        logger.error("Asana API request failed: %s", e)
        raise UpstreamError(f"Asana API request failed: {e}")

    if response.is_error:
        logger.error("Asana API error: %s %s", response.status_code, response.text)
        raise UpstreamError(
            f"Asana API error: {response.status_code} {response.reason_phrase}",
            status_code=response.status_code,
            details=response.text,
        )

    return response.json().get("data", {})
