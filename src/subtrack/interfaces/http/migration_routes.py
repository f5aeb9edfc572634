"""
Data migration API endpoints.
"""

from typing import Any

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict

from subtrack.application.services.migration_service import MigrationService

from .dependencies import get_current_user, get_migration_service
from .responses import success_response

router = APIRouter(prefix="/migration", tags=["Migration"])


class LegacyDataRequest(BaseModel):
    """Data exported from the client's local storage."""

    model_config = ConfigDict(extra="allow")

    subscriptions: list[Any] | None = None
    budget: Any = None
    settings: dict[str, Any] | None = None


@router.post("")
async def migrate(
    body: LegacyDataRequest,
    user_id: str = Depends(get_current_user),
    migration_service: MigrationService = Depends(get_migration_service),
) -> JSONResponse:
    """Import legacy data. Responds 500 when the batch was rolled back."""
    result = await migration_service.migrate_user_data(user_id, body.model_dump())
    content = result.to_dict()
    details = content.pop("details")
    content["data"] = {"details": details}
    status_code = status.HTTP_200_OK if result.success else status.HTTP_500_INTERNAL_SERVER_ERROR
    return JSONResponse(status_code=status_code, content=content)


@router.get("/status")
async def migration_status(
    user_id: str = Depends(get_current_user),
    migration_service: MigrationService = Depends(get_migration_service),
) -> JSONResponse:
    """Get the current user's migration status."""
    migration = await migration_service.get_migration_status(user_id)
    return success_response(migration.to_dict())


@router.delete("/flag")
async def clear_flag(
    user_id: str = Depends(get_current_user),
    migration_service: MigrationService = Depends(get_migration_service),
) -> JSONResponse:
    """Clear the migration marker so the import can run again."""
    await migration_service.clear_migration_flag(user_id)
    return success_response(message="Migration flag cleared")
