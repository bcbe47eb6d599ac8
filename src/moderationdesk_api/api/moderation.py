"""Moderation desk API endpoints."""

import logging

from typing import Annotated

from fastapi import APIRouter
from fastapi import Depends
from fastapi import HTTPException
from fastapi import Query
from fastapi import status

from moderationdesk_api.auth.dependencies import Moderator
from moderationdesk_api.auth.dependencies import get_current_moderator
from moderationdesk_api.config.settings import get_moderation_settings
from moderationdesk_api.database.models.base import SortKey
from moderationdesk_api.database.models.base import SortOrder
from moderationdesk_api.database.models.base import StatusFilter
from moderationdesk_api.database.models.base import SubmissionKind
from moderationdesk_api.database.models.moderation import AssignModeratorRequest
from moderationdesk_api.database.models.moderation import AutoRefreshRequest
from moderationdesk_api.database.models.moderation import BulkActionRequest
from moderationdesk_api.database.models.moderation import FlagRequest
from moderationdesk_api.database.models.moderation import NotesRequest
from moderationdesk_api.database.models.moderation import ReviewRequest
from moderationdesk_api.database.repositories.profile import ProfileRepository
from moderationdesk_api.services.audit_service import AuditService
from moderationdesk_api.services.auto_refresh import AutoRefresher
from moderationdesk_api.services.auto_refresh import get_auto_refresher
from moderationdesk_api.services.exceptions import BulkActionError
from moderationdesk_api.services.exceptions import ItemNotFoundError
from moderationdesk_api.services.exceptions import ModerationConflictError
from moderationdesk_api.services.exceptions import ModerationError
from moderationdesk_api.services.exceptions import ModerationValidationError
from moderationdesk_api.services.moderation_service import ModerationService
from moderationdesk_api.services.moderation_service import get_moderation_service
from moderationdesk_api.services.pipeline import QueueView
from moderationdesk_api.services.pipeline import apply_view
from moderationdesk_api.services.queue_loader import QueueLoader
from moderationdesk_api.services.queue_loader import get_queue_loader

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/moderation", tags=["moderation"])

CurrentModerator = Annotated[Moderator, Depends(get_current_moderator)]
Loader = Annotated[QueueLoader, Depends(get_queue_loader)]
Service = Annotated[ModerationService, Depends(get_moderation_service)]


async def get_audit_service() -> AuditService:
    """Dependency injection for audit service."""
    return AuditService()


async def get_profile_repository() -> ProfileRepository:
    """Dependency injection for profile repository."""
    return ProfileRepository()


def get_queue_view(
    status_filter: Annotated[StatusFilter, Query(alias="status")] = StatusFilter.ALL,
    search: Annotated[str, Query(max_length=200)] = "",
    sort_key: Annotated[SortKey, Query(alias="sort")] = SortKey.DATE,
    sort_order: Annotated[SortOrder, Query(alias="order")] = SortOrder.DESC,
    page: Annotated[int, Query(ge=1)] = 1,
    page_size: Annotated[int | None, Query(ge=1)] = None,
) -> QueueView:
    """Build the view context from query parameters."""
    settings = get_moderation_settings()
    size = min(page_size or settings.page_size, settings.max_page_size)
    return QueueView(
        status=status_filter,
        search=search,
        sort_key=sort_key,
        sort_order=sort_order,
        page=page,
        page_size=size,
    )


View = Annotated[QueueView, Depends(get_queue_view)]


def _to_http_exception(error: ModerationError) -> HTTPException:
    if isinstance(error, ModerationValidationError):
        return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(error))
    if isinstance(error, ItemNotFoundError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(error))
    if isinstance(error, ModerationConflictError):
        return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(error))
    if isinstance(error, BulkActionError):
        return HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={
                "message": str(error),
                "processed_ids": error.processed_ids,
                "failed_id": error.failed_id,
                "remaining_ids": error.remaining_ids,
            },
        )
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(error)
    )


async def _ensure_loaded(loader: QueueLoader) -> None:
    if loader.snapshot.loaded_at is not None:
        return

    try:
        await loader.load()
    except Exception as e:
        logger.exception(f"Initial queue load failed: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to load pending items",
        ) from e


@router.get("/queue")
async def get_moderation_queue(_: CurrentModerator, loader: Loader, view: View):
    """Get one page of the open moderation queue."""
    await _ensure_loaded(loader)
    snapshot = loader.snapshot

    return {
        "status": "ok",
        "data": {
            "page": apply_view(snapshot.moderation_queue, view),
            "stats": snapshot.moderation_stats,
            "loaded_at": snapshot.loaded_at,
        },
    }


@router.get("/stats")
async def get_moderation_stats(_: CurrentModerator, loader: Loader):
    """Get moderation statistics for the recent window."""
    await _ensure_loaded(loader)
    return {"status": "ok", "data": loader.snapshot.moderation_stats}


@router.get("/pending/{kind}")
async def get_pending_submissions(
    kind: SubmissionKind, _: CurrentModerator, loader: Loader, view: View
):
    """Get one page of pending podcasts, comments or articles."""
    await _ensure_loaded(loader)
    return {
        "status": "ok",
        "data": apply_view(loader.snapshot.pending_for(kind), view),
    }


@router.post("/reload")
async def reload_queue(_: CurrentModerator, loader: Loader):
    """Reload every collection from the database."""
    try:
        result = await loader.load()
    except Exception as e:
        logger.exception(f"Queue reload failed: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to load pending items",
        ) from e

    return {
        "status": result.status,
        "data": {"loaded_at": result.snapshot.loaded_at, "errors": result.errors},
    }


@router.post("/{kind}/{item_id}/approve")
async def approve_submission(
    kind: SubmissionKind,
    item_id: str,
    request: ReviewRequest,
    moderator: CurrentModerator,
    service: Service,
):
    """Approve a pending submission (articles are published)."""
    try:
        item = await service.approve(kind, item_id, moderator.id, request.comment)
    except ModerationError as e:
        raise _to_http_exception(e) from e
    except Exception as e:
        logger.exception(f"Error approving {kind.value} {item_id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to approve item",
        ) from e

    return {"status": "ok", "data": item}


@router.post("/{kind}/{item_id}/reject")
async def reject_submission(
    kind: SubmissionKind,
    item_id: str,
    request: ReviewRequest,
    moderator: CurrentModerator,
    service: Service,
):
    """Reject a pending submission; a comment is required."""
    try:
        item = await service.reject(kind, item_id, moderator.id, request.comment)
    except ModerationError as e:
        raise _to_http_exception(e) from e
    except Exception as e:
        logger.exception(f"Error rejecting {kind.value} {item_id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to reject item",
        ) from e

    return {"status": "ok", "data": item}


@router.post("/bulk")
async def bulk_moderation_action(
    request: BulkActionRequest, moderator: CurrentModerator, service: Service
):
    """Apply one action to several items in order."""
    try:
        processed = await service.bulk_action(
            request.action, request.ids, request.kind, moderator.id, request.comment
        )
    except ModerationError as e:
        raise _to_http_exception(e) from e
    except Exception as e:
        logger.exception(f"Error running bulk {request.action.value}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to apply bulk action",
        ) from e

    return {"status": "ok", "data": {"processed_ids": processed}}


@router.post("/queue/{queue_id}/assign")
async def assign_queue_item(
    queue_id: str,
    request: AssignModeratorRequest,
    moderator: CurrentModerator,
    service: Service,
):
    """Assign a queue row to a moderator, or unassign it."""
    try:
        item = await service.assign_moderator(
            queue_id, request.moderator_id, moderator.id, request.expected_updated_at
        )
    except ModerationError as e:
        raise _to_http_exception(e) from e
    except Exception as e:
        logger.exception(f"Error assigning queue item {queue_id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to assign moderator",
        ) from e

    return {"status": "ok", "data": item}


@router.post("/queue/{queue_id}/flag")
async def flag_queue_item(
    queue_id: str,
    request: FlagRequest,
    moderator: CurrentModerator,
    service: Service,
):
    """Flag a queue row and raise it to top priority."""
    try:
        item = await service.flag(
            queue_id, request.reason, moderator.id, request.expected_updated_at
        )
    except ModerationError as e:
        raise _to_http_exception(e) from e
    except Exception as e:
        logger.exception(f"Error flagging queue item {queue_id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to flag item",
        ) from e

    return {"status": "ok", "data": item}


@router.put("/queue/{queue_id}/notes")
async def update_queue_notes(
    queue_id: str,
    request: NotesRequest,
    moderator: CurrentModerator,
    service: Service,
):
    """Replace the moderation notes of a queue row."""
    try:
        item = await service.update_notes(
            queue_id, request.notes, moderator.id, request.expected_updated_at
        )
    except ModerationError as e:
        raise _to_http_exception(e) from e
    except Exception as e:
        logger.exception(f"Error updating notes on queue item {queue_id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to update notes",
        ) from e

    return {"status": "ok", "data": item}


@router.get("/moderators")
async def list_moderators(
    _: CurrentModerator,
    profile_repo: Annotated[ProfileRepository, Depends(get_profile_repository)],
):
    """List accounts that can take queue assignments."""
    try:
        moderators = await profile_repo.get_moderators()
    except Exception as e:
        logger.exception(f"Error listing moderators: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to list moderators",
        ) from e

    return {"status": "ok", "data": moderators}


@router.get("/audit-log")
async def get_audit_log(
    _: CurrentModerator,
    audit_service: Annotated[AuditService, Depends(get_audit_service)],
    limit: Annotated[int, Query(le=100, ge=1)] = 50,
    offset: Annotated[int, Query(ge=0)] = 0,
):
    """Get recent moderation actions."""
    try:
        audit_log = await audit_service.get_audit_log(limit=limit, offset=offset)
    except Exception as e:
        logger.exception(f"Error reading audit log: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to read audit log",
        ) from e

    return {"status": "ok", "data": audit_log}


@router.post("/auto-refresh")
async def set_auto_refresh(
    request: AutoRefreshRequest,
    _: CurrentModerator,
    refresher: Annotated[AutoRefresher, Depends(get_auto_refresher)],
):
    """Turn periodic reloading on or off."""
    if request.enabled:
        refresher.start()
    else:
        await refresher.stop()

    return {
        "status": "ok",
        "data": {"enabled": refresher.enabled, "interval": refresher.interval},
    }
