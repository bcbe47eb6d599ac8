"""Moderation actions: approve, reject, flag, assign and their bulk forms."""

import logging

from collections.abc import Callable
from collections.abc import Sequence
from datetime import UTC
from datetime import datetime
from typing import Any

from moderationdesk_api.config.settings import get_moderation_settings
from moderationdesk_api.database.models.admin_action import AdminActionType
from moderationdesk_api.database.models.base import BulkAction
from moderationdesk_api.database.models.base import ModerationStatus
from moderationdesk_api.database.models.base import SubmissionKind
from moderationdesk_api.database.models.base import SubmissionStatus
from moderationdesk_api.database.models.queue import ModerationQueueItem
from moderationdesk_api.database.models.submission import BaseSubmission
from moderationdesk_api.database.repositories.queue import (
    ModerationQueueRepository,
)
from moderationdesk_api.database.repositories.submission import (
    SUBMISSION_REPOSITORIES,
)
from moderationdesk_api.database.repositories.submission import (
    SubmissionRepository,
)
from moderationdesk_api.services.audit_service import AuditService
from moderationdesk_api.services.exceptions import BulkActionError
from moderationdesk_api.services.exceptions import ItemNotFoundError
from moderationdesk_api.services.exceptions import ModerationConflictError
from moderationdesk_api.services.exceptions import ModerationValidationError
from moderationdesk_api.services.queue_loader import QueueLoader
from moderationdesk_api.services.queue_loader import get_queue_loader

logger = logging.getLogger(__name__)

REJECTION_REASON_REQUIRED = "Please provide a reason for rejection"
SELECTION_REQUIRED = "Please select at least one item"
QUEUE_TARGET = "moderation_queue"

TERMINAL_STATUSES = {ModerationStatus.APPROVED.value, ModerationStatus.REJECTED.value}


def _item_id(item: Any) -> str:
    return str(getattr(item, "id", item))


def _as_utc(value: datetime | None) -> datetime | None:
    # Naive timestamps are taken to be UTC, matching the pool timezone
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=UTC)


class ModerationService:
    """Service applying moderator decisions to submissions and queue rows.

    After every successful action the loader re-reads the whole working set.
    """

    def __init__(
        self,
        loader: QueueLoader | None = None,
        queue_repo: ModerationQueueRepository | None = None,
        submission_repos: dict[SubmissionKind, SubmissionRepository] | None = None,
        audit_service: AuditService | None = None,
        flag_priority: int | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        """Initialize the moderation service."""
        self.loader = loader or get_queue_loader()
        self.queue_repo = queue_repo or ModerationQueueRepository()
        self.submission_repos = submission_repos or {
            kind: repo_class() for kind, repo_class in SUBMISSION_REPOSITORIES.items()
        }
        self.audit_service = audit_service or AuditService()
        self.flag_priority = flag_priority or get_moderation_settings().flag_priority
        self._clock = clock or (lambda: datetime.now(UTC))

    # Submissions

    async def approve(
        self,
        kind: SubmissionKind | str,
        item: BaseSubmission | str,
        actor_id: str,
        comment: str | None = None,
    ) -> BaseSubmission:
        """Approve a pending submission. Articles are published instead."""
        kind = SubmissionKind(kind)
        updated = await self._approve(kind, _item_id(item), actor_id, comment)
        await self._reload()
        return updated

    async def reject(
        self,
        kind: SubmissionKind | str,
        item: BaseSubmission | str,
        actor_id: str,
        comment: str | None,
    ) -> BaseSubmission:
        """Reject a pending submission; a reason is mandatory."""
        self._require_reason(comment)
        kind = SubmissionKind(kind)
        updated = await self._reject(kind, _item_id(item), actor_id, comment)
        await self._reload()
        return updated

    async def _approve(
        self, kind: SubmissionKind, item_id: str, actor_id: str, comment: str | None
    ) -> BaseSubmission:
        status = (
            SubmissionStatus.PUBLISHED
            if kind is SubmissionKind.ARTICLES
            else SubmissionStatus.APPROVED
        )
        return await self._review(
            kind, item_id, status, comment or None, actor_id, AdminActionType.APPROVE
        )

    async def _reject(
        self, kind: SubmissionKind, item_id: str, actor_id: str, comment: str | None
    ) -> BaseSubmission:
        return await self._review(
            kind,
            item_id,
            SubmissionStatus.REJECTED,
            comment,
            actor_id,
            AdminActionType.REJECT,
        )

    async def _review(
        self,
        kind: SubmissionKind,
        item_id: str,
        status: SubmissionStatus,
        comment: str | None,
        actor_id: str,
        action: AdminActionType,
    ) -> BaseSubmission:
        repo = self.submission_repos[kind]
        data: dict[str, Any] = {
            "status": status.value,
            "admin_comments": comment,
            "reviewed_at": self._clock(),
            "reviewed_by": actor_id,
        }

        updated = await repo.record_review(item_id, data)
        if updated is None:
            if await repo.exists(item_id):
                raise ModerationConflictError(kind.value, item_id, "is no longer pending")
            raise ItemNotFoundError(kind.value, item_id)

        # Only touch local state once the write is confirmed
        self.loader.discard(kind, item_id)
        logger.info(f"{actor_id} set {kind.value} {item_id} to {status.value}")

        await self.audit_service.record(
            actor_id,
            action,
            kind.value,
            item_id,
            {"status": status.value, "comment": comment},
        )
        return updated

    # Queue rows

    async def flag(
        self,
        queue_id: str,
        reason: str | None,
        actor_id: str,
        expected_updated_at: datetime | None = None,
    ) -> ModerationQueueItem:
        """Flag a queue row for attention, forcing top priority."""
        updated = await self._flag(queue_id, reason, actor_id, expected_updated_at)
        await self._reload()
        return updated

    async def _flag(
        self,
        queue_id: str,
        reason: str | None,
        actor_id: str,
        expected_updated_at: datetime | None = None,
    ) -> ModerationQueueItem:
        current = await self._get_queue_item(queue_id)
        if current.status in TERMINAL_STATUSES:
            raise ModerationConflictError(
                QUEUE_TARGET, queue_id, f"is already {current.status}"
            )

        data: dict[str, Any] = {
            "status": ModerationStatus.FLAGGED.value,
            "priority": self.flag_priority,
        }
        if reason:
            data["moderation_notes"] = reason

        updated = await self._update_queue_item(current, data, expected_updated_at)
        await self.audit_service.record(
            actor_id, AdminActionType.FLAG, QUEUE_TARGET, queue_id, {"reason": reason}
        )
        return updated

    async def assign_moderator(
        self,
        queue_id: str,
        moderator_id: str | None,
        actor_id: str,
        expected_updated_at: datetime | None = None,
    ) -> ModerationQueueItem:
        """Assign a queue row to a moderator; an empty id unassigns it."""
        current = await self._get_queue_item(queue_id)
        updated = await self._update_queue_item(
            current,
            {"assigned_moderator_id": moderator_id or None},
            expected_updated_at,
        )

        await self.audit_service.record(
            actor_id,
            AdminActionType.ASSIGN_MODERATOR,
            QUEUE_TARGET,
            queue_id,
            {"moderator_id": moderator_id or None},
        )
        await self._reload()
        return updated

    async def update_notes(
        self,
        queue_id: str,
        notes: str | None,
        actor_id: str,
        expected_updated_at: datetime | None = None,
    ) -> ModerationQueueItem:
        """Replace the free-text moderation notes of a queue row."""
        current = await self._get_queue_item(queue_id)
        updated = await self._update_queue_item(
            current, {"moderation_notes": notes or None}, expected_updated_at
        )

        await self.audit_service.record(
            actor_id, AdminActionType.UPDATE_NOTES, QUEUE_TARGET, queue_id
        )
        await self._reload()
        return updated

    async def _get_queue_item(self, queue_id: str) -> ModerationQueueItem:
        item = await self.queue_repo.get_by_id(queue_id)
        if item is None:
            raise ItemNotFoundError(QUEUE_TARGET, queue_id)
        return item

    async def _update_queue_item(
        self,
        current: ModerationQueueItem,
        data: dict[str, Any],
        expected_updated_at: datetime | None,
    ) -> ModerationQueueItem:
        """Write ``data`` only if the row is unchanged since it was read."""
        expected = _as_utc(expected_updated_at)
        if expected is not None and expected != _as_utc(current.updated_at):
            raise ModerationConflictError(
                QUEUE_TARGET, current.id, "was changed by someone else"
            )

        updated = await self.queue_repo.update_where(
            current.id, data, expected={"updated_at": current.updated_at}
        )
        if updated is None:
            raise ModerationConflictError(
                QUEUE_TARGET, current.id, "was changed by someone else"
            )
        return updated

    # Bulk

    async def bulk_action(
        self,
        action: BulkAction | str,
        ids: Sequence[str],
        kind: SubmissionKind | str,
        actor_id: str,
        comment: str | None = None,
    ) -> list[str]:
        """Apply one action to several items, strictly in the given order.

        Everything is validated before the first write. The first failing
        item stops the run; items already processed keep their new state.
        Flag actions take moderation queue ids.
        """
        action = BulkAction(action)
        kind = SubmissionKind(kind)
        if not ids:
            raise ModerationValidationError(SELECTION_REQUIRED)
        if action is BulkAction.REJECT:
            self._require_reason(comment)

        processed: list[str] = []
        try:
            for index, item_id in enumerate(ids):
                try:
                    if action is BulkAction.APPROVE:
                        await self._approve(kind, item_id, actor_id, comment)
                    elif action is BulkAction.REJECT:
                        await self._reject(kind, item_id, actor_id, comment)
                    else:
                        await self._flag(item_id, comment, actor_id)
                except Exception as e:
                    logger.error(f"Bulk {action.value} stopped at {item_id}: {e}")
                    raise BulkActionError(
                        action.value,
                        processed_ids=list(processed),
                        failed_id=item_id,
                        remaining_ids=list(ids[index + 1 :]),
                        cause=e,
                    ) from e
                processed.append(item_id)
        finally:
            if processed:
                await self.audit_service.record(
                    actor_id,
                    AdminActionType(f"bulk_{action.value}"),
                    QUEUE_TARGET if action is BulkAction.FLAG else kind.value,
                    details={"ids": processed, "requested": list(ids)},
                )
                await self._reload()

        return processed

    @staticmethod
    def _require_reason(comment: str | None) -> None:
        if not comment or not comment.strip():
            raise ModerationValidationError(REJECTION_REASON_REQUIRED)

    async def _reload(self) -> None:
        await self.loader.load()


async def get_moderation_service() -> ModerationService:
    """Dependency injection for moderation service."""
    return ModerationService(loader=get_queue_loader())
