"""Errors raised by the moderation services."""


class ModerationError(Exception):
    """Base class for moderation errors."""


class ModerationValidationError(ModerationError):
    """Request rejected before touching the database."""


class ItemNotFoundError(ModerationError):
    """The targeted row does not exist."""

    def __init__(self, target_type: str, item_id: str):
        self.target_type = target_type
        self.item_id = item_id
        super().__init__(f"{target_type} {item_id} not found")


class ModerationConflictError(ModerationError):
    """The row changed since the moderator last saw it."""

    def __init__(self, target_type: str, item_id: str, reason: str):
        self.target_type = target_type
        self.item_id = item_id
        super().__init__(f"{target_type} {item_id} {reason}")


class BulkActionError(ModerationError):
    """A bulk action stopped part way through.

    Items in ``processed_ids`` were already changed and stay changed.
    """

    def __init__(
        self,
        action: str,
        processed_ids: list[str],
        failed_id: str,
        remaining_ids: list[str],
        cause: Exception,
    ):
        self.action = action
        self.processed_ids = processed_ids
        self.failed_id = failed_id
        self.remaining_ids = remaining_ids
        super().__init__(
            f"Bulk {action} failed on {failed_id} after {len(processed_ids)} "
            f"item(s): {cause}"
        )
