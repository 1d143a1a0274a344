"""Logging adapter for user lifecycle callbacks."""

from __future__ import annotations

import logging

from carvalue_auth.application.ports.user_lifecycle_hook_port import UserLifecycleHookPort
from carvalue_auth.application.ports.user_repository_port import UserRecord

logger = logging.getLogger(__name__)


class LoggingUserLifecycleHook(UserLifecycleHookPort):
    """Log user inserts, updates, and removals by id only."""

    def on_create(self, record: UserRecord) -> None:
        logger.info("user_created user_id=%s", record.user_id)

    def on_update(self, record: UserRecord) -> None:
        logger.info("user_updated user_id=%s", record.user_id)

    def on_delete(self, record: UserRecord) -> None:
        logger.info("user_removed user_id=%s", record.user_id)
