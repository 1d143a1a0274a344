"""Port for observing committed user writes."""

from __future__ import annotations

from typing import Protocol

from carvalue_auth.application.ports.user_repository_port import UserRecord


class UserLifecycleHookPort(Protocol):
    """Callbacks invoked by the persistence write path after each commit."""

    def on_create(self, record: UserRecord) -> None:
        """Handle one newly inserted user."""

    def on_update(self, record: UserRecord) -> None:
        """Handle one updated user."""

    def on_delete(self, record: UserRecord) -> None:
        """Handle one removed user."""
