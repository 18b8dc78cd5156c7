"""Bridge to the externally owned override modal."""

import logging
from typing import Any, Awaitable, Callable, List, Optional, Protocol, Tuple

from .dom import Event
from .table_state import event_link, parse_override_user_id

RefreshCallback = Callable[..., Awaitable[Any]]

# The student search table is not scoped to a single quiz.
NO_QUIZ_ID = 0


class OverrideModal(Protocol):
    """Capability surface of the override modal subsystem."""

    def init(self, context_id: int, refresh_callback: RefreshCallback) -> None:
        ...

    def display_modal_form(self, quiz_id: int, user_id: str) -> Any:
        ...


class LoggingOverrideModal:
    """Stand-in modal for headless use: records requests instead of showing a form."""

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger(__name__)
        self.context_id: Optional[int] = None
        self.refresh_callback: Optional[RefreshCallback] = None
        self.requests: List[Tuple[int, str]] = []

    def init(self, context_id: int, refresh_callback: RefreshCallback) -> None:
        self.context_id = context_id
        self.refresh_callback = refresh_callback

    def display_modal_form(self, quiz_id: int, user_id: str) -> None:
        self.logger.info(f"Override requested for user {user_id} (quiz {quiz_id})")
        self.requests.append((quiz_id, user_id))

    async def complete(self) -> Any:
        """Finish the pending override and refresh the table, as the real modal does on submit."""
        if self.refresh_callback is None:
            raise RuntimeError("Modal used before init()")
        return await self.refresh_callback()


class ModalBridge:
    """Forwards override clicks to the modal capability. Owns no state."""

    def __init__(self, modal: OverrideModal, logger: Optional[logging.Logger] = None):
        self.modal = modal
        self.logger = logger or logging.getLogger(__name__)

    def init(self, context_id: int, refresh_callback: RefreshCallback) -> None:
        self.modal.init(context_id, refresh_callback)

    def trigger(self, event: Event) -> Any:
        event.prevent_default()
        link = event_link(event)
        if link is None:
            return None
        user_id = parse_override_user_id(link.id)
        self.logger.debug(f"Opening override modal for user {user_id}")
        return self.modal.display_modal_form(NO_QUIZ_ID, user_id)
