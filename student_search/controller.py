"""
Student search table controller.

Owns one table instance on one page: turns interactions into preference
updates and fragment refreshes, and re-binds handlers after every refresh.
Handlers run synchronously up to the first remote call (so default actions
are suppressed and the document is read before anything changes), then hand
back a coroutine that the document schedules on the event loop.
"""

import logging
from typing import Any, Awaitable, Dict, Optional

from .ajax import AjaxClient
from .binder import EventBinder
from .config import Config
from .dom import Document, Event
from .errors import StudentSearchError
from .modal import LoggingOverrideModal, ModalBridge, OverrideModal
from .notification import Notifier
from .preferences import PreferenceStore
from .renderer import FragmentRenderer, RefreshResult
from .schemas import PreferenceRecord
from .table_state import (
    derive_page,
    derive_reset_state,
    derive_rows_state,
    derive_sort_state,
    derive_visibility_state,
)


class StudentSearch:
    """Controller for the student search table."""

    def __init__(
        self,
        context_id: int,
        document: Document,
        ajax: AjaxClient,
        config: Optional[Config] = None,
        modal: Optional[OverrideModal] = None,
        notifier: Optional[Notifier] = None,
        logger: Optional[logging.Logger] = None,
    ):
        """Initialize controller.

        Args:
            context_id: Context the table is rendered in
            document: Page holding the table
            ajax: Web-service client
            config: Client configuration
            modal: Override modal capability
            notifier: Where failures are surfaced
            logger: Optional logger
        """
        self.context_id = context_id
        self.document = document
        self.config = config or Config()
        self.logger = logger or logging.getLogger(__name__)
        self.notifier = notifier or Notifier(logger=self.logger)
        self.store = PreferenceStore(ajax, self.config.table_preference_id, logger=self.logger)
        self.modal = ModalBridge(modal or LoggingOverrideModal(logger=self.logger), logger=self.logger)
        self.binder = EventBinder(document, self.config, self, logger=self.logger)
        self.renderer = FragmentRenderer(
            document,
            ajax,
            context_id,
            self.config,
            self.notifier,
            on_rendered=self.binder.bind,
            logger=self.logger,
        )

    async def init(self) -> RefreshResult:
        """Wire the static controls and render the table for the first time."""
        self.modal.init(self.context_id, self.get_student_table)

        search_input = self.document.require_element_by_id(self.config.search_input_id)
        search_reset = self.document.require_element_by_id(self.config.search_reset_id)
        rows_picker = self.document.require_element_by_id(self.config.rows_picker_id)

        search_input.add_event_listener("keyup", self.table_search)
        search_input.add_event_listener("paste", self.table_search)
        search_reset.add_event_listener("click", self.table_search_reset)
        rows_picker.add_event_listener("click", self.table_search_rows)

        self.logger.info(f"Student search initialised for context {self.context_id}")
        return await self.get_student_table()

    async def get_student_table(self, page: int = 0) -> RefreshResult:
        return await self.renderer.refresh(page)

    async def _persist_and_refresh(self, record: PreferenceRecord) -> Optional[RefreshResult]:
        try:
            await self.store.set_table_preference(record)
        except StudentSearchError as e:
            self.notifier.exception(e)
            return None
        return await self.get_student_table()

    # Table handlers, bound after every render

    def table_sort(self, event: Event) -> Awaitable[Optional[RefreshResult]]:
        event.prevent_default()
        record = derive_sort_state(event, self.config.table_preference_id)
        return self._persist_and_refresh(record)

    def table_hide(self, event: Event) -> Awaitable[Optional[RefreshResult]]:
        event.prevent_default()
        table = self.document.require_element_by_id(self.config.table_id)
        record = derive_visibility_state(
            event,
            table.query_selector_all("a"),
            self.config.table_preference_id,
        )
        return self._persist_and_refresh(record)

    def table_reset(self, event: Event) -> Awaitable[Optional[RefreshResult]]:
        event.prevent_default()
        return self._persist_and_refresh(derive_reset_state(self.config.table_preference_id))

    def table_nav(self, event: Event) -> Optional[Awaitable[RefreshResult]]:
        event.prevent_default()
        page = derive_page(event)
        if page is None:
            return None
        return self.get_student_table(page)

    def trigger_override_modal(self, event: Event) -> Any:
        return self.modal.trigger(event)

    # Static control handlers, bound once

    def table_search(self, event: Event) -> Optional[Awaitable[RefreshResult]]:
        length = len(event.target.value)
        if length >= self.config.search_min_length or length == 0:
            return self.get_student_table()
        return None

    def table_search_reset(self, event: Event) -> Awaitable[RefreshResult]:
        search_input = self.document.require_element_by_id(self.config.search_input_id)
        search_input.value = ""
        search_input.focus()
        return self.get_student_table()

    def table_search_rows(self, event: Event) -> Optional[Awaitable[Optional[RefreshResult]]]:
        event.prevent_default()
        rows = derive_rows_state(event)
        if rows is None:
            return None
        return self._set_rows(rows)

    async def _set_rows(self, rows: int) -> Optional[RefreshResult]:
        try:
            await self.store.set_user_preference(self.config.rows_preference_type, rows)
        except StudentSearchError as e:
            self.notifier.exception(
                StudentSearchError("Failed to update user preference: rows", details={"cause": e.message})
            )
            return None
        return await self.get_student_table()

    def view_state(self) -> Dict[str, Any]:
        """Snapshot of the refresh inputs and renderer state, for display."""
        return {
            "context_id": self.context_id,
            "search": self.renderer.current_search(),
            "state": self.renderer.state.value,
            "generation": self.renderer.generation,
        }


async def init(
    context_id: int,
    document: Document,
    ajax: AjaxClient,
    **kwargs,
) -> StudentSearch:
    """Create a controller for the page and render its table.

    Args:
        context_id: The current context id
        document: Page holding the table
        ajax: Web-service client
        **kwargs: Passed to StudentSearch

    Returns:
        The initialised controller
    """
    controller = StudentSearch(context_id, document, ajax, **kwargs)
    await controller.init()
    return controller
