"""Attaches interaction handlers to the current table markup.

Runs once after every fragment replacement. It keeps no record of what it
bound before: every call sees only nodes inserted by the latest replacement,
so each actionable element ends up with exactly one handler.
"""

import logging
from collections import Counter
from typing import Any, Dict, Optional, Protocol

from .config import Config
from .dom import Document, Event
from .table_state import LinkAction, classify_link


class TableActions(Protocol):
    """Handlers the binder wires up. Each may return a coroutine to be scheduled."""

    def table_hide(self, event: Event) -> Any:
        ...

    def table_sort(self, event: Event) -> Any:
        ...

    def table_reset(self, event: Event) -> Any:
        ...

    def table_nav(self, event: Event) -> Any:
        ...

    def trigger_override_modal(self, event: Event) -> Any:
        ...


def prevent_navigation(event: Event) -> None:
    event.prevent_default()


class EventBinder:
    def __init__(
        self,
        document: Document,
        config: Config,
        actions: TableActions,
        logger: Optional[logging.Logger] = None,
    ):
        self.document = document
        self.config = config
        self.actions = actions
        self.logger = logger or logging.getLogger(__name__)

    def bind(self) -> Dict[str, int]:
        """Attach one listener per actionable element.

        Returns:
            Number of listeners attached, by kind
        """
        table = self.document.require_element_by_id(self.config.table_id)
        card = self.document.require_element_by_id(self.config.table_card_id)
        bound: Counter = Counter()

        for link in table.query_selector_all("a"):
            action = classify_link(link.href)
            if action in (LinkAction.HIDE, LinkAction.SHOW):
                link.add_event_listener("click", self.actions.table_hide)
                bound["visibility"] += 1
            elif action == LinkAction.SORT:
                link.add_event_listener("click", self.actions.table_sort)
                bound["sort"] += 1

        reset_links = table.get_elements_by_class_name(self.config.reset_class)
        if reset_links:
            reset_links[0].add_event_listener("click", self.actions.table_reset)
            bound["reset"] += 1

        for link in table.get_elements_by_class_name(self.config.override_class):
            link.add_event_listener("click", self.actions.trigger_override_modal)
            bound["override"] += 1

        for link in table.get_elements_by_class_name(self.config.disabled_class):
            link.add_event_listener("click", prevent_navigation)
            bound["disabled"] += 1

        # Paging controls render above and below the table.
        for nav in card.query_selector_all("nav"):
            nav.add_event_listener("click", self.actions.table_nav)
            bound["nav"] += 1

        self.logger.debug(f"Bound table listeners: {dict(bound)}")
        return dict(bound)
