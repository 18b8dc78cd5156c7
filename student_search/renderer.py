"""Fragment refresh: fetch the rendered table body and splice it in."""

import logging
from enum import Enum
from typing import Callable, Optional

from .config import Config
from .dom import Document
from .errors import FragmentError, StudentSearchError
from .notification import Notifier
from .schemas import FragmentParams


class RenderState(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    ERROR = "error"


class RefreshResult(str, Enum):
    APPLIED = "applied"
    STALE = "stale"
    FAILED = "failed"


class FragmentRenderer:
    """Issues one fragment request per refresh and replaces the table body.

    Every refresh is stamped with a generation number. With
    ``discard_stale_responses`` on, only the response to the latest issued
    refresh touches the document; otherwise whichever response resolves last
    wins.
    """

    def __init__(
        self,
        document: Document,
        ajax,
        context_id: int,
        config: Config,
        notifier: Notifier,
        on_rendered: Optional[Callable[[], object]] = None,
        logger: Optional[logging.Logger] = None,
    ):
        """Initialize renderer.

        Args:
            document: Page holding the table card and search input
            ajax: Client exposing ``load_fragment``
            context_id: Context the fragment is rendered in
            config: Client configuration
            notifier: Where fetch failures are surfaced
            on_rendered: Called after every applied replacement (re-binding)
            logger: Optional logger
        """
        self.document = document
        self.ajax = ajax
        self.context_id = context_id
        self.config = config
        self.notifier = notifier
        self.on_rendered = on_rendered
        self.logger = logger or logging.getLogger(__name__)
        self.state = RenderState.IDLE
        self.generation = 0
        self.in_flight = 0

    def _card(self):
        return self.document.require_element_by_id(self.config.table_card_id)

    def _spinner(self):
        return self._card().get_elements_by_class_name(self.config.spinner_class)[0]

    def _table_body(self):
        return self._card().get_elements_by_class_name(self.config.table_body_class)[0]

    def current_search(self) -> str:
        return self.document.require_element_by_id(self.config.search_input_id).value.strip()

    def _request_done(self) -> None:
        self.in_flight -= 1
        if self.in_flight == 0:
            self._spinner().add_class(self.config.hidden_class)
            if self.state == RenderState.LOADING:
                self.state = RenderState.IDLE

    async def refresh(self, page: int = 0) -> RefreshResult:
        """Fetch and apply the table fragment for the current search and page.

        Args:
            page: Zero-based page to render

        Returns:
            Whether the response was applied, dropped as stale, or failed
        """
        params = FragmentParams(search=self.current_search(), page=page)
        self.generation += 1
        generation = self.generation
        self.in_flight += 1

        self._spinner().remove_class(self.config.hidden_class)
        self.state = RenderState.LOADING
        self.logger.debug(f"Refresh #{generation}: search={params.search!r} page={params.page}")

        try:
            html = await self.ajax.load_fragment(
                self.config.fragment_component,
                self.config.fragment_name,
                self.context_id,
                params.to_params(),
            )
        except StudentSearchError as e:
            self._request_done()
            if self._is_stale(generation):
                self.logger.warning(f"Refresh #{generation} failed after being superseded: {e}")
                return RefreshResult.STALE
            self.state = RenderState.ERROR
            error = e if isinstance(e, FragmentError) else FragmentError(details={"cause": e.message})
            self.notifier.exception(error)
            return RefreshResult.FAILED

        self._request_done()
        if self._is_stale(generation):
            self.logger.info(f"Dropping stale response #{generation}; latest is #{self.generation}")
            return RefreshResult.STALE

        self._table_body().inner_html = html
        self.state = RenderState.LOADING if self.in_flight else RenderState.IDLE
        self.logger.debug(f"Refresh #{generation} applied")

        if self.on_rendered is not None:
            self.on_rendered()
        return RefreshResult.APPLIED

    def _is_stale(self, generation: int) -> bool:
        return self.config.discard_stale_responses and generation != self.generation
