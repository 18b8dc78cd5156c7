"""
Headless document model for server-rendered table markup.

Wraps a BeautifulSoup tree with the small slice of browser behaviour the
table client relies on: lookup by id/class/tag, class lists, input values,
inner HTML replacement, and click/keyup listeners that bubble to ancestors.

Listener state lives on Element wrappers, which the Document caches per tag.
Replacing an element's inner HTML forgets the wrappers of every removed
descendant, so the new nodes always start with no listeners.
"""

import asyncio
import inspect
import logging
from typing import Any, Callable, Dict, List, Optional, Set
from urllib.parse import urljoin

from bs4 import BeautifulSoup, Tag

from .errors import ElementNotFoundError

logger = logging.getLogger(__name__)

Listener = Callable[["Event"], Any]


def soup(html: str) -> BeautifulSoup:
    return BeautifulSoup(html, "html.parser")


class Event:
    """A dispatched interaction."""

    def __init__(self, type: str, target: "Element"):
        self.type = type
        self.target = target
        self.current_target: Optional["Element"] = None
        self.default_prevented = False
        self.propagation_stopped = False

    def prevent_default(self) -> None:
        self.default_prevented = True

    def stop_propagation(self) -> None:
        self.propagation_stopped = True

    def __repr__(self) -> str:
        return f"Event({self.type!r}, target={self.target!r})"


class Element:
    """Browser-like view of a single tag."""

    def __init__(self, document: "Document", tag: Tag):
        self.document = document
        self.tag = tag
        self._listeners: Dict[str, List[Listener]] = {}

    def __repr__(self) -> str:
        ident = f"#{self.id}" if self.id else ""
        return f"<{self.tag_name}{ident}>"

    # Attributes

    @property
    def tag_name(self) -> str:
        return (self.tag.name or "").lower()

    @property
    def id(self) -> str:
        return self.tag.get("id", "")

    @property
    def href(self) -> str:
        """Absolute href, resolved against the document base URL."""
        raw = self.tag.get("href")
        if raw is None:
            return ""
        return urljoin(self.document.base_url, raw)

    def get_attribute(self, name: str) -> Optional[str]:
        value = self.tag.get(name)
        if isinstance(value, list):
            return " ".join(value)
        return value

    def data(self, name: str) -> Optional[str]:
        """Read a data-* attribute."""
        return self.tag.get(f"data-{name}")

    @property
    def value(self) -> str:
        return self.tag.get("value", "")

    @value.setter
    def value(self, new_value: str) -> None:
        self.tag["value"] = new_value

    @property
    def text(self) -> str:
        return self.tag.get_text()

    # Class list

    @property
    def class_list(self) -> List[str]:
        return list(self.tag.get("class", []))

    def has_class(self, class_names: str) -> bool:
        """True when every space-separated class in class_names is present."""
        return set(class_names.split()).issubset(self.class_list)

    def add_class(self, class_name: str) -> None:
        classes = self.class_list
        if class_name not in classes:
            classes.append(class_name)
            self.tag["class"] = classes

    def remove_class(self, class_name: str) -> None:
        classes = [c for c in self.class_list if c != class_name]
        if classes:
            self.tag["class"] = classes
        elif "class" in self.tag.attrs:
            del self.tag["class"]

    # Traversal

    @property
    def parent(self) -> Optional["Element"]:
        parent = self.tag.parent
        if parent is None or isinstance(parent, BeautifulSoup):
            return None
        return self.document.wrap(parent)

    def closest(self, tag_name: str) -> Optional["Element"]:
        """This element or its nearest ancestor with the given tag name."""
        element: Optional[Element] = self
        while element is not None:
            if element.tag_name == tag_name.lower():
                return element
            element = element.parent
        return None

    def query_selector_all(self, tag_name: str) -> List["Element"]:
        return [self.document.wrap(t) for t in self.tag.find_all(tag_name)]

    def get_elements_by_class_name(self, class_names: str) -> List["Element"]:
        """Descendants carrying every space-separated class, in document order."""
        required = set(class_names.split())
        matches = self.tag.find_all(lambda t: required.issubset(t.get("class", [])))
        return [self.document.wrap(t) for t in matches]

    # Content

    @property
    def inner_html(self) -> str:
        return "".join(str(child) for child in self.tag.contents)

    @inner_html.setter
    def inner_html(self, markup: str) -> None:
        for descendant in self.tag.descendants:
            if isinstance(descendant, Tag):
                self.document.forget(descendant)
        self.tag.clear(decompose=True)
        fragment = soup(markup)
        for child in list(fragment.contents):
            self.tag.append(child.extract())

    # Events

    def add_event_listener(self, type: str, listener: Listener) -> None:
        self._listeners.setdefault(type, []).append(listener)

    def listeners(self, type: str) -> List[Listener]:
        return list(self._listeners.get(type, []))

    def dispatch_event(self, event: Event) -> List[asyncio.Task]:
        """Run listeners on this element, then bubble to ancestors.

        Coroutines returned by listeners are scheduled on the running loop and
        the call returns without waiting for them.
        """
        tasks = []
        element: Optional[Element] = self
        while element is not None and not event.propagation_stopped:
            event.current_target = element
            for listener in element.listeners(event.type):
                result = listener(event)
                if inspect.isawaitable(result):
                    tasks.append(self.document.schedule(result))
            element = element.parent
        event.current_target = None
        return tasks

    def click(self) -> Event:
        event = Event("click", self)
        self.dispatch_event(event)
        return event

    def focus(self) -> None:
        self.document.active_element = self


class Document:
    """A parsed page plus the bookkeeping browsers keep beside the DOM."""

    def __init__(self, html: str, base_url: str = "http://localhost/"):
        self.soup = soup(html)
        self.base_url = base_url
        self.active_element: Optional[Element] = None
        self._elements: Dict[int, Element] = {}
        self._pending: Set[asyncio.Task] = set()

    def wrap(self, tag: Tag) -> Element:
        element = self._elements.get(id(tag))
        if element is None or element.tag is not tag:
            element = Element(self, tag)
            self._elements[id(tag)] = element
        return element

    def forget(self, tag: Tag) -> None:
        self._elements.pop(id(tag), None)

    def get_element_by_id(self, element_id: str) -> Optional[Element]:
        tag = self.soup.find(id=element_id)
        return self.wrap(tag) if tag is not None else None

    def require_element_by_id(self, element_id: str) -> Element:
        element = self.get_element_by_id(element_id)
        if element is None:
            raise ElementNotFoundError(f"No element with id '{element_id}'")
        return element

    def get_elements_by_class_name(self, class_names: str) -> List[Element]:
        required = set(class_names.split())
        matches = self.soup.find_all(lambda t: required.issubset(t.get("class", [])))
        return [self.wrap(t) for t in matches]

    def query_selector_all(self, tag_name: str) -> List[Element]:
        return [self.wrap(t) for t in self.soup.find_all(tag_name)]

    # Task tracking

    def schedule(self, awaitable) -> asyncio.Task:
        task = asyncio.ensure_future(awaitable)
        self._pending.add(task)
        task.add_done_callback(self._task_done)
        return task

    def _task_done(self, task: asyncio.Task) -> None:
        self._pending.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.error(f"Unhandled error in event listener: {error}", exc_info=error)

    @property
    def pending(self) -> int:
        return len(self._pending)

    async def settle(self) -> None:
        """Wait until every scheduled listener task, including ones they spawn, has finished."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    def __str__(self) -> str:
        return str(self.soup)
