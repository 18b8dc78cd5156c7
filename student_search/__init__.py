"""Client-side controller for the student search table."""

from .ajax import AjaxClient
from .config import Config, load_config
from .controller import StudentSearch, init
from .dom import Document, Element, Event
from .errors import AjaxError, ElementNotFoundError, FragmentError, PreferenceError, StudentSearchError
from .renderer import RefreshResult, RenderState

__all__ = [
    "AjaxClient",
    "Config",
    "load_config",
    "StudentSearch",
    "init",
    "Document",
    "Element",
    "Event",
    "AjaxError",
    "ElementNotFoundError",
    "FragmentError",
    "PreferenceError",
    "StudentSearchError",
    "RefreshResult",
    "RenderState",
]
