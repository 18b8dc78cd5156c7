"""
Pure derivations from table links to preference records.

The server renders only the action each column still offers (a "hide" link
for a visible column, a "show" link for a hidden one), never the current
state itself. Everything here reconstructs state from those links and never
performs I/O.
"""

from enum import Enum
from typing import Dict, Iterable, Optional
from urllib.parse import parse_qs, urlsplit

from .dom import Element, Event
from .schemas import PreferenceName, PreferenceRecord

SORT_PARAM = "tsort"
SORT_DIRECTION_PARAM = "tdir"
HIDE_PARAM = "thide"
SHOW_PARAM = "tshow"
PAGE_PARAM = "page"

# Sent when the clicked column carries no direction yet, so the first click
# always sorts descending instead of toggling from neutral to ascending.
FORCED_SORT_DIRECTION = "4"

OCCLUDED = 1
NOT_OCCLUDED = 0

OVERRIDE_ID_PREFIX_LENGTH = 25


class LinkAction(str, Enum):
    """What an anchor in the table asks for."""

    HIDE = "hide"
    SHOW = "show"
    SORT = "sort"
    PAGE = "page"
    NONE = "none"


def link_params(href: str) -> Dict[str, str]:
    """First value of every query parameter in href, blanks included."""
    query = parse_qs(urlsplit(href).query, keep_blank_values=True)
    return {name: values[0] for name, values in query.items()}


def classify_link(href: str) -> LinkAction:
    params = link_params(href)
    if HIDE_PARAM in params:
        return LinkAction.HIDE
    if SHOW_PARAM in params:
        return LinkAction.SHOW
    if SORT_PARAM in params:
        return LinkAction.SORT
    if PAGE_PARAM in params:
        return LinkAction.PAGE
    return LinkAction.NONE


def event_link(event: Event) -> Optional[Element]:
    """The anchor an event landed on or inside of."""
    return event.target.closest("a")


def _require_link(event: Event) -> Element:
    link = event_link(event)
    if link is None:
        raise ValueError(f"{event!r} did not originate from a link")
    return link


def derive_sort_state(event: Event, table_id: str) -> PreferenceRecord:
    """Sort preference for a clicked sort arrow.

    Args:
        event: Click on (or inside) a link carrying tsort/tdir
        table_id: Table preference id

    Returns:
        A sortby record mapping the column to its direction code
    """
    params = link_params(_require_link(event).href)
    column = params.get(SORT_PARAM)
    if not column:
        raise ValueError("Sort link does not name a column")

    direction = params.get(SORT_DIRECTION_PARAM) or FORCED_SORT_DIRECTION

    return PreferenceRecord(
        table_id=table_id,
        preference=PreferenceName.SORTBY,
        values={column: direction},
    )


def column_occlusion(links: Iterable[Element]) -> Dict[str, int]:
    """Reconstruct per-column occlusion flags from the hide/show links present.

    A column offering "show" is currently hidden (1); a column offering
    "hide" is currently visible (0). Links of any other kind are skipped.
    """
    occlusion: Dict[str, int] = {}
    for link in links:
        params = link_params(link.href)
        if HIDE_PARAM in params:
            occlusion[params[HIDE_PARAM]] = NOT_OCCLUDED
        elif SHOW_PARAM in params:
            occlusion[params[SHOW_PARAM]] = OCCLUDED
    return occlusion


def column_visibility(links: Iterable[Element]) -> Dict[str, bool]:
    return {column: flag == NOT_OCCLUDED for column, flag in column_occlusion(links).items()}


def derive_visibility_state(event: Event, links: Iterable[Element], table_id: str) -> PreferenceRecord:
    """Collapse preference for a clicked hide/show link.

    Rebuilds the occlusion flag of every column from the full link set, then
    overwrites the clicked column according to the requested action.

    Args:
        event: Click on a link carrying thide or tshow
        links: Every anchor currently in the table
        table_id: Table preference id

    Returns:
        A collapse record with an entry for every column in the table
    """
    params = link_params(_require_link(event).href)
    if HIDE_PARAM in params:
        target_column, target_flag = params[HIDE_PARAM], OCCLUDED
    elif SHOW_PARAM in params:
        target_column, target_flag = params[SHOW_PARAM], NOT_OCCLUDED
    else:
        raise ValueError("Link carries neither thide nor tshow")

    occlusion = column_occlusion(links)
    occlusion[target_column] = target_flag

    return PreferenceRecord(
        table_id=table_id,
        preference=PreferenceName.COLLAPSE,
        values=occlusion,
    )


def derive_reset_state(table_id: str) -> PreferenceRecord:
    """Reset preference: an empty value clears every stored view preference."""
    return PreferenceRecord(table_id=table_id, preference=PreferenceName.RESET, values={})


def derive_rows_state(event: Event) -> Optional[int]:
    """Page size chosen in the rows picker, or None if the click missed an option."""
    if event.target.tag_name != "a":
        return None
    metric = event.target.data("metric")
    try:
        return int(metric)
    except (TypeError, ValueError):
        return None


def derive_page(event: Event) -> Optional[int]:
    """Page requested by a pagination click, or None if there is none."""
    link = event_link(event)
    if link is None:
        return None
    page = link_params(link.href).get(PAGE_PARAM)
    if not page:
        return None
    try:
        return int(page)
    except ValueError:
        return None


def parse_override_user_id(element_id: str) -> str:
    """User id carried after the fixed prefix of an override link id."""
    return element_id[OVERRIDE_ID_PREFIX_LENGTH:]
