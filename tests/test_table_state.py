"""Tests for table state derivation."""

import json

import pytest

from student_search.dom import Document, Event
from student_search.schemas import PreferenceName
from student_search.table_state import (
    FORCED_SORT_DIRECTION,
    LinkAction,
    classify_link,
    column_occlusion,
    column_visibility,
    derive_page,
    derive_reset_state,
    derive_rows_state,
    derive_sort_state,
    derive_visibility_state,
    link_params,
    parse_override_user_id,
)

TABLE_ID = "local_assessfreq_student_search_table"


def table_document(fragment: str) -> Document:
    return Document(f"<div>{fragment}</div>", base_url="http://testserver/")


def find_link(document: Document, param: str, value: str):
    for link in document.query_selector_all("a"):
        if link_params(link.href).get(param) == value:
            return link
    raise AssertionError(f"no link with {param}={value}")


def click(element) -> Event:
    return Event("click", element)


class TestLinkClassification:
    """Test link parameter parsing."""

    @pytest.mark.parametrize("href, expected", [
        ("http://x/?thide=A", LinkAction.HIDE),
        ("http://x/?tshow=A", LinkAction.SHOW),
        ("http://x/?tsort=A&tdir=", LinkAction.SORT),
        ("http://x/?page=2", LinkAction.PAGE),
        ("http://x/?treset=1", LinkAction.NONE),
        ("#", LinkAction.NONE),
    ])
    def test_classify_link(self, href, expected):
        assert classify_link(href) == expected

    def test_blank_values_are_kept(self):
        assert link_params("http://x/?tsort=A&tdir=") == {"tsort": "A", "tdir": ""}


class TestSortState:
    """Test sort preference derivation."""

    def test_unsorted_column_is_forced_descending(self, make_fragment):
        document = table_document(make_fragment())
        record = derive_sort_state(click(find_link(document, "tsort", "A")), TABLE_ID)

        assert record.preference == PreferenceName.SORTBY
        assert record.values == {"A": FORCED_SORT_DIRECTION}
        assert record.to_args()["values"] == '{"A":"4"}'

    def test_missing_direction_is_forced(self):
        document = table_document('<a href="http://x/?tsort=B">B</a>')
        record = derive_sort_state(click(document.query_selector_all("a")[0]), TABLE_ID)
        assert record.values == {"B": "4"}

    def test_explicit_direction_is_kept(self, make_fragment):
        document = table_document(make_fragment(directions={"C": "3"}))
        record = derive_sort_state(click(find_link(document, "tsort", "C")), TABLE_ID)
        assert record.values == {"C": "3"}

    def test_click_inside_link(self, make_fragment):
        """Clicks on the label span resolve to the enclosing link."""
        document = table_document(make_fragment())
        span = find_link(document, "tsort", "B").query_selector_all("span")[0]
        record = derive_sort_state(click(span), TABLE_ID)
        assert record.values == {"B": "4"}

    def test_link_without_column(self):
        document = table_document('<a href="http://x/?tsort=&tdir=4">?</a>')
        with pytest.raises(ValueError):
            derive_sort_state(click(document.query_selector_all("a")[0]), TABLE_ID)


class TestVisibilityState:
    """Test collapse preference derivation."""

    def test_hide_visible_column(self, make_fragment):
        document = table_document(make_fragment())
        record = derive_visibility_state(
            click(find_link(document, "thide", "B")),
            document.query_selector_all("a"),
            TABLE_ID,
        )

        assert record.preference == PreferenceName.COLLAPSE
        assert record.values == {"A": 0, "B": 1, "C": 0}
        assert json.loads(record.to_args()["values"]) == {"A": 0, "B": 1, "C": 0}

    def test_show_keeps_other_hidden_columns(self, make_fragment):
        columns = ("A", "B", "C", "D", "E")
        hidden = ("B", "C", "E")
        document = table_document(make_fragment(columns=columns, hidden=hidden))
        links = document.query_selector_all("a")

        for column in hidden:
            record = derive_visibility_state(click(find_link(document, "tshow", column)), links, TABLE_ID)

            assert record.values[column] == 0
            for other in hidden:
                if other != column:
                    assert record.values[other] == 1
            assert record.values["A"] == 0
            assert record.values["D"] == 0

    def test_every_rendered_column_has_an_entry(self, make_fragment):
        """Sort, page, reset and override links add no entries."""
        document = table_document(make_fragment(columns=("A", "B", "C", "D"), hidden=("D",)))
        record = derive_visibility_state(
            click(find_link(document, "thide", "A")),
            document.query_selector_all("a"),
            TABLE_ID,
        )
        assert set(record.values) == {"A", "B", "C", "D"}
        assert record.values == {"A": 1, "B": 0, "C": 0, "D": 1}

    def test_link_without_action(self):
        document = table_document('<a href="http://x/?page=1">2</a>')
        link = document.query_selector_all("a")[0]
        with pytest.raises(ValueError):
            derive_visibility_state(click(link), [link], TABLE_ID)

    def test_column_visibility(self, make_fragment):
        document = table_document(make_fragment(hidden=("C",)))
        links = document.query_selector_all("a")
        assert column_occlusion(links) == {"A": 0, "B": 0, "C": 1}
        assert column_visibility(links) == {"A": True, "B": True, "C": False}


class TestOtherDerivations:
    """Test reset, rows, paging and override derivations."""

    def test_reset_is_empty(self):
        record = derive_reset_state(TABLE_ID)
        assert record.preference == PreferenceName.RESET
        assert record.values == {}
        assert record.to_args() == {"tableid": TABLE_ID, "preference": "reset", "values": "{}"}

    def test_rows_from_metric(self):
        document = table_document('<div id="rows"><a href="#" data-metric="50">50</a><a href="#" data-metric="x">x</a></div>')
        good, bad = document.query_selector_all("a")
        assert derive_rows_state(click(good)) == 50
        assert derive_rows_state(click(bad)) is None
        assert derive_rows_state(click(document.require_element_by_id("rows"))) is None

    @pytest.mark.parametrize("href, expected", [
        ("http://x/?page=2", 2),
        ("http://x/?page=0", 0),
        ("http://x/?page=", None),
        ("http://x/?tsort=A", None),
    ])
    def test_page(self, href, expected):
        document = table_document(f'<nav><a href="{href}">p</a></nav>')
        assert derive_page(click(document.query_selector_all("a")[0])) == expected

    def test_page_outside_link(self):
        document = table_document("<nav><span>...</span></nav>")
        assert derive_page(click(document.query_selector_all("span")[0])) is None

    def test_override_user_id(self):
        assert parse_override_user_id("local-assessfreq-override42") == "42"
