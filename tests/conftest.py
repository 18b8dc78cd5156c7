"""Pytest configuration and fixtures."""

import asyncio
import json
import logging
from collections import deque
from typing import Dict, Iterable, Optional

import pytest

from student_search.common.logging_config import setup_logging
from student_search.config import Config
from student_search.controller import StudentSearch
from student_search.dom import Document
from student_search.errors import AjaxError
from student_search.modal import LoggingOverrideModal
from student_search.notification import Notifier
from student_search.page_shell import build_page_shell

PAGE_URL = "http://testserver/local/assessfreq/student_search.php"


def build_table_fragment(
    columns: Iterable[str] = ("A", "B", "C"),
    hidden: Iterable[str] = (),
    directions: Optional[Dict[str, str]] = None,
    users: Iterable[str] = ("42", "43"),
    disabled: int = 1,
    pages: int = 3,
    marker: str = "",
) -> str:
    """Render table markup the way the server fragment does."""
    hidden = set(hidden)
    directions = directions or {}

    headers = []
    for column in columns:
        if column in hidden:
            headers.append(f'<th><a href="{PAGE_URL}?tshow={column}">Show {column}</a></th>')
        else:
            tdir = directions.get(column, "")
            headers.append(
                f'<th><a href="{PAGE_URL}?tsort={column}&amp;tdir={tdir}"><span>{column}</span></a>'
                f' <a href="{PAGE_URL}?thide={column}"><i class="icon"></i></a></th>'
            )

    rows = []
    for user in users:
        rows.append(
            f'<tr><td>User {user}</td><td>'
            f'<a id="local-assessfreq-override{user}" class="action-icon override" href="#">'
            f'<i class="icon"></i></a></td></tr>'
        )
    for index in range(disabled):
        rows.append(
            f'<tr><td>Locked {index}</td><td>'
            f'<a class="action-icon disabled" href="#"><i class="icon"></i></a></td></tr>'
        )

    nav = ""
    if pages > 1:
        items = "".join(
            f'<li class="page-item"><a class="page-link" href="{PAGE_URL}?page={page}">{page + 1}</a></li>'
            for page in range(pages)
        )
        nav = f'<nav aria-label="Page"><ul class="pagination">{items}</ul></nav>'

    return (
        f'<div id="local-assessfreq-student-search" data-marker="{marker}">'
        f'<a class="resettable" href="{PAGE_URL}?treset=1">Reset table preferences</a>'
        f"{nav}"
        f'<table><thead><tr>{"".join(headers)}</tr></thead>'
        f'<tbody>{"".join(rows)}</tbody></table>'
        f"{nav}"
        f"</div>"
    )


class FakeAjax:
    """In-memory web-service client recording every call."""

    def __init__(self, fragment_html: str):
        self.fragment_html = fragment_html
        self.calls = []
        self.fragment_calls = []
        self.queued = deque()
        self.failing_methods = set()
        self.closed = False

    async def call(self, methodname, args):
        self.calls.append((methodname, args))
        if methodname in self.failing_methods:
            raise AjaxError(f"{methodname} rejected")
        return None

    async def load_fragment(self, component, callback, contextid, params):
        self.fragment_calls.append({
            "component": component,
            "callback": callback,
            "contextid": contextid,
            "data": json.loads(params["data"]),
        })
        response = self.queued.popleft() if self.queued else self.fragment_html
        if isinstance(response, asyncio.Future):
            response = await response
        if isinstance(response, BaseException):
            raise response
        return response

    async def close(self):
        self.closed = True


@pytest.fixture(autouse=True)
def reset_logging():
    """Drop handlers bound to captured streams once a test ends."""
    yield
    logging.getLogger("student_search").handlers.clear()


@pytest.fixture
def make_fragment():
    return build_table_fragment


@pytest.fixture
def config():
    return Config(
        _env_file=None,
        base_url="http://testserver",
        sesskey="sesskey123",
        context_id=7,
    )


@pytest.fixture
def logger():
    """Create test logger."""
    return setup_logging(level="DEBUG")


@pytest.fixture
def fragment_html():
    return build_table_fragment()


@pytest.fixture
def fake_ajax(fragment_html):
    return FakeAjax(fragment_html)


@pytest.fixture
def document(config):
    return Document(build_page_shell(config), base_url="http://testserver/")


@pytest.fixture
def notifier(logger):
    return Notifier(logger=logger)


@pytest.fixture
def modal(logger):
    return LoggingOverrideModal(logger=logger)


@pytest.fixture
def controller(config, document, fake_ajax, modal, notifier, logger):
    return StudentSearch(
        7,
        document,
        fake_ajax,
        config=config,
        modal=modal,
        notifier=notifier,
        logger=logger,
    )


@pytest.fixture
async def initialised(controller):
    """Controller after its first render."""
    await controller.init()
    return controller
