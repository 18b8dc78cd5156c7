#!/usr/bin/env python3
"""
Command-line interface for the student search table.

Drives the table controller against a live site without a browser: renders
the table, then replays one interaction by clicking the matching link.

Usage:
    student-search render [--page N]
    student-search search <text>
    student-search page <n>
    student-search sort <column>
    student-search hide <column>
    student-search show <column>
    student-search reset
    student-search rows <n>

Connection settings come from the environment (BASE_URL, SESSKEY,
SESSION_COOKIE, CONTEXT_ID, ...) and can be overridden with flags.
"""

import argparse
import asyncio
import json
import sys
from typing import List, Optional

from .ajax import create_ajax_client
from .common.logging_config import setup_logging
from .config import Config, load_config
from .controller import StudentSearch
from .dom import Document, Element, Event
from .notification import Notifier
from .page_shell import build_page_shell
from .table_state import HIDE_PARAM, PAGE_PARAM, SHOW_PARAM, SORT_PARAM, column_visibility, link_params


class StudentSearchCLI:
    """Command-line interface for the student search table."""

    def __init__(self, config: Config, verbose: bool = False, show_html: bool = False):
        """Initialize CLI."""
        self.config = config
        self.show_html = show_html
        self.logger = setup_logging(
            level="DEBUG" if verbose else config.log_level,
            log_file=config.log_file,
            json_format=config.log_json,
        )
        self.errors: List[BaseException] = []
        self.ajax = None
        self.document: Optional[Document] = None
        self.controller: Optional[StudentSearch] = None

    async def initialize(self, search: str = ""):
        """Build the page, wire the controller and render the first table."""
        self.ajax = create_ajax_client(self.config, logger=self.logger)
        self.document = Document(
            build_page_shell(self.config, search=search),
            base_url=self.config.base_url.rstrip("/") + "/",
        )
        self.controller = StudentSearch(
            self.config.context_id,
            self.document,
            self.ajax,
            config=self.config,
            notifier=Notifier(sink=self.errors.append, logger=self.logger),
            logger=self.logger,
        )
        await self.controller.init()

    async def cleanup(self):
        """Cleanup resources."""
        if self.ajax:
            await self.ajax.close()

    def _table_links(self) -> List[Element]:
        table = self.document.get_element_by_id(self.config.table_id)
        return table.query_selector_all("a") if table else []

    def _find_link(self, param: str, value: str) -> Optional[Element]:
        for link in self._table_links():
            if link_params(link.href).get(param) == value:
                return link
        return None

    def _fail(self, message: str) -> int:
        print(json.dumps({"success": False, "error": message}, indent=2), file=sys.stderr)
        return 1

    def report(self) -> int:
        """Print the table state after the last interaction."""
        if self.errors:
            return self._fail("; ".join(str(e) for e in self.errors))

        result = {
            "success": True,
            **self.controller.view_state(),
            "columns": column_visibility(self._table_links()),
        }
        if self.show_html:
            card = self.document.require_element_by_id(self.config.table_card_id)
            result["html"] = card.get_elements_by_class_name(self.config.table_body_class)[0].inner_html
        print(json.dumps(result, indent=2))
        return 0

    async def _click(self, element: Optional[Element], description: str) -> int:
        if self.errors:
            return self.report()
        if element is None:
            return self._fail(f"No {description} link in the rendered table")
        element.click()
        await self.document.settle()
        return self.report()

    async def render(self, page: int = 0) -> int:
        if page and not self.errors:
            await self.controller.get_student_table(page)
        return self.report()

    async def search(self, text: str) -> int:
        search_input = self.document.require_element_by_id(self.config.search_input_id)
        search_input.value = text
        search_input.dispatch_event(Event("keyup", search_input))
        await self.document.settle()
        return self.report()

    async def page(self, page: int) -> int:
        return await self._click(self._find_link(PAGE_PARAM, str(page)), f"page {page}")

    async def sort(self, column: str) -> int:
        return await self._click(self._find_link(SORT_PARAM, column), f"sort '{column}'")

    async def hide(self, column: str) -> int:
        return await self._click(self._find_link(HIDE_PARAM, column), f"hide '{column}'")

    async def show(self, column: str) -> int:
        return await self._click(self._find_link(SHOW_PARAM, column), f"show '{column}'")

    async def reset(self) -> int:
        table = self.document.get_element_by_id(self.config.table_id)
        links = table.get_elements_by_class_name(self.config.reset_class) if table else []
        return await self._click(links[0] if links else None, "reset")

    async def rows(self, rows: int) -> int:
        picker = self.document.require_element_by_id(self.config.rows_picker_id)
        match = None
        for link in picker.query_selector_all("a"):
            if link.data("metric") == str(rows):
                match = link
                break
        return await self._click(match, f"{rows} rows")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Drive the student search table from the command line",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--base-url", help="Site root URL (env: BASE_URL)")
    parser.add_argument("--sesskey", help="Session key (env: SESSKEY)")
    parser.add_argument("--session-cookie", help="MoodleSession cookie (env: SESSION_COOKIE)")
    parser.add_argument("--context-id", type=int, help="Context id (env: CONTEXT_ID)")
    parser.add_argument("--initial-search", default="", help="Search text for the first render")
    parser.add_argument("--html", action="store_true", help="Include the rendered table body in the output")
    parser.add_argument("--verbose", "-v", action="store_true", help="Verbose logging")

    subparsers = parser.add_subparsers(dest="command", help="Command to execute")

    render_parser = subparsers.add_parser("render", help="Render the table")
    render_parser.add_argument("--page", type=int, default=0, help="Page to render")

    search_parser = subparsers.add_parser("search", help="Type a search term")
    search_parser.add_argument("text", help="Search text")

    page_parser = subparsers.add_parser("page", help="Follow a pagination link")
    page_parser.add_argument("page", type=int, help="Page number")

    for name, help_text in (("sort", "Sort by a column"), ("hide", "Hide a column"), ("show", "Show a column")):
        column_parser = subparsers.add_parser(name, help=help_text)
        column_parser.add_argument("column", help="Column id")

    subparsers.add_parser("reset", help="Reset table preferences")

    rows_parser = subparsers.add_parser("rows", help="Set rows per page")
    rows_parser.add_argument("rows", type=int, help="Rows per page")

    return parser


def config_from_args(args: argparse.Namespace) -> Config:
    overrides = {}
    if args.base_url:
        overrides["base_url"] = args.base_url
    if args.sesskey:
        overrides["sesskey"] = args.sesskey
    if args.session_cookie:
        overrides["session_cookie"] = args.session_cookie
    if args.context_id:
        overrides["context_id"] = args.context_id
    return load_config(**overrides)


async def run(args: argparse.Namespace) -> int:
    cli = StudentSearchCLI(config_from_args(args), verbose=args.verbose, show_html=args.html)
    try:
        await cli.initialize(search=args.initial_search)

        if args.command == "render":
            return await cli.render(args.page)
        elif args.command == "search":
            return await cli.search(args.text)
        elif args.command == "page":
            return await cli.page(args.page)
        elif args.command == "sort":
            return await cli.sort(args.column)
        elif args.command == "hide":
            return await cli.hide(args.column)
        elif args.command == "show":
            return await cli.show(args.column)
        elif args.command == "reset":
            return await cli.reset()
        elif args.command == "rows":
            return await cli.rows(args.rows)
        return 1
    finally:
        await cli.cleanup()


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    return asyncio.run(run(args))


if __name__ == "__main__":
    sys.exit(main())
