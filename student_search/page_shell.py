"""Host page skeleton for the student search table.

The report page renders these static controls once; only the table body
inside the card is replaced on refresh.
"""

from html import escape
from typing import Sequence

from .config import Config

DEFAULT_ROW_OPTIONS = (20, 50, 100, 250)


def build_page_shell(config: Config, row_options: Sequence[int] = DEFAULT_ROW_OPTIONS, search: str = "") -> str:
    """Build the page markup holding every element id the controller expects.

    Args:
        config: Client configuration (element ids and classes)
        row_options: Page sizes offered by the rows picker
        search: Initial search box value

    Returns:
        HTML for the whole page
    """
    row_links = "\n".join(
        f'      <a class="dropdown-item" href="#" data-metric="{rows}">{rows}</a>'
        for rows in row_options
    )
    return f"""<!DOCTYPE html>
<html>
<body>
  <div class="student-search-controls">
    <input type="text" id="{escape(config.search_input_id)}" value="{escape(search)}" placeholder="Search">
    <button type="button" id="{escape(config.search_reset_id)}">Clear</button>
    <div class="dropdown-menu" id="{escape(config.rows_picker_id)}">
{row_links}
    </div>
  </div>
  <div class="card" id="{escape(config.table_card_id)}">
    <div class="{escape(config.spinner_class)} {escape(config.hidden_class)}"></div>
    <div class="{escape(config.table_body_class)}"></div>
  </div>
</body>
</html>
"""
