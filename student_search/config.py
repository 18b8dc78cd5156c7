"""Configuration management for the student search table client."""

from typing import Optional
from pydantic_settings import BaseSettings
from pydantic import Field


class Config(BaseSettings):
    """Client configuration."""

    # Server settings
    base_url: str = Field(
        default="http://localhost",
        description="Base URL of the Moodle site hosting the report"
    )

    sesskey: str = Field(
        default="",
        description="Session key appended to every web-service call"
    )

    session_cookie: Optional[str] = Field(
        default=None,
        description="MoodleSession cookie value for an authenticated session"
    )

    context_id: int = Field(
        default=1,
        ge=1,
        description="Context id the table fragment is rendered for"
    )

    request_timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        description="Total timeout for a single web-service request"
    )

    # Remote contract
    fragment_component: str = Field(
        default="local_assessfreq",
        description="Component namespace that renders the table fragment"
    )

    fragment_name: str = Field(
        default="get_student_search_table",
        description="Fragment callback name"
    )

    table_preference_id: str = Field(
        default="local_assessfreq_student_search_table",
        description="Table id sent with table-scoped preferences"
    )

    rows_preference_type: str = Field(
        default="local_assessfreq_student_search_table_rows_preference",
        description="User preference key holding the rows-per-page choice"
    )

    # Table behaviour
    search_min_length: int = Field(
        default=3,
        ge=1,
        description="Minimum search length that triggers a refresh (0 always refreshes)"
    )

    discard_stale_responses: bool = Field(
        default=True,
        description="Apply a fragment only if it answers the latest issued refresh"
    )

    # Document contract
    table_id: str = Field(default="local-assessfreq-student-search")
    table_card_id: str = Field(default="local-assessfreq-student-search-table")
    search_input_id: str = Field(default="local-assessfreq-quiz-student-table-search")
    search_reset_id: str = Field(default="local-assessfreq-quiz-student-table-search-reset")
    rows_picker_id: str = Field(default="local-assessfreq-quiz-student-table-rows")
    reset_class: str = Field(default="resettable")
    override_class: str = Field(default="action-icon override")
    disabled_class: str = Field(default="action-icon disabled")
    spinner_class: str = Field(default="overlay-icon-container")
    table_body_class: str = Field(default="table-body")
    hidden_class: str = Field(default="hide")

    # Logging settings
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )

    log_file: Optional[str] = Field(
        default=None,
        description="Log file path (logs to stderr if not specified)"
    )

    log_json: bool = Field(
        default=False,
        description="Use JSON format for logs"
    )

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "extra": "ignore",
    }


def load_config(**overrides) -> Config:
    """Load configuration from environment, with explicit overrides on top."""
    return Config(**overrides)
