"""Pydantic schemas for web-service requests and responses."""

import json
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator


def compact_json(value: Any) -> str:
    """Serialize without whitespace, matching what the server-side decoder receives from browsers."""
    return json.dumps(value, separators=(",", ":"))


class PreferenceName(str, Enum):
    """Table preferences understood by the persistence call."""

    SORTBY = "sortby"
    COLLAPSE = "collapse"
    ROWS = "rows"
    RESET = "reset"


class PreferenceRecord(BaseModel):
    """A single table-scoped preference, built fresh per action."""

    table_id: str = Field(..., min_length=1, description="Constant table identifier")
    preference: PreferenceName
    values: Dict[str, Any] = Field(default_factory=dict)

    def encoded_values(self) -> str:
        return compact_json(self.values)

    def to_args(self) -> Dict[str, str]:
        """Arguments for the table preference web-service method."""
        return {
            "tableid": self.table_id,
            "preference": self.preference.value,
            "values": self.encoded_values(),
        }


class UserPreference(BaseModel):
    """A user-scoped preference keyed by a global name."""

    type: str = Field(..., min_length=1)
    value: str

    @field_validator("value", mode="before")
    @classmethod
    def stringify_value(cls, v: Any) -> str:
        """Preference values travel as strings."""
        return str(v)


class FragmentParams(BaseModel):
    """Session-transient parameters sent with every fragment render."""

    search: str = ""
    page: int = Field(default=0, ge=0)

    @field_validator("search")
    @classmethod
    def strip_search(cls, v: str) -> str:
        return v.strip()

    def to_params(self) -> Dict[str, str]:
        return {"data": compact_json({"search": self.search, "page": self.page})}


class AjaxRequest(BaseModel):
    """One entry of a batched web-service request."""

    index: int = 0
    methodname: str = Field(..., min_length=1)
    args: Dict[str, Any] = Field(default_factory=dict)


class AjaxException(BaseModel):
    """Exception payload returned by the web-service endpoint."""

    message: str = ""
    errorcode: Optional[str] = None
    exception: Optional[str] = None
    link: Optional[str] = None
    moreinfourl: Optional[str] = None
    debuginfo: Optional[str] = None

    model_config = {"extra": "allow"}


class AjaxResponse(BaseModel):
    """One entry of a batched web-service response."""

    error: bool = False
    data: Any = None
    exception: Optional[AjaxException] = None


class FragmentResponse(BaseModel):
    """Payload of the fragment render method."""

    html: str
    javascript: str = ""


def fragment_args(component: str, callback: str, contextid: int, params: Dict[str, Any]) -> Dict[str, Any]:
    """Build arguments for the fragment render method.

    Args:
        component: Component namespace owning the fragment
        callback: Fragment name
        contextid: Context the fragment is rendered in
        params: Fragment parameters, flattened to name/value pairs

    Returns:
        Web-service arguments
    """
    pairs: List[Dict[str, Any]] = [
        {"name": name, "value": value} for name, value in params.items()
    ]
    return {
        "component": component,
        "callback": callback,
        "contextid": contextid,
        "args": pairs,
    }
