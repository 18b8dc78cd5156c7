"""Preference persistence channels."""

import logging
from typing import Any, Dict, Optional

from .errors import AjaxError, PreferenceError
from .schemas import PreferenceName, PreferenceRecord, UserPreference

TABLE_PREFERENCE_METHOD = "local_assessfreq_set_table_preference"
USER_PREFERENCE_METHOD = "core_user_update_user_preferences"


class PreferenceStore:
    """Sends one preference per call; never retries.

    Two channels share the same contract: the table-scoped channel for
    sortby/collapse/reset, and the user-scoped channel for settings keyed by
    a global preference name (the rows-per-page choice).
    """

    def __init__(
        self,
        ajax,
        table_id: str,
        logger: Optional[logging.Logger] = None,
    ):
        """Initialize store.

        Args:
            ajax: Web-service client exposing ``call(methodname, args)``
            table_id: Constant table identifier for table-scoped preferences
            logger: Optional logger
        """
        self.ajax = ajax
        self.table_id = table_id
        self.logger = logger or logging.getLogger(__name__)

    async def set_preference(self, name: PreferenceName, values: Dict[str, Any]) -> Any:
        """Persist a table-scoped preference by name."""
        record = PreferenceRecord(table_id=self.table_id, preference=name, values=values)
        return await self.set_table_preference(record)

    async def set_table_preference(self, record: PreferenceRecord) -> Any:
        """Persist a table-scoped preference.

        Args:
            record: The preference to send

        Returns:
            Server acknowledgment

        Raises:
            ValueError: For the rows preference, which belongs to the user channel
            PreferenceError: If the call fails
        """
        if record.preference == PreferenceName.ROWS:
            raise ValueError("Rows preference is stored through set_user_preference")

        args = record.to_args()
        self.logger.info(f"Setting {record.table_id} {record.preference.value} = {args['values']}")
        try:
            return await self.ajax.call(TABLE_PREFERENCE_METHOD, args)
        except AjaxError as e:
            self.logger.error(f"Failed to update table preference {record.preference.value}: {e}")
            raise PreferenceError(
                f"Failed to update table preference: {record.preference.value}",
                details={"cause": e.message},
            ) from e

    async def set_user_preference(self, type: str, value: Any) -> Any:
        """Persist a user-scoped preference.

        Args:
            type: Global preference name
            value: Preference value, sent as a string

        Returns:
            Server acknowledgment

        Raises:
            PreferenceError: If the call fails
        """
        preference = UserPreference(type=type, value=value)
        self.logger.info(f"Setting user preference {preference.type} = {preference.value}")
        try:
            return await self.ajax.call(
                USER_PREFERENCE_METHOD,
                {"preferences": [preference.model_dump()]},
            )
        except AjaxError as e:
            self.logger.error(f"Failed to update user preference {preference.type}: {e}")
            raise PreferenceError(
                f"Failed to update user preference: {preference.type}",
                details={"cause": e.message},
            ) from e
