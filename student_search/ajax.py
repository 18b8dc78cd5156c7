"""
Web-service transport.

Talks to the Moodle-style AJAX endpoint, which takes a JSON list of
{index, methodname, args} entries and answers with a list of
{error, data | exception} entries in the same order.
"""

import asyncio
import logging
from typing import Any, Dict, Optional

import aiohttp
from aiohttp import ClientTimeout
from pydantic import ValidationError

from .errors import AjaxError, FragmentError
from .schemas import AjaxRequest, AjaxResponse, FragmentResponse, fragment_args

FRAGMENT_METHOD = "core_get_fragment"


class AjaxClient:
    """Async client for the web-service endpoint."""

    SERVICE_PATH = "/lib/ajax/service.php"

    def __init__(
        self,
        base_url: str,
        sesskey: str,
        timeout_seconds: float = 30.0,
        session_cookie: Optional[str] = None,
        session: Optional[aiohttp.ClientSession] = None,
        logger: Optional[logging.Logger] = None,
    ):
        """Initialize client.

        Args:
            base_url: Site root, e.g. https://moodle.example.com
            sesskey: Session key required by the endpoint
            timeout_seconds: Total timeout per request
            session_cookie: Optional MoodleSession cookie value
            session: Optional externally owned aiohttp session
            logger: Optional logger
        """
        self.base_url = base_url.rstrip("/")
        self.sesskey = sesskey
        self.timeout = ClientTimeout(total=timeout_seconds)
        self.session_cookie = session_cookie
        self.logger = logger or logging.getLogger(__name__)
        self._session = session
        self._owns_session = session is None

    @property
    def service_url(self) -> str:
        return f"{self.base_url}{self.SERVICE_PATH}"

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            cookies = {"MoodleSession": self.session_cookie} if self.session_cookie else None
            self._session = aiohttp.ClientSession(timeout=self.timeout, cookies=cookies)
            self._owns_session = True
        return self._session

    async def close(self):
        """Close the underlying session if this client created it."""
        if self._owns_session and self._session is not None and not self._session.closed:
            await self._session.close()

    async def __aenter__(self) -> "AjaxClient":
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.close()

    async def call(self, methodname: str, args: Dict[str, Any]) -> Any:
        """Call a single web-service method.

        Args:
            methodname: Web-service function name
            args: Method arguments

        Returns:
            The method's data payload

        Raises:
            AjaxError: On transport failure, non-200 status, malformed body,
                or an error entry in the response
        """
        request = AjaxRequest(index=0, methodname=methodname, args=args)
        params = {"sesskey": self.sesskey, "info": methodname}
        session = self._get_session()

        self.logger.debug(f"Calling {methodname}")
        try:
            async with session.post(
                self.service_url,
                params=params,
                json=[request.model_dump()],
            ) as response:
                if response.status != 200:
                    error_text = await response.text()
                    raise AjaxError(
                        f"Web service error {response.status} calling {methodname}",
                        details={"status": response.status, "body": error_text},
                    )
                body = await response.json(content_type=None)
        except aiohttp.ClientError as e:
            self.logger.error(f"aiohttp error calling {methodname}: {e}")
            raise AjaxError(f"Transport error calling {methodname}: {e}") from e
        except asyncio.TimeoutError as e:
            self.logger.error(f"Timeout calling {methodname}")
            raise AjaxError(f"Timeout calling {methodname}") from e
        except ValueError as e:
            self.logger.error(f"Malformed response from {methodname}: {e}")
            raise AjaxError(f"Malformed response from {methodname}") from e

        return self._unpack(methodname, body)

    def _unpack(self, methodname: str, body: Any) -> Any:
        if not isinstance(body, list) or not body:
            raise AjaxError(f"Unexpected response shape from {methodname}", details={"body": body})

        try:
            entry = AjaxResponse.model_validate(body[0])
        except ValidationError as e:
            raise AjaxError(f"Malformed response entry from {methodname}") from e

        if entry.error:
            exception = entry.exception
            message = exception.message if exception and exception.message else "Unknown error"
            self.logger.warning(f"{methodname} returned error: {message}")
            raise AjaxError(
                message,
                details=exception.model_dump() if exception else {},
            )

        return entry.data

    async def load_fragment(
        self,
        component: str,
        callback: str,
        contextid: int,
        params: Dict[str, Any],
    ) -> str:
        """Render a server-side fragment.

        Args:
            component: Component namespace owning the fragment
            callback: Fragment name
            contextid: Context id
            params: Fragment parameters

        Returns:
            Rendered HTML

        Raises:
            FragmentError: If the render call fails
        """
        try:
            data = await self.call(FRAGMENT_METHOD, fragment_args(component, callback, contextid, params))
            return FragmentResponse.model_validate(data).html
        except AjaxError as e:
            raise FragmentError(details={"cause": e.message}) from e
        except ValidationError as e:
            raise FragmentError(details={"cause": "fragment response missing html"}) from e


def create_ajax_client(config, logger: Optional[logging.Logger] = None) -> AjaxClient:
    """Build a client from a Config instance."""
    return AjaxClient(
        base_url=config.base_url,
        sesskey=config.sesskey,
        timeout_seconds=config.request_timeout_seconds,
        session_cookie=config.session_cookie,
        logger=logger,
    )


