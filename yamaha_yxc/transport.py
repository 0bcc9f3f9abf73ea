#
# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""
YxcTransport -- the HTTP collaborator used by YxcDevice.

A transport performs a single GET request and returns the JSON-decoded body. The
default implementation, RequestsTransport, uses a requests.Session and runs the
blocking request on the event loop's default executor.
"""

from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod

import requests

from .internal_types import *
from .pkg_logging import logger
from .constants import DEFAULT_HTTP_TIMEOUT
from .exceptions import YxcTransportError

class YxcTransport(ABC):
    """Abstract async HTTP transport"""

    @abstractmethod
    async def get_json(self, url: str) -> Any:
        """Sends a GET request to url and returns the JSON-decoded response body.

        Raises:
            YxcTransportError:  The request failed, the server returned an HTTP error status,
                                  or the response body is not valid JSON.
        """
        raise NotImplementedError()

    def close(self) -> None:
        """Releases any resources held by the transport. Subclasses can override."""
        pass

class RequestsTransport(YxcTransport):
    """A YxcTransport built on requests"""

    session: requests.Session
    timeout: float
    _owns_session: bool

    def __init__(self, session: Optional[requests.Session]=None, timeout: float=DEFAULT_HTTP_TIMEOUT) -> None:
        if session is None:
            session = requests.Session()
            self._owns_session = True
        else:
            self._owns_session = False
        self.session = session
        self.timeout = timeout

    def get_json_blocking(self, url: str) -> Any:
        """Synchronous version of get_json()"""
        logger.debug(f"GET {url}")
        try:
            response = self.session.get(url, timeout=self.timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            raise YxcTransportError(f"Request to {url} failed: {e}") from e
        try:
            result = response.json()
        except ValueError as e:
            raise YxcTransportError(f"Response from {url} is not valid JSON: {e}") from e
        logger.debug(f"GET {url} returned {result}")
        return result

    #@override
    async def get_json(self, url: str) -> Any:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self.get_json_blocking, url)

    #@override
    def close(self) -> None:
        if self._owns_session:
            self.session.close()

    def __str__(self) -> str:
        return f"RequestsTransport(timeout={self.timeout})"

    def __repr__(self) -> str:
        return str(self)
