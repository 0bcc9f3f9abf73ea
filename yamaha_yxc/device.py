#
# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""
YxcDevice -- A client for the Yamaha Extended Control (YXC) HTTP API of a single receiver.

Each operation:

  1. Builds the request URL http://<host>/YamahaExtendedControl/v1/<zone or "system">/<function>[?<params>]
  2. Sends a single GET request through a YxcTransport
  3. Unwraps the response envelope into a typed result, or raises a YxcError

YxcDevice holds no mutable state, so a single instance may be used concurrently
from multiple tasks.
"""

from __future__ import annotations

from urllib.parse import urlencode

from .internal_types import *
from .pkg_logging import logger
from .constants import YXC_API_PATH, SYSTEM_ZONE, DEFAULT_ZONE, DEFAULT_HTTP_TIMEOUT
from .envelope import decode_envelope
from .models import Power, DeviceInfo, Features, ZoneStatus
from .transport import YxcTransport, RequestsTransport

class YxcDevice(AsyncContextManager['YxcDevice']):
    host: str
    """The hostname or IP address of the receiver"""

    transport: YxcTransport
    """The transport used to send requests"""

    _owns_transport: bool

    def __init__(
            self,
            host: str,
            transport: Optional[YxcTransport]=None,
            timeout: float=DEFAULT_HTTP_TIMEOUT
          ) -> None:
        """Create a client for a single receiver.

        Parameters:
            host:       The hostname or IP address of the receiver; e.g., "192.168.1.20" or "sypialnia.local".
            transport:  The transport to use for HTTP requests. If None, a RequestsTransport is
                          created and closed along with this object.
            timeout:    The HTTP request timeout, in seconds, for the default transport. Ignored if
                          transport is provided.
        """
        self.host = host
        if transport is None:
            transport = RequestsTransport(timeout=timeout)
            self._owns_transport = True
        else:
            self._owns_transport = False
        self.transport = transport

    @staticmethod
    def resolve_zone(zone: Optional[str]) -> str:
        return DEFAULT_ZONE if zone is None else zone

    def url(self, function: str, zone: Optional[str]=None, **params: Optional[str]) -> str:
        """Returns the request URL for a function.

        Parameters:
            function:   The API function name; e.g., "getStatus".
            zone:       The path segment preceding the function; e.g., "main", "zone2", or "system".
                          If None, "main" is used.
            params:     Query parameters, in order. Parameters whose value is None are omitted.
        """
        result = f"http://{self.host}/{YXC_API_PATH}/{self.resolve_zone(zone)}/{function}"
        query = [ (k, v) for k, v in params.items() if not v is None ]
        if len(query) > 0:
            result += '?' + urlencode(query)
        return result

    def system_url(self, function: str) -> str:
        return self.url(function, zone=SYSTEM_ZONE)

    async def _request(self, url: str, payload_type: Optional[Type[Any]]=None) -> Any:
        data = await self.transport.get_json(url)
        result = decode_envelope(data, payload_type)
        logger.debug(f"{self}: {url} -> {result}")
        return result

    async def get_device_info(self) -> DeviceInfo:
        """Returns the model name and firmware information of the receiver."""
        result: DeviceInfo = await self._request(self.system_url("getDeviceInfo"), DeviceInfo)
        return result

    async def get_features(self) -> Features:
        """Returns the features of the receiver, including the list of inputs."""
        result: Features = await self._request(self.system_url("getFeatures"), Features)
        return result

    async def get_status(self, zone: Optional[str]=None) -> ZoneStatus:
        result: ZoneStatus = await self._request(self.url("getStatus", zone=zone), ZoneStatus)
        return result

    async def set_power(self, power: Union[Power, str], zone: Optional[str]=None) -> None:
        """Turns a zone on or puts it into standby.

        Parameters:
            power:  The requested power state, as a Power or one of the strings "on" or "standby".
            zone:   The zone; e.g., "main" or "zone2". Defaults to "main".
        """
        if not isinstance(power, Power):
            power = Power.from_str(power)
        await self._request(self.url("setPower", zone=zone, power=power.to_str()))

    async def set_input(self, input: str, zone: Optional[str]=None, mode: Optional[str]=None) -> None:
        """Selects the input of a zone.

        Parameters:
            input:  The input ID, as returned by Features.inputs; e.g., "hdmi1" or "optical".
            zone:   The zone; e.g., "main" or "zone2". Defaults to "main".
            mode:   Optional selection mode; e.g., "autoplay_disabled". If None, no mode is sent.
        """
        await self._request(self.url("setInput", zone=zone, input=input, mode=mode))

    def close(self) -> None:
        if self._owns_transport:
            self.transport.close()

    async def __aenter__(self) -> YxcDevice:
        return self

    async def __aexit__(
            self,
            exc_type: Optional[type[BaseException]],
            exc: Optional[BaseException],
            tb: Optional[TracebackType]
      ) -> bool:
        self.close()
        return False

    def __str__(self) -> str:
        return f"YxcDevice({self.host!r})"

    def __repr__(self) -> str:
        return str(self)
