# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""
Package yamaha_yxc provides an API and command-line tool for controlling Yamaha AV
receivers through their "Yamaha Extended Control" (YXC) HTTP API.

YXC is a simple HTTP/JSON API. Every request is a GET to

    http://<host>/YamahaExtendedControl/v1/<zone or "system">/<function>[?<params>]

and every reply is a JSON object carrying an integer "response_code" (0 for success)
alongside any returned data.

Receivers also advertise themselves over mDNS as "<room name>._http._tcp.local.",
which this package uses to locate a receiver by name on the local network.
"""

from .version import __version__

from .pkg_logging import logger

from .internal_types import Jsonable, JsonableDict

from .exceptions import (
    YxcError,
    YxcValueError,
    YxcFormatError,
    YxcTransportError,
    YxcDeviceError,
    YxcDiscoveryError,
  )

from .constants import (
    YXC_API_PATH,
    DEFAULT_ZONE,
    DEFAULT_HTTP_TIMEOUT,
    HTTP_SERVICE_TYPE,
    DEFAULT_MAX_SEARCH_RESTARTS,
  )

from .models import Power, DeviceInfo, InputInfo, Features, ZoneStatus
from .envelope import decode_envelope
from .transport import YxcTransport, RequestsTransport
from .device import YxcDevice
from .discovery import (
    DiscoveryEvent,
    SearchStarted,
    SearchStopped,
    ServiceFound,
    ServiceRemoved,
    ServiceResolved,
    DiscoveryEventSource,
    ZeroconfEventSource,
    scan,
    discover,
    discover_sync,
  )

__all__ = [
    '__version__',
    'logger',
    'Jsonable', 'JsonableDict',
    'YxcError', 'YxcValueError', 'YxcFormatError', 'YxcTransportError', 'YxcDeviceError', 'YxcDiscoveryError',
    'YXC_API_PATH', 'DEFAULT_ZONE', 'DEFAULT_HTTP_TIMEOUT', 'HTTP_SERVICE_TYPE', 'DEFAULT_MAX_SEARCH_RESTARTS',
    'Power', 'DeviceInfo', 'InputInfo', 'Features', 'ZoneStatus',
    'decode_envelope',
    'YxcTransport', 'RequestsTransport',
    'YxcDevice',
    'DiscoveryEvent', 'SearchStarted', 'SearchStopped', 'ServiceFound', 'ServiceRemoved', 'ServiceResolved',
    'DiscoveryEventSource', 'ZeroconfEventSource',
    'scan', 'discover', 'discover_sync',
]
