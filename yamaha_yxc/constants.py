# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""Constants used by this package"""

YXC_API_PATH = "YamahaExtendedControl/v1"
"""The URL path prefix of the Yamaha Extended Control HTTP API."""

SYSTEM_ZONE = "system"
"""The path segment used in place of a zone name for device-wide functions."""

DEFAULT_ZONE = "main"
"""The zone used by zone-scoped operations when no zone is given."""

SUCCESS_RESPONSE_CODE = 0
"""The only response_code value that indicates success."""

DEFAULT_HTTP_TIMEOUT = 5.0
"""The default HTTP request timeout, in seconds."""

HTTP_SERVICE_TYPE = "_http._tcp.local."
"""The mDNS service type that Yamaha receivers advertise themselves under."""

DEFAULT_MAX_SEARCH_RESTARTS = 6
"""The number of mDNS search cycles after which a discovery scan gives up."""

DEFAULT_RESOLVE_TIMEOUT = 3.0
"""The amount of time (in seconds) to wait for an mDNS service to resolve."""

INITIAL_SEARCH_INTERVAL = 1.0
"""The delay (in seconds) between the first and second mDNS search cycles. Doubles after each cycle."""

MAX_SEARCH_INTERVAL = 60.0
"""The upper limit (in seconds) on the delay between mDNS search cycles."""
