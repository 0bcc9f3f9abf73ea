#
# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""
Decoding of the response envelope that wraps every Yamaha Extended Control reply.

Every reply is a JSON object with an integer "response_code" field. Any payload
fields sit alongside response_code at the same level rather than being nested
under a separate key; e.g.:

    {"response_code": 0, "model_name": "RX-V6A", "device_id": "..."}

Decoding happens in two steps. The response_code is examined first; zero is the
only success value and anything else raises YxcDeviceError. On success the
remaining fields are handed to the payload type's from_json() classmethod.
"""

from __future__ import annotations

from .internal_types import *
from .pkg_logging import logger
from .constants import SUCCESS_RESPONSE_CODE
from .exceptions import YxcFormatError, YxcDeviceError

RESPONSE_CODE_FIELD = "response_code"

_T = TypeVar('_T')

def get_response_code(data: Any) -> int:
    """Returns the response_code of a decoded reply.

    Raises YxcFormatError if data is not a JSON object or does not carry an integer response_code.
    """
    if not isinstance(data, Mapping):
        raise YxcFormatError(f"Expected a JSON object in response, got {type(data).__name__}")
    if not RESPONSE_CODE_FIELD in data:
        raise YxcFormatError(f"Response does not contain '{RESPONSE_CODE_FIELD}': {data}")
    response_code = data[RESPONSE_CODE_FIELD]
    # bool is a subclass of int, but true/false is not a valid response code
    if not isinstance(response_code, int) or isinstance(response_code, bool):
        raise YxcFormatError(f"Response '{RESPONSE_CODE_FIELD}' is not an integer: {response_code!r}")
    return response_code

def get_payload_fields(data: Mapping[str, Any]) -> Dict[str, Any]:
    """Returns the fields of a decoded reply other than response_code."""
    return { k: v for k, v in data.items() if k != RESPONSE_CODE_FIELD }

def check_response_code(data: Any) -> None:
    """Raises YxcDeviceError if a decoded reply carries a nonzero response_code."""
    response_code = get_response_code(data)
    if response_code != SUCCESS_RESPONSE_CODE:
        logger.debug(f"Device replied with response_code={response_code}")
        raise YxcDeviceError(response_code)

@overload
def decode_envelope(data: Any, payload_type: None=None) -> None: ...

@overload
def decode_envelope(data: Any, payload_type: Type[_T]) -> _T: ...

def decode_envelope(data: Any, payload_type: Optional[Type[Any]]=None) -> Any:
    """Unwraps a decoded reply.

    Parameters:
        data:           The JSON-decoded response body.
        payload_type:   A class with a from_json(fields) classmethod, or None for
                          replies that carry only a response_code.

    Returns:
        None if payload_type is None, otherwise payload_type.from_json() applied to the
        fields that accompany response_code.

    Raises:
        YxcDeviceError:  response_code is nonzero.
        YxcFormatError:  the envelope or payload is malformed.
        YxcValueError:   a payload field failed validation (e.g., an unknown power state).
    """
    check_response_code(data)
    if payload_type is None:
        return None
    return payload_type.from_json(get_payload_fields(data))
