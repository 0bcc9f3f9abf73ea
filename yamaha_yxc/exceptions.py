#
# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""Exceptions defined by this package"""

from __future__ import annotations

class YxcError(Exception):
  """Base class for all error exceptions defined by this package."""
  pass

class YxcValueError(YxcError, ValueError):
  """A string could not be converted to one of an expected set of values."""
  def __init__(self, msg: str):
    super().__init__(f"Invalid value: {msg}")

class YxcFormatError(YxcError):
  """A device response could not be decoded."""
  pass

class YxcTransportError(YxcError):
  """The HTTP request to the device failed. The underlying exception is chained as __cause__."""
  pass

class YxcDeviceError(YxcError):
  """The device replied with a nonzero response_code."""
  status_code: int

  def __init__(self, status_code: int):
    super().__init__(f"Yamaha returned an error: {status_code}")
    self.status_code = status_code

class YxcDiscoveryError(YxcError):
  """The mDNS discovery service could not be started."""
  pass
