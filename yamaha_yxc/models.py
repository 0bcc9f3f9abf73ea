#
# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""
Typed records decoded from Yamaha Extended Control responses.

Each payload class provides a from_json() classmethod that accepts the response
fields that remain after the response_code has been removed. Fields that are not
understood are ignored, so newer firmware that reports additional fields can
still be decoded.
"""

from __future__ import annotations

from enum import Enum

from .internal_types import *
from .exceptions import YxcValueError, YxcFormatError

_T = TypeVar('_T')

def _get_required(data: Mapping[str, Any], key: str, value_type: Type[_T], record_name: str) -> _T:
    if not key in data:
        raise YxcFormatError(f"{record_name}: missing required field '{key}'")
    value = data[key]
    if not isinstance(value, value_type):
        raise YxcFormatError(f"{record_name}: field '{key}' has type {type(value).__name__}, expected {value_type.__name__}")
    return value

def _get_optional(data: Mapping[str, Any], key: str, value_type: Union[Type[Any], Tuple[Type[Any], ...]]) -> Any:
    value = data.get(key, None)
    if value is None or not isinstance(value, value_type):
        return None
    return value

class Power(Enum):
    """Power state of a zone. The string forms are exactly "on" and "standby"."""
    ON = "on"
    STANDBY = "standby"

    @classmethod
    def from_str(cls, value: str) -> Power:
        for power in cls:
            if power.value == value:
                return power
        raise YxcValueError(f"Cannot convert \"{value}\" to power state")

    def to_str(self) -> str:
        return self.value

    def __str__(self) -> str:
        return self.value

class DeviceInfo:
    """Result of system/getDeviceInfo"""

    model_name: str
    """The model name; e.g., "RX-V6A" """

    destination: Optional[str] = None
    """The sales region code; e.g., "BG" """

    device_id: Optional[str] = None
    """The device ID (typically derived from the MAC address)"""

    system_version: Optional[float] = None
    """The system firmware version"""

    api_version: Optional[float] = None
    """The YXC API version implemented by the device"""

    netmodule_version: Optional[str] = None
    """The network module firmware version"""

    netmodule_checksum: Optional[str] = None
    """The network module firmware checksum"""

    def __init__(
            self,
            model_name: str,
            destination: Optional[str]=None,
            device_id: Optional[str]=None,
            system_version: Optional[float]=None,
            api_version: Optional[float]=None,
            netmodule_version: Optional[str]=None,
            netmodule_checksum: Optional[str]=None,
          ) -> None:
        self.model_name = model_name
        self.destination = destination
        self.device_id = device_id
        self.system_version = system_version
        self.api_version = api_version
        self.netmodule_version = netmodule_version
        self.netmodule_checksum = netmodule_checksum

    @classmethod
    def from_json(cls, data: Mapping[str, Any]) -> DeviceInfo:
        return cls(
            model_name=_get_required(data, 'model_name', str, 'DeviceInfo'),
            destination=_get_optional(data, 'destination', str),
            device_id=_get_optional(data, 'device_id', str),
            system_version=_get_optional(data, 'system_version', (int, float)),
            api_version=_get_optional(data, 'api_version', (int, float)),
            netmodule_version=_get_optional(data, 'netmodule_version', str),
            netmodule_checksum=_get_optional(data, 'netmodule_checksum', str),
          )

    def to_jsonable(self) -> JsonableDict:
        result: JsonableDict = dict(model_name=self.model_name)
        for key in ('destination', 'device_id', 'system_version', 'api_version', 'netmodule_version', 'netmodule_checksum'):
            value = getattr(self, key)
            if not value is None:
                result[key] = value
        return result

    def __eq__(self, other: object) -> bool:
        return isinstance(other, DeviceInfo) and self.to_jsonable() == other.to_jsonable()

    def __str__(self) -> str:
        return f"DeviceInfo(model_name={self.model_name!r})"

    def __repr__(self) -> str:
        return str(self)

class InputInfo:
    """One entry of the system input_list in system/getFeatures"""

    id: str
    distribution_enable: Optional[bool] = None
    rename_enable: Optional[bool] = None
    account_enable: Optional[bool] = None
    play_info_type: Optional[str] = None

    def __init__(
            self,
            id: str,
            distribution_enable: Optional[bool]=None,
            rename_enable: Optional[bool]=None,
            account_enable: Optional[bool]=None,
            play_info_type: Optional[str]=None,
          ) -> None:
        self.id = id
        self.distribution_enable = distribution_enable
        self.rename_enable = rename_enable
        self.account_enable = account_enable
        self.play_info_type = play_info_type

    @classmethod
    def from_json(cls, data: Any) -> InputInfo:
        if not isinstance(data, Mapping):
            raise YxcFormatError(f"InputInfo: expected an object, got {type(data).__name__}")
        return cls(
            id=_get_required(data, 'id', str, 'InputInfo'),
            distribution_enable=_get_optional(data, 'distribution_enable', bool),
            rename_enable=_get_optional(data, 'rename_enable', bool),
            account_enable=_get_optional(data, 'account_enable', bool),
            play_info_type=_get_optional(data, 'play_info_type', str),
          )

    def __str__(self) -> str:
        return f"InputInfo(id={self.id!r})"

    def __repr__(self) -> str:
        return str(self)

class Features:
    """Result of system/getFeatures. Only the "system" section is decoded."""

    input_list: List[InputInfo]
    """The inputs supported by the device, in the order the device reports them"""

    func_list: Optional[List[str]] = None
    """The system functions supported by the device, if reported"""

    zone_num: Optional[int] = None
    """The number of zones, if reported"""

    def __init__(
            self,
            input_list: Iterable[InputInfo],
            func_list: Optional[Iterable[str]]=None,
            zone_num: Optional[int]=None,
          ) -> None:
        self.input_list = list(input_list)
        self.func_list = None if func_list is None else list(func_list)
        self.zone_num = zone_num

    @property
    def inputs(self) -> List[str]:
        """The input IDs, in the order the device reports them"""
        return [ x.id for x in self.input_list ]

    @classmethod
    def from_json(cls, data: Mapping[str, Any]) -> Features:
        system = _get_required(data, 'system', dict, 'Features')
        raw_input_list = _get_required(system, 'input_list', list, 'Features.system')
        func_list = _get_optional(system, 'func_list', list)
        if not func_list is None:
            func_list = [ x for x in func_list if isinstance(x, str) ]
        zone_num = _get_optional(system, 'zone_num', int)
        return cls(
            input_list=[ InputInfo.from_json(x) for x in raw_input_list ],
            func_list=func_list,
            zone_num=zone_num,
          )

    def to_jsonable(self) -> JsonableDict:
        result: JsonableDict = dict(inputs=self.inputs)
        if not self.func_list is None:
            result['func_list'] = list(self.func_list)
        if not self.zone_num is None:
            result['zone_num'] = self.zone_num
        return result

    def __str__(self) -> str:
        return f"Features(inputs={self.inputs})"

    def __repr__(self) -> str:
        return str(self)

class ZoneStatus:
    """Result of <zone>/getStatus. A successful decode means the zone answered; power and
       input are filled in when the device reports them."""

    power: Optional[Power] = None
    input: Optional[str] = None

    def __init__(self, power: Optional[Power]=None, input: Optional[str]=None) -> None:
        self.power = power
        self.input = input

    @classmethod
    def from_json(cls, data: Mapping[str, Any]) -> ZoneStatus:
        power: Optional[Power] = None
        raw_power = data.get('power', None)
        if not raw_power is None:
            if not isinstance(raw_power, str):
                raise YxcFormatError(f"ZoneStatus: field 'power' has type {type(raw_power).__name__}, expected str")
            power = Power.from_str(raw_power)
        return cls(power=power, input=_get_optional(data, 'input', str))

    def to_jsonable(self) -> JsonableDict:
        result: JsonableDict = {}
        if not self.power is None:
            result['power'] = self.power.to_str()
        if not self.input is None:
            result['input'] = self.input
        return result

    def __str__(self) -> str:
        return f"ZoneStatus(power={self.power}, input={self.input!r})"

    def __repr__(self) -> str:
        return str(self)
