from __future__ import annotations

import pytest

from yamaha_yxc import Power, DeviceInfo, Features, YxcValueError, YxcFormatError

def test_power_to_str():
    assert Power.ON.to_str() == "on"
    assert Power.STANDBY.to_str() == "standby"
    assert str(Power.ON) == "on"
    assert f"{Power.STANDBY}" == "standby"

def test_power_from_str():
    assert Power.from_str("on") is Power.ON
    assert Power.from_str("standby") is Power.STANDBY

@pytest.mark.parametrize("power", list(Power))
def test_power_str_round_trip(power):
    assert Power.from_str(power.to_str()) is power

@pytest.mark.parametrize("value", ["", "off", "ON", "Standby", " on", "on ", "toggle"])
def test_power_rejects_unknown_strings(value):
    with pytest.raises(YxcValueError) as exc_info:
        Power.from_str(value)
    assert isinstance(exc_info.value, ValueError)
    assert "power state" in str(exc_info.value)

def test_device_info_optional_fields():
    info = DeviceInfo.from_json({
        "model_name": "RX-V6A",
        "destination": "BG",
        "device_id": "AC44F2000000",
        "system_version": 1.7,
        "api_version": 2.11,
        "netmodule_version": "1390    ",
        "netmodule_checksum": "12345678",
        "operation_mode": "normal",
    })
    assert info.model_name == "RX-V6A"
    assert info.destination == "BG"
    assert info.system_version == 1.7
    assert info.api_version == 2.11
    assert info.to_jsonable()["netmodule_checksum"] == "12345678"
    assert "operation_mode" not in info.to_jsonable()

def test_device_info_wrong_type():
    with pytest.raises(YxcFormatError):
        DeviceInfo.from_json({"model_name": 42})

def test_device_info_equality():
    assert DeviceInfo.from_json({"model_name": "RX-V6A"}) == DeviceInfo(model_name="RX-V6A")
    assert DeviceInfo(model_name="RX-V6A") != DeviceInfo(model_name="RX-A2A")

def test_features_full_record():
    features = Features.from_json({
        "system": {
            "func_list": ["wired_lan", "wireless_lan", "party_mode"],
            "zone_num": 2,
            "input_list": [
                {"id": "tuner", "distribution_enable": True, "rename_enable": False, "account_enable": False, "play_info_type": "tuner"},
                {"id": "hdmi1", "distribution_enable": False, "rename_enable": True, "account_enable": False, "play_info_type": "none"},
            ],
        },
        "zone": [{"id": "main"}],
    })
    assert features.inputs == ["tuner", "hdmi1"]
    assert features.zone_num == 2
    assert features.func_list == ["wired_lan", "wireless_lan", "party_mode"]
    assert features.input_list[0].play_info_type == "tuner"
    assert features.input_list[1].rename_enable is True
    assert features.to_jsonable() == {
        "inputs": ["tuner", "hdmi1"],
        "func_list": ["wired_lan", "wireless_lan", "party_mode"],
        "zone_num": 2,
    }

@pytest.mark.parametrize("data", [
    {},
    {"system": {}},
    {"system": {"input_list": {"id": "hdmi1"}}},
    {"system": {"input_list": [{"name": "HDMI 1"}]}},
    {"system": {"input_list": ["hdmi1"]}},
])
def test_features_malformed(data):
    with pytest.raises(YxcFormatError):
        Features.from_json(data)
