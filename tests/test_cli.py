from __future__ import annotations

import asyncio
import json

from yamaha_yxc import __version__
from yamaha_yxc.__main__ import arun

from conftest import FakeTransport

BASE = "http://10.0.0.5/YamahaExtendedControl/v1"

def test_version(capsys):
    assert asyncio.run(arun(["version"])) == 0
    assert capsys.readouterr().out.strip() == __version__

def test_no_command(capsys):
    assert asyncio.run(arun([])) == 1
    assert "command is required" in capsys.readouterr().err

def test_device_command_requires_host(capsys):
    assert asyncio.run(arun(["info"], transport=FakeTransport())) == 1
    assert "--host" in capsys.readouterr().err

def test_info(capsys):
    transport = FakeTransport({"response_code": 0, "model_name": "RX-V6A", "device_id": "AC44F2000000"})
    assert asyncio.run(arun(["--host", "10.0.0.5", "info"], transport=transport)) == 0
    assert json.loads(capsys.readouterr().out) == {"model_name": "RX-V6A", "device_id": "AC44F2000000"}
    assert transport.urls == [f"{BASE}/system/getDeviceInfo"]

def test_features(capsys):
    transport = FakeTransport({"response_code": 0, "system": {"input_list": [{"id": "hdmi1"}, {"id": "optical"}]}})
    assert asyncio.run(arun(["--host", "10.0.0.5", "features"], transport=transport)) == 0
    assert json.loads(capsys.readouterr().out) == {"inputs": ["hdmi1", "optical"]}

def test_status(capsys):
    transport = FakeTransport({"response_code": 0, "power": "on", "input": "hdmi1"})
    assert asyncio.run(arun(["--host", "10.0.0.5", "status", "--zone", "zone2"], transport=transport)) == 0
    assert json.loads(capsys.readouterr().out) == {"power": "on", "input": "hdmi1"}
    assert transport.urls == [f"{BASE}/zone2/getStatus"]

def test_power():
    transport = FakeTransport({"response_code": 0})
    assert asyncio.run(arun(["--host", "10.0.0.5", "power", "standby"], transport=transport)) == 0
    assert transport.urls == [f"{BASE}/main/setPower?power=standby"]

def test_power_rejects_unknown_state(capsys):
    transport = FakeTransport({"response_code": 0})
    assert asyncio.run(arun(["--host", "10.0.0.5", "power", "off"], transport=transport)) == 2
    assert transport.urls == []

def test_input_with_mode():
    transport = FakeTransport({"response_code": 0})
    assert asyncio.run(arun(["--host", "10.0.0.5", "input", "hdmi1", "--mode", "list"], transport=transport)) == 0
    assert transport.urls == [f"{BASE}/main/setInput?input=hdmi1&mode=list"]

def test_device_error_reported(capsys):
    transport = FakeTransport({"response_code": 5})
    assert asyncio.run(arun(["--host", "10.0.0.5", "input", "hdmi9"], transport=transport)) == 1
    assert "Yamaha returned an error: 5" in capsys.readouterr().err
