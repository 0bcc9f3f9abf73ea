#
# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

from __future__ import annotations

from typing import Any, List

import pytest

from yamaha_yxc import YxcDevice, YxcTransport

class FakeTransport(YxcTransport):
    """Replays canned JSON replies and records the requested URLs."""

    def __init__(self, *replies: Any) -> None:
        self.replies: List[Any] = list(replies)
        self.urls: List[str] = []
        self.closed = False

    async def get_json(self, url: str) -> Any:
        self.urls.append(url)
        reply = self.replies.pop(0)
        if isinstance(reply, BaseException):
            raise reply
        return reply

    def close(self) -> None:
        self.closed = True

@pytest.fixture
def make_device():
    def _make(*replies: Any, host: str = "sypialnia.local") -> YxcDevice:
        return YxcDevice(host, transport=FakeTransport(*replies))
    return _make
