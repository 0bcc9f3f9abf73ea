from __future__ import annotations

import asyncio
from ipaddress import IPv4Address

import pytest
from zeroconf import ServiceStateChange

from yamaha_yxc import (
    scan,
    discover,
    DiscoveryEventSource,
    ZeroconfEventSource,
    SearchStarted,
    SearchStopped,
    ServiceFound,
    ServiceRemoved,
    ServiceResolved,
    YxcDiscoveryError,
    HTTP_SERVICE_TYPE,
)

SYPIALNIA = "Sypialnia._http._tcp.local."

class RecordingStream:
    """An async iterable over a fixed list of events that counts how many were consumed."""

    def __init__(self, events):
        self.events = list(events)
        self.consumed = 0

    async def _iter(self):
        for event in self.events:
            self.consumed += 1
            yield event

    def __aiter__(self):
        return self._iter()

class ScriptedEventSource(DiscoveryEventSource):
    """Delivers a fixed list of events, then optionally ends the stream."""

    def __init__(self, events, end=True):
        super().__init__(HTTP_SERVICE_TYPE)
        self.events = list(events)
        self.end = end
        self.started = False
        self.stopped = False

    async def start(self):
        self.started = True
        for event in self.events:
            self.put_event(event)
        if self.end:
            self.end_of_stream()

    async def stop(self):
        self.stopped = True

def test_scan_gives_up_on_sixth_search_started():
    stream = RecordingStream([SearchStarted(HTTP_SERVICE_TYPE) for _ in range(10)])
    result = asyncio.run(scan(stream, SYPIALNIA))
    assert result == set()
    assert stream.consumed == 6

def test_scan_does_not_give_up_before_sixth_search_started():
    events = [SearchStarted(HTTP_SERVICE_TYPE) for _ in range(5)]
    events.append(ServiceResolved(SYPIALNIA, ["10.0.0.5"]))
    events.append(SearchStarted(HTTP_SERVICE_TYPE))
    stream = RecordingStream(events)
    result = asyncio.run(scan(stream, SYPIALNIA))
    assert result == {IPv4Address("10.0.0.5")}
    assert stream.consumed == 6

def test_scan_returns_first_match_immediately():
    events = [
        SearchStarted(HTTP_SERVICE_TYPE),
        ServiceResolved(SYPIALNIA, ["10.0.0.5"]),
        ServiceResolved(SYPIALNIA, ["10.0.0.6"]),
        SearchStarted(HTTP_SERVICE_TYPE),
    ]
    stream = RecordingStream(events)
    result = asyncio.run(scan(stream, SYPIALNIA))
    assert result == {IPv4Address("10.0.0.5")}
    assert stream.consumed == 2

def test_scan_ignores_other_services_and_events():
    events = [
        SearchStarted(HTTP_SERVICE_TYPE),
        ServiceFound(HTTP_SERVICE_TYPE, "Salon._http._tcp.local."),
        ServiceResolved("Salon._http._tcp.local.", ["10.0.0.7"]),
        ServiceResolved("sypialnia._http._tcp.local.", ["10.0.0.8"]),
        ServiceRemoved(HTTP_SERVICE_TYPE, "Salon._http._tcp.local."),
        ServiceFound(HTTP_SERVICE_TYPE, SYPIALNIA),
        ServiceResolved(SYPIALNIA, ["10.0.0.5", "192.168.1.5"]),
    ]
    result = asyncio.run(scan(RecordingStream(events), SYPIALNIA))
    assert result == {IPv4Address("10.0.0.5"), IPv4Address("192.168.1.5")}

def test_scan_stream_end_returns_empty_set():
    events = [SearchStarted(HTTP_SERVICE_TYPE), ServiceResolved("Salon._http._tcp.local.", ["10.0.0.7"])]
    assert asyncio.run(scan(RecordingStream(events), SYPIALNIA)) == set()
    assert asyncio.run(scan(RecordingStream([]), SYPIALNIA)) == set()

def test_scan_custom_restart_limit():
    stream = RecordingStream([SearchStarted(HTTP_SERVICE_TYPE) for _ in range(10)])
    assert asyncio.run(scan(stream, SYPIALNIA, max_search_restarts=2)) == set()
    assert stream.consumed == 2

def test_discover_matches_full_name():
    source = ScriptedEventSource([
        SearchStarted(HTTP_SERVICE_TYPE),
        ServiceResolved(SYPIALNIA, ["10.0.0.5"]),
    ])
    result = asyncio.run(discover("Sypialnia", event_source=source))
    assert result == {IPv4Address("10.0.0.5")}
    assert source.started and source.stopped

def test_discover_not_found():
    source = ScriptedEventSource([SearchStarted(HTTP_SERVICE_TYPE) for _ in range(6)], end=False)
    assert asyncio.run(discover("Sypialnia", event_source=source)) == set()
    assert source.stopped

def test_discover_timeout():
    source = ScriptedEventSource([SearchStarted(HTTP_SERVICE_TYPE)], end=False)
    assert asyncio.run(discover("Sypialnia", timeout=0.05, event_source=source)) == set()
    assert source.stopped

def test_event_source_ends_iteration_after_exit():
    async def run():
        source = ScriptedEventSource([SearchStarted(HTTP_SERVICE_TYPE)], end=False)
        async with source:
            pass
        return [event async for event in source]
    events = asyncio.run(run())
    assert len(events) == 1
    assert isinstance(events[0], SearchStarted)

class FakeAsyncZeroconf:
    def __init__(self):
        self.zeroconf = object()
        self.closed = False

    async def async_close(self):
        self.closed = True

class FakeBrowser:
    def __init__(self):
        self.cancelled = False

    async def async_cancel(self):
        self.cancelled = True

class FakeZeroconfEventSource(ZeroconfEventSource):
    def __init__(self, addresses=None, fail_zeroconf=False, fail_browser=False, **kwargs):
        super().__init__(**kwargs)
        self.addresses = {} if addresses is None else addresses
        self.fail_zeroconf = fail_zeroconf
        self.fail_browser = fail_browser
        self.fake_zc = FakeAsyncZeroconf()
        self.fake_browser = FakeBrowser()

    def create_zeroconf(self):
        if self.fail_zeroconf:
            raise OSError("No usable network interfaces")
        return self.fake_zc

    def create_browser(self, zc):
        assert zc is self.fake_zc.zeroconf
        if self.fail_browser:
            raise RuntimeError("browse failed")
        return self.fake_browser

    async def resolve_service(self, service_type, name):
        if name not in self.addresses:
            return None
        return ServiceResolved(name, self.addresses[name], port=80)

def test_zeroconf_creation_failure_is_reported():
    source = FakeZeroconfEventSource(fail_zeroconf=True)
    with pytest.raises(YxcDiscoveryError) as exc_info:
        asyncio.run(discover("Sypialnia", event_source=source))
    assert isinstance(exc_info.value.__cause__, OSError)

def test_browser_creation_failure_closes_zeroconf():
    source = FakeZeroconfEventSource(fail_browser=True)
    with pytest.raises(YxcDiscoveryError):
        asyncio.run(discover("Sypialnia", event_source=source))
    assert source.fake_zc.closed

def test_zeroconf_source_search_cycles_bound_the_scan():
    source = FakeZeroconfEventSource(initial_search_interval=0.001, max_search_interval=0.004)
    assert asyncio.run(discover("Sypialnia", event_source=source)) == set()
    assert source.fake_browser.cancelled
    assert source.fake_zc.closed

def test_zeroconf_source_resolves_added_service():
    source = FakeZeroconfEventSource(
        addresses={SYPIALNIA: ["10.0.0.5"]},
        initial_search_interval=10.0,
    )
    async def run():
        async with source:
            source._on_service_state_change(
                zeroconf=None,
                service_type=HTTP_SERVICE_TYPE,
                name="Salon._http._tcp.local.",
                state_change=ServiceStateChange.Added,
            )
            source.handle_state_change(HTTP_SERVICE_TYPE, SYPIALNIA, ServiceStateChange.Added)
            return await asyncio.wait_for(scan(source, SYPIALNIA), 5.0)
    assert asyncio.run(run()) == {IPv4Address("10.0.0.5")}
    assert source.fake_zc.closed

def test_zeroconf_source_event_sequence():
    source = FakeZeroconfEventSource(
        addresses={SYPIALNIA: ["10.0.0.5"]},
        initial_search_interval=10.0,
    )
    async def run():
        async with source:
            # let the search cycle task deliver its first SearchStarted
            await asyncio.sleep(0)
            source.handle_state_change(HTTP_SERVICE_TYPE, SYPIALNIA, ServiceStateChange.Added)
            source.handle_state_change(HTTP_SERVICE_TYPE, SYPIALNIA, ServiceStateChange.Removed)
            # let the resolve task run
            for _ in range(5):
                await asyncio.sleep(0)
        return [event async for event in source]
    events = asyncio.run(run())
    kinds = [type(event) for event in events]
    assert kinds == [SearchStarted, ServiceFound, ServiceRemoved, ServiceResolved, SearchStopped]

class ChattyBrowser(FakeBrowser):
    """Reports a service while being cancelled, as a browser thread can during shutdown."""

    def __init__(self, source):
        super().__init__()
        self.source = source

    async def async_cancel(self):
        self.source.handle_state_change(HTTP_SERVICE_TYPE, SYPIALNIA, ServiceStateChange.Added)
        await asyncio.sleep(0)
        self.source.handle_state_change(HTTP_SERVICE_TYPE, SYPIALNIA, ServiceStateChange.Updated)
        await super().async_cancel()

def test_zeroconf_source_exit_leaves_no_pending_tasks():
    source = FakeZeroconfEventSource(
        addresses={SYPIALNIA: ["10.0.0.5"]},
        initial_search_interval=10.0,
    )
    source.fake_browser = ChattyBrowser(source)
    async def run():
        async with source:
            pass
        return [t for t in asyncio.all_tasks() if t is not asyncio.current_task()]
    assert asyncio.run(run()) == []
    assert source.fake_browser.cancelled
    assert source.fake_zc.closed
