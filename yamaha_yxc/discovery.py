#
# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""
mDNS discovery of Yamaha receivers by advertised service name.

Yamaha receivers advertise themselves as "<room name>._http._tcp.local.". Discovery
browses that service type and consumes a stream of DiscoveryEvent's until one of:

  1. A ServiceResolved event whose full name matches; its addresses are returned.
  2. The search has been (re)started max_search_restarts times without a match; an
     empty set is returned.
  3. The event stream ends; an empty set is returned.

mDNS has no explicit "not found" answer, so absence is inferred from the number of
search cycles that passed without a match.
"""

from __future__ import annotations

import asyncio

from zeroconf import IPVersion, InterfaceChoice, ServiceStateChange, Zeroconf
from zeroconf.asyncio import AsyncZeroconf, AsyncServiceBrowser, AsyncServiceInfo

from .internal_types import *
from .pkg_logging import logger
from .exceptions import YxcDiscoveryError
from .constants import (
    HTTP_SERVICE_TYPE,
    DEFAULT_MAX_SEARCH_RESTARTS,
    DEFAULT_RESOLVE_TIMEOUT,
    INITIAL_SEARCH_INTERVAL,
    MAX_SEARCH_INTERVAL,
  )
from .util import get_local_ip_addresses, full_service_name

MAX_QUEUE_SIZE = 1000

class DiscoveryEvent:
    """Base class for events delivered by a DiscoveryEventSource"""
    pass

class SearchStarted(DiscoveryEvent):
    """A search cycle for a service type has (re)started"""
    service_type: str

    def __init__(self, service_type: str) -> None:
        self.service_type = service_type

    def __str__(self) -> str:
        return f"SearchStarted({self.service_type!r})"

class SearchStopped(DiscoveryEvent):
    """Browsing for a service type has stopped"""
    service_type: str

    def __init__(self, service_type: str) -> None:
        self.service_type = service_type

    def __str__(self) -> str:
        return f"SearchStopped({self.service_type!r})"

class ServiceFound(DiscoveryEvent):
    """A service instance has been seen but not yet resolved"""
    service_type: str
    fullname: str

    def __init__(self, service_type: str, fullname: str) -> None:
        self.service_type = service_type
        self.fullname = fullname

    def __str__(self) -> str:
        return f"ServiceFound({self.fullname!r})"

class ServiceRemoved(DiscoveryEvent):
    """A service instance has gone away"""
    service_type: str
    fullname: str

    def __init__(self, service_type: str, fullname: str) -> None:
        self.service_type = service_type
        self.fullname = fullname

    def __str__(self) -> str:
        return f"ServiceRemoved({self.fullname!r})"

class ServiceResolved(DiscoveryEvent):
    """A service instance has been resolved to its addresses"""

    fullname: str
    """The full service instance name; e.g., "Sypialnia._http._tcp.local." """

    addresses: FrozenSet[IPv4Address]
    """The IPv4 addresses of the service"""

    port: Optional[int]
    server: Optional[str]

    def __init__(
            self,
            fullname: str,
            addresses: Iterable[Union[IPv4Address, str]],
            port: Optional[int]=None,
            server: Optional[str]=None
          ) -> None:
        self.fullname = fullname
        self.addresses = frozenset(IPv4Address(x) for x in addresses)
        self.port = port
        self.server = server

    def __str__(self) -> str:
        return f"ServiceResolved({self.fullname!r}, addresses={sorted(str(x) for x in self.addresses)}, port={self.port})"

async def scan(
        events: AsyncIterable[DiscoveryEvent],
        fullname: str,
        max_search_restarts: int=DEFAULT_MAX_SEARCH_RESTARTS,
      ) -> Set[IPv4Address]:
    """Consumes discovery events until a service named fullname is resolved or the search gives up.

    Parameters:
        events:               The discovery events, in arrival order.
        fullname:             The full service instance name to look for; e.g., "Sypialnia._http._tcp.local."
        max_search_restarts:  The number of SearchStarted events after which the search gives up.

    Returns:
        The addresses of the first matching ServiceResolved event, or an empty set if
        max_search_restarts SearchStarted events arrive first or the event stream ends.
        No events are consumed after the one that ends the scan.
    """
    search_attempts = 0
    async for event in events:
        logger.debug(f"Discovery event: {event}")
        if isinstance(event, SearchStarted):
            search_attempts += 1
            if search_attempts >= max_search_restarts:
                logger.debug(f"Giving up search for {fullname!r} after {search_attempts} search cycles")
                return set()
        elif isinstance(event, ServiceResolved):
            if event.fullname == fullname:
                logger.debug(f"Resolved {fullname!r}: {event.addresses}")
                return set(event.addresses)
    logger.debug(f"Discovery event stream ended without resolving {fullname!r}")
    return set()

class DiscoveryEventSource(
        AsyncContextManager['DiscoveryEventSource'],
        AsyncIterable[DiscoveryEvent]
      ):
    """An async context manager/iterable that delivers DiscoveryEvent's for a single service type.

    Events are queued by subclasses with put_event() and the stream is terminated with
    end_of_stream(). Iteration ends after the end of stream marker has been consumed.
    """
    service_type: str
    queue: asyncio.Queue[Optional[DiscoveryEvent]]
    eos: bool = False

    def __init__(self, service_type: str=HTTP_SERVICE_TYPE, max_queue_size: int=MAX_QUEUE_SIZE) -> None:
        self.service_type = service_type
        self.queue = asyncio.Queue(max_queue_size)

    async def start(self) -> None:
        """Called on entry to the context. Subclasses can override to begin producing events."""
        pass

    async def stop(self) -> None:
        """Called on exit from the context. Subclasses can override to release resources."""
        pass

    def put_event(self, event: DiscoveryEvent) -> None:
        if not self.eos:
            try:
                self.queue.put_nowait(event)
            except asyncio.QueueFull:
                logger.warning(f"Queue full, dropping discovery event {event}")

    def end_of_stream(self) -> None:
        if not self.eos:
            self.eos = True
            try:
                # wake up any waiting tasks
                self.queue.put_nowait(None)
            except asyncio.QueueFull:
                # queue is full so waiters will wake up soon
                pass

    async def receive(self) -> Optional[DiscoveryEvent]:
        if self.eos and self.queue.empty():
            return None
        result = await self.queue.get()
        self.queue.task_done()
        return result

    async def iter_events(self) -> AsyncIterator[DiscoveryEvent]:
        while True:
            event = await self.receive()
            if event is None:
                break
            yield event

    def __aiter__(self) -> AsyncIterator[DiscoveryEvent]:
        return self.iter_events()

    async def __aenter__(self) -> Self:
        await self.start()
        return self

    async def __aexit__(
            self,
            exc_type: Optional[type[BaseException]],
            exc: Optional[BaseException],
            tb: Optional[TracebackType]
      ) -> bool:
        try:
            await self.stop()
        finally:
            self.end_of_stream()
        return False

class ZeroconfEventSource(DiscoveryEventSource):
    """A DiscoveryEventSource that browses the local network with python-zeroconf.

    A SearchStarted event is delivered when browsing begins and again at the start of each
    subsequent search cycle. Cycles follow an exponential schedule: the first interval is
    initial_search_interval seconds and each following interval doubles, up to max_search_interval.
    """

    interfaces: Optional[List[str]]
    """The local IPv4 addresses to browse on. If None, all non-loopback IPv4 addresses are used."""

    resolve_timeout: float
    initial_search_interval: float
    max_search_interval: float

    aiozc: Optional[AsyncZeroconf] = None
    browser: Optional[AsyncServiceBrowser] = None
    _loop: Optional[asyncio.AbstractEventLoop] = None
    _search_task: Optional[asyncio.Task[None]] = None
    _resolve_tasks: Set[asyncio.Task[None]]
    _stopping: bool = False

    def __init__(
            self,
            service_type: str=HTTP_SERVICE_TYPE,
            interfaces: Optional[Iterable[str]]=None,
            resolve_timeout: float=DEFAULT_RESOLVE_TIMEOUT,
            initial_search_interval: float=INITIAL_SEARCH_INTERVAL,
            max_search_interval: float=MAX_SEARCH_INTERVAL,
            max_queue_size: int=MAX_QUEUE_SIZE,
          ) -> None:
        super().__init__(service_type, max_queue_size=max_queue_size)
        self.interfaces = None if interfaces is None else list(interfaces)
        self.resolve_timeout = resolve_timeout
        self.initial_search_interval = initial_search_interval
        self.max_search_interval = max_search_interval
        self._resolve_tasks = set()

    def create_zeroconf(self) -> AsyncZeroconf:
        """Creates the AsyncZeroconf instance. Subclasses can override."""
        interfaces: Union[InterfaceChoice, List[str]]
        if self.interfaces is None:
            bind_addresses = get_local_ip_addresses(include_loopback=False)
            interfaces = InterfaceChoice.All if len(bind_addresses) == 0 else bind_addresses
        else:
            interfaces = self.interfaces
        logger.debug(f"Creating zeroconf instance on interfaces {interfaces}")
        return AsyncZeroconf(interfaces=interfaces, ip_version=IPVersion.V4Only)

    def create_browser(self, zc: Zeroconf) -> AsyncServiceBrowser:
        """Creates the service browser. Subclasses can override."""
        return AsyncServiceBrowser(zc, [self.service_type], handlers=[self._on_service_state_change])

    #@override
    async def start(self) -> None:
        self._loop = asyncio.get_running_loop()
        try:
            self.aiozc = self.create_zeroconf()
        except Exception as e:
            raise YxcDiscoveryError(f"Failed to create mDNS daemon: {e}") from e
        try:
            self.browser = self.create_browser(self.aiozc.zeroconf)
        except Exception as e:
            await self._close_zeroconf()
            raise YxcDiscoveryError(f"Failed to browse {self.service_type}: {e}") from e
        self._search_task = asyncio.create_task(self._run_search_cycles())

    #@override
    async def stop(self) -> None:
        # no new resolver tasks are started once stopping; browser callbacks can still arrive
        self._stopping = True
        if not self._search_task is None:
            search_task = self._search_task
            self._search_task = None
            search_task.cancel()
            await asyncio.gather(search_task, return_exceptions=True)
        await self._cancel_resolve_tasks()
        if not self.browser is None:
            browser = self.browser
            self.browser = None
            try:
                await browser.async_cancel()
            except Exception as e:
                logger.warning(f"Error cancelling mDNS browser for {self.service_type}: {e}")
            self.put_event(SearchStopped(self.service_type))
        await self._cancel_resolve_tasks()
        await self._close_zeroconf()

    async def _cancel_resolve_tasks(self) -> None:
        tasks = list(self._resolve_tasks)
        self._resolve_tasks.clear()
        for task in tasks:
            task.cancel()
        if len(tasks) > 0:
            await asyncio.gather(*tasks, return_exceptions=True)

    async def _close_zeroconf(self) -> None:
        if not self.aiozc is None:
            aiozc = self.aiozc
            self.aiozc = None
            try:
                await aiozc.async_close()
            except Exception as e:
                logger.warning(f"Error closing zeroconf instance: {e}")

    async def _run_search_cycles(self) -> None:
        interval = self.initial_search_interval
        while True:
            self.put_event(SearchStarted(self.service_type))
            await asyncio.sleep(interval)
            interval = min(interval * 2, self.max_search_interval)

    def _on_service_state_change(
            self,
            zeroconf: Zeroconf,
            service_type: str,
            name: str,
            state_change: ServiceStateChange
          ) -> None:
        # May be called from zeroconf's own thread
        loop = self._loop
        if loop is not None and not loop.is_closed():
            loop.call_soon_threadsafe(self.handle_state_change, service_type, name, state_change)

    def handle_state_change(self, service_type: str, name: str, state_change: ServiceStateChange) -> None:
        """Translates a zeroconf service state change into discovery events. Runs on the event loop."""
        if self.eos or self._stopping:
            return
        logger.debug(f"mDNS service {name} {state_change.name}")
        if state_change is ServiceStateChange.Removed:
            self.put_event(ServiceRemoved(service_type, name))
            return
        if state_change is ServiceStateChange.Added:
            self.put_event(ServiceFound(service_type, name))
        task = asyncio.create_task(self._resolve(service_type, name))
        self._resolve_tasks.add(task)
        task.add_done_callback(self._resolve_tasks.discard)

    async def resolve_service(self, service_type: str, name: str) -> Optional[ServiceResolved]:
        """Queries the addresses of a service instance. Returns None if the query times out.
           Subclasses can override."""
        aiozc = self.aiozc
        if aiozc is None:
            return None
        info = AsyncServiceInfo(service_type, name)
        if not await info.async_request(aiozc.zeroconf, self.resolve_timeout * 1000.0):
            return None
        return ServiceResolved(
            name,
            info.parsed_addresses(IPVersion.V4Only),
            port=info.port,
            server=info.server,
          )

    async def _resolve(self, service_type: str, name: str) -> None:
        try:
            event = await self.resolve_service(service_type, name)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.info(f"Failed to resolve mDNS service {name}: {e}")
            return
        if event is None:
            logger.debug(f"Timed out resolving mDNS service {name}")
            return
        self.put_event(event)

    def __str__(self) -> str:
        return f"ZeroconfEventSource({self.service_type!r})"

    def __repr__(self) -> str:
        return str(self)

async def discover(
        name: str,
        service_type: str=HTTP_SERVICE_TYPE,
        max_search_restarts: int=DEFAULT_MAX_SEARCH_RESTARTS,
        timeout: Optional[float]=None,
        interfaces: Optional[Iterable[str]]=None,
        event_source: Optional[DiscoveryEventSource]=None,
      ) -> Set[IPv4Address]:
    """Finds the addresses of the receiver advertised under a given name.

    Parameters:
        name:                 The advertised instance name; e.g., "Sypialnia".
        service_type:         The mDNS service type to browse. Defaults to "_http._tcp.local.".
        max_search_restarts:  The number of search cycles after which the search gives up. Defaults to 6.
        timeout:              If not None, the maximum time (in seconds) to search. An expired search
                                returns an empty set.
        interfaces:           The local IPv4 addresses to browse on. Defaults to all non-loopback addresses.
        event_source:         The source of discovery events. If None, a ZeroconfEventSource is created.

    Returns:
        The IPv4 addresses of "<name>.<service_type>", or an empty set if it was not found.

    Raises:
        YxcDiscoveryError:  The mDNS daemon or browser could not be created.
    """
    fullname = full_service_name(name, service_type)
    if event_source is None:
        event_source = ZeroconfEventSource(service_type, interfaces=interfaces)
    async with event_source as source:
        try:
            return await asyncio.wait_for(scan(source, fullname, max_search_restarts), timeout)
        except asyncio.TimeoutError:
            logger.debug(f"Search for {fullname!r} timed out after {timeout} seconds")
            return set()

def discover_sync(
        name: str,
        service_type: str=HTTP_SERVICE_TYPE,
        max_search_restarts: int=DEFAULT_MAX_SEARCH_RESTARTS,
        timeout: Optional[float]=None,
        interfaces: Optional[Iterable[str]]=None,
      ) -> Set[IPv4Address]:
    """Blocking version of discover() that runs on a private event loop."""
    loop = asyncio.new_event_loop()
    try:
        asyncio.set_event_loop(loop)
        result = loop.run_until_complete(discover(
            name,
            service_type=service_type,
            max_search_restarts=max_search_restarts,
            timeout=timeout,
            interfaces=interfaces,
          ))
    finally:
        asyncio.set_event_loop(None)
        loop.close()
    return result
