#!/usr/bin/env python3

# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

from __future__ import annotations

import sys
import argparse
import json
import asyncio
import logging

from yamaha_yxc.internal_types import *

from yamaha_yxc import (
    __version__ as pkg_version,
    YxcDevice,
    YxcTransport,
    Power,
    discover,
    DEFAULT_HTTP_TIMEOUT,
    DEFAULT_MAX_SEARCH_RESTARTS,
    HTTP_SERVICE_TYPE,
  )

class CmdExitError(RuntimeError):
    exit_code: int

    def __init__(self, exit_code: int, msg: Optional[str]=None):
        if msg is None:
            msg = f"Command exited with return code {exit_code}"
        super().__init__(msg)
        self.exit_code = exit_code

class ArgparseExitError(CmdExitError):
    pass

class NoExitArgumentParser(argparse.ArgumentParser):
    def exit(self, status=0, message=None):
        if message:
            self._print_message(message, sys.stderr)
        raise ArgparseExitError(status, message)

class CommandHandler:
    _argv: Optional[Sequence[str]]
    _parser: argparse.ArgumentParser
    _args: argparse.Namespace
    _provide_traceback: bool = True
    _transport: Optional[YxcTransport] = None

    def __init__(self, argv: Optional[Sequence[str]]=None, transport: Optional[YxcTransport]=None):
        self._argv = argv
        self._transport = transport

    def pretty_print(self, value: Jsonable) -> None:
        print(json.dumps(value, indent=2, sort_keys=True))
        sys.stdout.flush()

    def get_device(self) -> YxcDevice:
        host: Optional[str] = self._args.host
        if host is None:
            raise CmdExitError(1, "A receiver host is required; use --host")
        return YxcDevice(host, transport=self._transport, timeout=self._args.http_timeout)

    async def cmd_bare(self) -> int:
        print("A command is required", file=sys.stderr)
        return 1

    async def cmd_info(self) -> int:
        async with self.get_device() as device:
            info = await device.get_device_info()
        self.pretty_print(info.to_jsonable())
        return 0

    async def cmd_features(self) -> int:
        async with self.get_device() as device:
            features = await device.get_features()
        self.pretty_print(features.to_jsonable())
        return 0

    async def cmd_status(self) -> int:
        async with self.get_device() as device:
            status = await device.get_status(zone=self._args.zone)
        self.pretty_print(status.to_jsonable())
        return 0

    async def cmd_power(self) -> int:
        power = Power.from_str(self._args.power)
        async with self.get_device() as device:
            await device.set_power(power, zone=self._args.zone)
        return 0

    async def cmd_input(self) -> int:
        async with self.get_device() as device:
            await device.set_input(self._args.input, zone=self._args.zone, mode=self._args.mode)
        return 0

    async def cmd_discover(self) -> int:
        bind_addresses: Optional[List[str]] = self._args.bind_addresses
        if not bind_addresses is None and len(bind_addresses) == 0:
            bind_addresses = None
        addresses = await discover(
            self._args.name,
            service_type=self._args.service_type,
            max_search_restarts=self._args.max_search_restarts,
            timeout=self._args.timeout,
            interfaces=bind_addresses,
          )
        self.pretty_print(sorted(str(x) for x in addresses))
        return 0

    async def cmd_version(self) -> int:
        print(pkg_version)
        return 0

    async def arun(self) -> int:
        """Run the yxc command-line tool with provided arguments

        Args:
            argv (Optional[Sequence[str]], optional):
                A list of commandline arguments (NOT including the program as argv[0]!),
                or None to use sys.argv[1:]. Defaults to None.

        Returns:
            int: The exit code that would be returned if this were run as a standalone command.
        """
        parser = NoExitArgumentParser(prog="yxc", description="Control a Yamaha AV receiver through its Yamaha Extended Control API.")


        # ======================= Main command

        self._parser = parser
        parser.add_argument('--traceback', "--tb", action='store_true', default=False,
                            help='Display detailed exception information')
        parser.add_argument('--log-level', dest='log_level', default='warning',
                            choices=['debug', 'info', 'warning', 'error', 'critical'],
                            help='''The logging level to use. Default: warning''')
        parser.add_argument('--host', default=None,
                            help='''The hostname or IP address of the receiver. Required by device commands.''')
        parser.add_argument('--http-timeout', dest='http_timeout', type=float, default=DEFAULT_HTTP_TIMEOUT,
                            help=f'''The HTTP request timeout, in seconds. Default: {DEFAULT_HTTP_TIMEOUT}''')
        parser.set_defaults(func=self.cmd_bare)

        subparsers = parser.add_subparsers(
                            title='Commands',
                            description='Valid commands',
                            help='Additional help available with "<command-name> -h"')


        # ======================= info

        parser_info = subparsers.add_parser('info', description="Display the receiver's model and firmware information")
        parser_info.set_defaults(func=self.cmd_info)

        # ======================= features

        parser_features = subparsers.add_parser('features', description="Display the receiver's features, including its inputs")
        parser_features.set_defaults(func=self.cmd_features)

        # ======================= status

        parser_status = subparsers.add_parser('status', description="Display the status of a zone")
        parser_status.add_argument('--zone', default=None,
                            help='''The zone. Default: main''')
        parser_status.set_defaults(func=self.cmd_status)

        # ======================= power

        parser_power = subparsers.add_parser('power', description="Turn a zone on or put it into standby")
        parser_power.add_argument('power', choices=[ x.value for x in Power ],
                            help='''The requested power state''')
        parser_power.add_argument('--zone', default=None,
                            help='''The zone. Default: main''')
        parser_power.set_defaults(func=self.cmd_power)

        # ======================= input

        parser_input = subparsers.add_parser('input', description="Select the input of a zone")
        parser_input.add_argument('input',
                            help='''The input ID; e.g., "hdmi1". See the "features" command.''')
        parser_input.add_argument('--zone', default=None,
                            help='''The zone. Default: main''')
        parser_input.add_argument('--mode', default=None,
                            help='''The selection mode. Default: none''')
        parser_input.set_defaults(func=self.cmd_input)

        # ======================= discover

        parser_discover = subparsers.add_parser('discover', description="Find the addresses of a receiver by its advertised mDNS name")
        parser_discover.add_argument('name',
                            help='''The advertised name of the receiver; e.g., "Sypialnia"''')
        parser_discover.add_argument('--service-type', dest='service_type', default=HTTP_SERVICE_TYPE,
                            help=f'''The mDNS service type to browse. Default: "{HTTP_SERVICE_TYPE}"''')
        parser_discover.add_argument('--max-search-restarts', dest='max_search_restarts', type=int, default=DEFAULT_MAX_SEARCH_RESTARTS,
                            help=f'''The number of search cycles after which to give up. Default: {DEFAULT_MAX_SEARCH_RESTARTS}''')
        parser_discover.add_argument('--timeout', type=float, default=None,
                            help='''The maximum time to search, in seconds. Default: no limit''')
        parser_discover.add_argument('-b', '--bind', dest="bind_addresses", action='append', default=[],
                            help='''The local IPv4 address to browse on. May be repeated. Default: all local non-loopback addresses.''')
        parser_discover.set_defaults(func=self.cmd_discover)

        # ======================= version

        parser_version = subparsers.add_parser('version',
                                description='''Display version information.''')
        parser_version.set_defaults(func=self.cmd_version)

        # =========================================================

        try:
            args = parser.parse_args(self._argv)
        except ArgparseExitError as ex:
            return ex.exit_code
        traceback: bool = args.traceback
        self._provide_traceback = traceback

        try:
            logging.basicConfig(
                level=logging.getLevelName(args.log_level.upper()),
            )
            self._args = args
            func: Callable[[], Awaitable[int]] = args.func
            logging.debug(f"Running command {func.__name__}, tb = {traceback}")
            rc = await func()
            logging.debug(f"Command {func.__name__} returned {rc}")
        except Exception as ex:
            if isinstance(ex, CmdExitError):
                rc = ex.exit_code
            else:
                rc = 1
            if rc != 0:
                if traceback:
                    raise
            print(f"yxc: error: {ex}", file=sys.stderr)
        except BaseException as ex:
            print(f"yxc: Unhandled exception: {ex}", file=sys.stderr)
            raise

        return rc

    def run(self) -> int:
        loop = asyncio.new_event_loop()
        try:
            asyncio.set_event_loop(loop)
            rc = loop.run_until_complete(self.arun())
        finally:
            loop.close()
        return rc

def run(argv: Optional[Sequence[str]]=None) -> int:
    try:
        rc = CommandHandler(argv).run()
    except CmdExitError as ex:
        rc = ex.exit_code
    return rc

async def arun(argv: Optional[Sequence[str]]=None, transport: Optional[YxcTransport]=None) -> int:
    try:
        rc = await CommandHandler(argv, transport=transport).arun()
    except CmdExitError as ex:
        rc = ex.exit_code
    return rc

# allow running with "python3 -m", or as a standalone script
if __name__ == "__main__":
    sys.exit(run())
