#!/usr/bin/env python3

import sys
import logging
import asyncio
import yamaha_yxc as yxc

#logging.basicConfig(level=logging.DEBUG)

async def amain(name: str):
    # discover() browses _http._tcp.local. until the named receiver resolves or 6 search cycles pass
    addresses = await yxc.discover(name, timeout=60.0)
    print(f"{name}: {sorted(str(x) for x in addresses)}")
    for address in addresses:
        async with yxc.YxcDevice(str(address)) as device:
            info = await device.get_device_info()
            print(f"{address}: model={info.model_name}")
            status = await device.get_status()
            print(f"{address}: main zone status={status}")

loop = asyncio.new_event_loop()
try:
    asyncio.set_event_loop(loop)
    loop.run_until_complete(amain(sys.argv[1] if len(sys.argv) > 1 else "Sypialnia"))
finally:
    loop.close()
