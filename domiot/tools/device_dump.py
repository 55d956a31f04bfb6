import argparse
import asyncio
import sys

import hexdump

from domiot.io import ChannelIOError, open_channel


async def dump(location: str):
    channel = open_channel(location)
    await channel.open()
    failed = asyncio.Event()

    def on_data(chunk: bytes):
        hexdump.hexdump(chunk)

    def on_error(err: Exception):
        print(err, file=sys.stderr)
        failed.set()

    channel.read(on_data, on_error)
    try:
        await failed.wait()
    finally:
        await channel.close()


def main():
    """
    A utility to read from a device file or serial port and print to stdout as hex
    """

    parser = argparse.ArgumentParser(description='Read data from a device and print to stdout')
    parser.add_argument("location", help="Device file, or serial:<port>[@<baud>]")
    args = parser.parse_args()

    try:
        asyncio.run(dump(args.location))
    except ChannelIOError as err:
        print(err, file=sys.stderr)
        sys.exit(1)
    except KeyboardInterrupt:
        pass
