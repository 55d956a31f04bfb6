import asyncio
import logging
import os
from concurrent.futures import ThreadPoolExecutor
from functools import partial
from typing import Optional

from domiot.io import DeviceChannel, ChannelIOError, DataCallback, ErrorCallback
from domiot.log import LoggingMixin

READ_SIZE = 1024


class FileDeviceChannel(DeviceChannel, LoggingMixin):
    """
    A device exposed as a file, such as a character device created by a kernel driver
    or a plain file used as a simulator.

    Reading keeps streaming past end-of-file: when a read returns nothing the reader
    waits ``poll_interval`` seconds and tries again. Every write opens the file,
    writes the whole payload as one message and closes it again.

    Blocking file calls run on two single-thread executors, one for reads and one for
    writes, so a stalled read never holds up writes and writes complete in the order
    they were issued.
    """
    def __init__(self, location: str, poll_interval: float = 0.100):
        LoggingMixin.__init__(self,
                              logger=logging.getLogger("device"),
                              extra_func=partial(str, f"[Device File {location}]"))
        self.location = location
        self.poll_interval = poll_interval
        self._reader = ThreadPoolExecutor(max_workers=1, thread_name_prefix=f"Device Reader {location}")
        self._writer = ThreadPoolExecutor(max_workers=1, thread_name_prefix=f"Device Writer {location}")
        self._read_task: Optional[asyncio.Task] = None
        self._closed = False

    async def open(self) -> None:
        if not os.path.exists(self.location):
            # The driver may create the device file later, reads and writes will retry the path
            self.warning("Device file does not exist yet")
        else:
            self.info("Opened device file")

    def read(self, on_data: DataCallback, on_error: ErrorCallback) -> None:
        if self._read_task is not None:
            raise RuntimeError(f"Already reading from {self.location}")
        self._read_task = asyncio.ensure_future(self._read_loop(on_data, on_error))

    async def _read_loop(self, on_data: DataCallback, on_error: ErrorCallback):
        loop = asyncio.get_running_loop()
        try:
            fd = await loop.run_in_executor(self._reader, os.open, self.location, os.O_RDONLY)
        except OSError as err:
            on_error(ChannelIOError(self.location, f"Failed to open for reading: {err}"))
            return
        try:
            while not self._closed:
                try:
                    data = await loop.run_in_executor(self._reader, os.read, fd, READ_SIZE)
                except OSError as err:
                    on_error(ChannelIOError(self.location, f"Failed to read: {err}"))
                    return
                if len(data) > 0:
                    self.debug(f"Read {len(data)} bytes: {data}")
                    on_data(data)
                else:
                    await asyncio.sleep(self.poll_interval)
        finally:
            # Closed on the reader thread, after any read still blocked on the device returns
            self._reader.submit(os.close, fd)

    async def write(self, payload: str) -> None:
        if self._closed:
            raise ChannelIOError(self.location, "Channel is closed")
        data = payload.encode("utf-8")
        loop = asyncio.get_running_loop()
        try:
            await loop.run_in_executor(self._writer, self._write_message, data)
        except OSError as err:
            raise ChannelIOError(self.location, f"Failed to write: {err}") from err
        self.debug(f"Wrote {len(data)} bytes: {data}")

    def _write_message(self, data: bytes):
        with open(self.location, "wb", buffering=0) as fp:
            fp.write(data)

    async def close(self) -> None:
        self._closed = True
        if self._read_task is not None:
            self._read_task.cancel()
            try:
                await self._read_task
            except asyncio.CancelledError:
                pass
            self._read_task = None
        self._reader.shutdown(wait=False)
        self._writer.shutdown(wait=True)
        self.info("Closed device file")
