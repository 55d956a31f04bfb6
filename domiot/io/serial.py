import asyncio
import logging
from functools import partial
from typing import Optional

import serial
import serial_asyncio

from domiot.io import DeviceChannel, ChannelIOError, DataCallback, ErrorCallback, SERIAL_PREFIX
from domiot.log import LoggingMixin

READ_SIZE = 1024
DEFAULT_BAUDRATE = 9600


class SerialDeviceChannel(DeviceChannel, LoggingMixin):
    """
    A device attached to a serial port. Since a serial stream has no message
    boundaries, every write is terminated with ``line_terminator``.
    """
    def __init__(self, location: str, port: str, baudrate: int = DEFAULT_BAUDRATE, line_terminator: str = "\n"):
        LoggingMixin.__init__(self,
                              logger=logging.getLogger("device"),
                              extra_func=partial(str, f"[Serial Device {port}]"))
        self.location = location
        self.port = port
        self.baudrate = baudrate
        self.line_terminator = line_terminator
        self._reader: Optional[asyncio.StreamReader] = None
        self._writer: Optional[asyncio.StreamWriter] = None
        self._read_task: Optional[asyncio.Task] = None

    @classmethod
    def from_location(cls, location: str):
        """
        Parse ``serial:<port>[@<baud>]``
        """
        port, _, baud = location[len(SERIAL_PREFIX):].partition("@")
        if len(port) == 0:
            raise ChannelIOError(location, "No serial port given")
        if len(baud) == 0:
            return cls(location, port)
        try:
            return cls(location, port, int(baud))
        except ValueError:
            raise ChannelIOError(location, f"Invalid baud rate {baud!r}")

    async def open(self) -> None:
        self.info(f"Opening serial port {self.port}")
        try:
            self._reader, self._writer = await serial_asyncio.open_serial_connection(
                url=self.port, baudrate=self.baudrate)
        except (serial.SerialException, OSError) as err:
            raise ChannelIOError(self.location, f"Failed to open serial port: {err}") from err
        self.info(f"Opened serial port {self.port} at {self.baudrate} baud")

    def read(self, on_data: DataCallback, on_error: ErrorCallback) -> None:
        if self._reader is None:
            on_error(ChannelIOError(self.location, "Serial port is not open"))
            return
        if self._read_task is not None:
            raise RuntimeError(f"Already reading from {self.location}")
        self._read_task = asyncio.ensure_future(self._read_loop(on_data, on_error))

    async def _read_loop(self, on_data: DataCallback, on_error: ErrorCallback):
        while True:
            try:
                data = await self._reader.read(READ_SIZE)
            except (serial.SerialException, OSError) as err:
                on_error(ChannelIOError(self.location, f"Failed to read from serial port: {err}"))
                return
            if len(data) == 0:
                on_error(ChannelIOError(self.location, "Serial port was closed"))
                return
            self.debug(f"Read {len(data)} bytes: {data}")
            on_data(data)

    async def write(self, payload: str) -> None:
        if self._writer is None:
            raise ChannelIOError(self.location, "Serial port is not open")
        data = (payload + self.line_terminator).encode("utf-8")
        try:
            self._writer.write(data)
            await self._writer.drain()
        except (serial.SerialException, OSError) as err:
            raise ChannelIOError(self.location, f"Failed to write to serial port: {err}") from err
        self.debug(f"Wrote {len(data)} bytes: {data}")

    async def close(self) -> None:
        if self._read_task is not None:
            self._read_task.cancel()
            try:
                await self._read_task
            except asyncio.CancelledError:
                pass
            self._read_task = None
        if self._writer is not None:
            self._writer.close()
            self._writer = None
            self._reader = None
        self.info(f"Closed serial port {self.port}")
