from typing import Callable

DataCallback = Callable[[bytes], None]
ErrorCallback = Callable[[Exception], None]


class ChannelIOError(IOError):
    """
    A read or write on a device channel failed. Carries the channel location so the
    failure can be logged against the binding that owns the channel.
    """
    def __init__(self, location: str, message: str):
        super().__init__(f"{location}: {message}")
        self.location = location


class DeviceChannel:
    """
    A byte-oriented connection to a device, addressed by a location string.

    Reads are streaming: once started, chunks of arbitrary size are handed to the
    data callback as they arrive, and a failure is handed to the error callback after
    which no more chunks are delivered. Writes complete in the order they are issued.
    """
    location: str

    async def open(self) -> None:
        raise NotImplementedError

    def read(self, on_data: DataCallback, on_error: ErrorCallback) -> None:
        """
        Start delivering chunks from the device. Returns immediately.
        """
        raise NotImplementedError

    async def write(self, payload: str) -> None:
        """
        Send one message to the device.

        :raises ChannelIOError: if the device could not be written
        """
        raise NotImplementedError

    async def close(self) -> None:
        raise NotImplementedError


SERIAL_PREFIX = "serial:"


def open_channel(location: str) -> DeviceChannel:
    """
    Create the channel implementation for a location. Locations of the form
    ``serial:<port>[@<baud>]`` are serial ports, anything else is a device file.
    """
    if location.startswith(SERIAL_PREFIX):
        from domiot.io.serial import SerialDeviceChannel
        return SerialDeviceChannel.from_location(location)
    else:
        from domiot.io.file import FileDeviceChannel
        return FileDeviceChannel(location)
