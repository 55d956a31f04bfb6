import asyncio
from typing import Dict, List, Optional

from domiot.element import BoundElement
from domiot.io import ChannelIOError, DeviceChannel, DataCallback, ErrorCallback


class MockChannel(DeviceChannel):
    """
    Records writes instead of sending them, and lets a test feed chunks as if the
    device had sent them.
    """
    def __init__(self, location: str):
        self.location = location
        self.opened = False
        self.closed = False
        self.fail_writes = False
        self.writes: List[str] = []
        self.on_data: Optional[DataCallback] = None
        self.on_error: Optional[ErrorCallback] = None

    async def open(self) -> None:
        self.opened = True

    def read(self, on_data: DataCallback, on_error: ErrorCallback) -> None:
        self.on_data = on_data
        self.on_error = on_error

    async def write(self, payload: str) -> None:
        # Give other tasks a chance to run while the write is in flight
        await asyncio.sleep(0)
        if self.fail_writes:
            raise ChannelIOError(self.location, "Simulated write failure")
        self.writes.append(payload)

    async def close(self) -> None:
        self.closed = True

    def feed(self, data: bytes) -> None:
        self.on_data(data)

    def fail(self, message: str = "Simulated read failure") -> None:
        self.on_error(ChannelIOError(self.location, message))


class MockChannelFactory:
    def __init__(self):
        self.channels: Dict[str, MockChannel] = {}

    def __call__(self, location: str) -> MockChannel:
        channel = MockChannel(location)
        self.channels[location] = channel
        return channel


class MockElement(BoundElement):
    def __init__(self, element_id: str = "el", attributes: Dict[str, str] = None):
        self.id = element_id
        if attributes is None:
            self.attributes = {}
        else:
            self.attributes = dict(attributes)
        self.events: List[str] = []
        self.mutations: List[str] = []

    def has_attribute(self, name: str) -> bool:
        return name in self.attributes

    def get_attribute(self, name: str) -> Optional[str]:
        return self.attributes.get(name)

    def set_attribute(self, name: str, value: str) -> None:
        self.attributes[name] = value
        self.mutations.append(f"set {name}")

    def remove_attribute(self, name: str) -> None:
        self.attributes.pop(name, None)
        self.mutations.append(f"remove {name}")

    def dispatch_event(self, event_name: str) -> None:
        self.events.append(event_name)
