import asyncio
import logging
from typing import Any, Awaitable, Callable, Mapping, Optional, Set

from domiot.binding.config import ConfigurationError, validate_required, ID, LOCATION
from domiot.element import BoundElement
from domiot.io import ChannelIOError, DeviceChannel, open_channel
from domiot.io.lines import LineReassembler
from domiot.log import LoggingMixin
from domiot.metrics import MetricsMixin

ChannelFactory = Callable[[str], DeviceChannel]


class Binding(LoggingMixin, MetricsMixin):
    """
    Translates between changes on document elements and the wire protocol of one
    device channel.

    A binding is created from the attributes declared on its tag and a read-only view
    of the channel index to element association, which the document model keeps up
    to date. Nothing happens until :meth:`ready` is awaited: the declared attributes
    are validated and parsed, the device channel is opened and the variant starts its
    protocol. A binding whose configuration is invalid or whose channel cannot be
    opened logs the problem once and stays inert.

    The document model calls the three ``element_*_modified`` notifications from
    inside the running event loop. They never block: any device I/O is scheduled as a
    task tracked by the binding, see :meth:`drain`.
    """
    tag = "iot-binding"

    def __init__(self,
                 attributes: Mapping[str, str],
                 elements: Mapping[int, BoundElement],
                 channel_factory: ChannelFactory = open_channel,
                 tag: Optional[str] = None):
        if tag is not None:
            self.tag = tag
        self.attributes = dict(attributes)
        self.elements = elements
        self.channel: Optional[DeviceChannel] = None
        self._channel_factory = channel_factory
        self._initialized = False
        self._tasks: Set[asyncio.Future] = set()
        LoggingMixin.__init__(self, logger=logging.getLogger("binding"), extra_func=self.describe)

    def __repr__(self):
        return f"{self.__class__.__name__}(id={self.id!r}, location={self.location!r})"

    @property
    def id(self) -> str:
        return self.attributes.get(ID, "")

    @property
    def location(self) -> str:
        return self.attributes.get(LOCATION, "")

    def describe(self) -> str:
        return f"[{self.tag} id={self.id} location={self.location}]"

    def metrics_scope(self) -> str:
        return self.id or self.__class__.__qualname__

    def get_attribute(self, name: str) -> Optional[str]:
        return self.attributes.get(name)

    async def ready(self) -> None:
        """
        Lifecycle signal from the document model. Only the first call has any effect.
        """
        if self._initialized:
            self.debug("Binding is already initialized")
            return
        self._initialized = True

        try:
            validate_required(self.tag, self.attributes)
            self.configure()
        except ConfigurationError as err:
            self.error(f"Invalid binding configuration, binding is disabled: {err}")
            return

        try:
            channel = self._channel_factory(self.location)
            await channel.open()
        except ChannelIOError as err:
            self.error(f"Could not open device channel, binding is disabled: {err}")
            return
        self.channel = channel
        self.info("Binding is ready")
        self.start()

    def configure(self) -> None:
        """
        Parse optional attributes. Called once during :meth:`ready` before the device
        channel is opened.
        """
        pass

    def start(self) -> None:
        """
        Begin the device protocol. Called once the channel is open.
        """
        pass

    def element_attribute_modified(self, index: int, el: BoundElement,
                                   attribute_name: str, value: Optional[str]) -> None:
        pass

    def element_attribute_ns_modified(self, index: int, el: BoundElement, namespace: str,
                                      attribute_name: str, value: Optional[str]) -> None:
        pass

    def element_style_modified(self, index: int, el: BoundElement,
                               property_name: str, value: Optional[str]) -> None:
        pass

    def spawn(self, coro: Awaitable[Any]) -> asyncio.Future:
        task = asyncio.ensure_future(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def drain(self) -> None:
        """
        Wait until every write scheduled so far has finished.
        """
        while len(self._tasks) > 0:
            await asyncio.gather(*list(self._tasks))

    async def transmit(self, payload: str) -> bool:
        """
        Write one message to the device. Failures are logged here and never raised.

        :return: True if the device accepted the message
        """
        try:
            await self.channel.write(payload)
        except ChannelIOError as err:
            self.counter("errors").inc()
            self.error(f"Failed to write {payload!r}: {err}")
            return False
        self.counter("writes").inc()
        self.debug(f"Wrote {payload!r}")
        return True

    def start_reading(self) -> None:
        reassembler = LineReassembler()

        def on_data(chunk: bytes):
            for line in reassembler.feed(chunk):
                self.counter("lines").inc()
                self.on_line(line)

        self.channel.read(on_data, self._on_read_error)

    def on_line(self, line: str) -> None:
        """
        Handle one complete line read from the device
        """
        raise NotImplementedError

    def _on_read_error(self, err: Exception) -> None:
        self.counter("errors").inc()
        self.error(f"Error reading device: {err}")

    async def close(self) -> None:
        await self.drain()
        if self.channel is not None:
            await self.channel.close()
            self.channel = None
