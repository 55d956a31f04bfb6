import asyncio
from typing import Optional

from domiot.binding import Binding
from domiot.binding.config import ColorChannelMap, ConfigRecord, parse_config
from domiot.binding.state import ChannelStateVector, OFF, ON
from domiot.element import BoundElement


class OutputColorBinding(Binding):
    """
    Writes the on/off state of every device channel when a color style property
    changes on an associated element.

    Each element owns a block of ``channels-per-element`` consecutive channels, and
    ``colors-channel`` says which channel of the block lights up for which color::

        <iot-obits-color-binding id="colorBinding" channels-per-element="2"
                                 colors-channel="white:0;blue:1" location="/dev/ohubx24-sim0">

    With this configuration, the element on channel index 1 owns device channels 2
    and 3, and ``color: blue`` on it turns channel 3 on and channel 2 off. A color
    that is not mapped, or whose offset falls outside the block, turns the whole block
    off.

    The device always receives the complete state of all channels as one line, so
    every update is a read-modify-write of the shared state vector followed by a
    write of the whole vector. Updates hold a lock across that sequence, so they are
    applied one at a time, in notification order, each against the state left by the
    one before. A failed write is not rolled back.
    """
    tag = "iot-obits-color-binding"

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.config = ConfigRecord()
        self.colors = ColorChannelMap({})
        self._state = ChannelStateVector()
        self._lock = asyncio.Lock()

    @property
    def state(self) -> str:
        return str(self._state)

    def configure(self) -> None:
        parsed = parse_config(self.attributes)
        for warning in parsed.warnings:
            self.warning(str(warning))
        self.config = parsed.record
        self.colors = parsed.colors
        self.debug(f"Using {self.config.channels_per_element} channels per element, colors {self.colors}, "
                   f"monitoring {sorted(self.config.color_property_names)}")

    def element_style_modified(self, index: int, el: BoundElement,
                               property_name: str, value: Optional[str]) -> None:
        if property_name not in self.config.color_property_names:
            return
        if index not in self.elements:
            return
        if self.channel is None:
            return
        self.spawn(self._update_color(index, value))

    async def _update_color(self, index: int, value: Optional[str]):
        async with self._lock:
            channels = self.config.channels_per_element
            first = index * channels

            block = [OFF] * channels
            offset = self.colors.lookup(value)
            if offset is not None and offset < channels:
                block[offset] = ON
            else:
                self.debug(f"Color {value!r} is not mapped for element {index}, turning it off")

            if not self._state.replace(first, block):
                self.counter("skipped").inc()
                return
            await self.transmit(str(self._state))
