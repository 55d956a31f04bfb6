from typing import Optional

from domiot.binding import Binding
from domiot.binding.config import SharedDeviceWarning
from domiot.binding.state import OFF, ON
from domiot.element import BoundElement

LOCKED = "locked"


class IOBitBinding(Binding):
    """
    Keeps the ``locked`` attribute of an element and a single bit device channel in
    sync, in both directions::

        <iot-iobits-lock-binding id="lockBinding" location="/dev/iohubx24-sim0">
        <iot-door id="hotelDoor" locked binding="lockBinding">

    The device reports its state as lines whose first character is ``0`` (unlocked)
    or ``1`` (locked), and is told the new state as a single character when the
    attribute changes. The last known symbol from either direction suppresses
    repeats, so a state that came from the device is not echoed back to it.

    At startup the element's current attribute is fed through the inbound path as if
    the device had reported it. This does not write to the device.
    """
    tag = "iot-iobits-lock-binding"

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self._symbol = ""

    @property
    def symbol(self) -> str:
        return self._symbol

    def configure(self) -> None:
        if len(self.elements) > 1:
            self.warning(str(SharedDeviceWarning(
                f"Location {self.location!r} is used by {len(self.elements)} elements. Each lock should have "
                f"its own dedicated device file, sharing one can cause unpredictable behavior.")))

    def start(self) -> None:
        el = self.elements.get(0)
        if el is not None and el.has_attribute(LOCKED):
            self.on_line(ON)
        else:
            self.on_line(OFF)
        self.start_reading()

    def on_line(self, line: str) -> None:
        if len(line) == 0:
            return
        symbol = line[0]
        if symbol == self._symbol:
            return
        self._symbol = symbol

        el = self.elements.get(0)
        if el is None:
            return
        if symbol == ON:
            self.debug("Device reports locked")
            el.set_attribute(LOCKED, "")
        else:
            self.debug("Device reports unlocked")
            el.remove_attribute(LOCKED)

    def element_attribute_modified(self, index: int, el: BoundElement,
                                   attribute_name: str, value: Optional[str]) -> None:
        if attribute_name != LOCKED:
            return
        if self.channel is None:
            return
        symbol = ON if el.has_attribute(LOCKED) else OFF
        if symbol == self._symbol:
            self.counter("skipped").inc()
            return
        self._symbol = symbol
        self.spawn(self.transmit(symbol))
