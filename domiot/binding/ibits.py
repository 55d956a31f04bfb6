from domiot.binding import Binding
from domiot.binding.state import ON

PRESSED = "pressed"
RELEASED = "released"


class InputBitsBinding(Binding):
    """
    Reads button states from a device and dispatches ``pressed`` / ``released`` events
    to the associated elements. The device never gets written to.

    Each line read from the device is a snapshot of all channels, one ``0`` / ``1``
    character per channel::

        011101000000000000000000

    A channel whose symbol is the same as in the previous snapshot dispatches nothing.
    On the first snapshot there is nothing to compare to, so every associated channel
    dispatches, including ``released`` for channels that read ``0``.
    """
    tag = "iot-ibits-button-binding"

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self._snapshot = ""

    def start(self) -> None:
        self.start_reading()

    def on_line(self, line: str) -> None:
        if len(line) == 0:
            return
        for i, symbol in enumerate(line):
            el = self.elements.get(i)
            if el is None:
                continue
            if i < len(self._snapshot) and self._snapshot[i] == symbol:
                continue
            if symbol == ON:
                self.debug(f"Channel {i} pressed")
                el.dispatch_event(PRESSED)
            else:
                self.debug(f"Channel {i} released")
                el.dispatch_event(RELEASED)
        self._snapshot = line
