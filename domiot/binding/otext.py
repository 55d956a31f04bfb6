from enum import Enum
from typing import Optional

from domiot.binding import Binding
from domiot.binding.config import ConfigRecord, MESSAGE_ATTRIBUTE, parse_config
from domiot.element import BoundElement

RAW_MESSAGE_LIMIT = 120
KEYED_TEXT_LIMIT = 1024


class TextEncoding(Enum):
    # Plain text of the element's ``message`` attribute, e.g. for an LCD driver
    RAW_MESSAGE = "message"
    # ``<attribute-name>=<text>``
    KEYED_ATTRIBUTE = "attribute"


class OutputTextBinding(Binding):
    """
    Writes the text of an attribute of the element on channel 0 to a device that
    accepts text, such as an LCD display. Other associated elements are ignored.

    Raw message encoding::

        <iot-otext-message-binding id="lcdBinding" location="/dev/lcd-sim0">
        <iot-door id="hotelDoor" message="Welcome to your room!" binding="lcdBinding">

    The device is cleared with an empty message when the binding starts, after that
    every change of ``message`` is written verbatim, truncated to 120 characters.
    Removing the attribute writes an empty message.

    Keyed attribute encoding::

        <iot-otext-attribute-binding id="lcdBinding" attribute-name="message" location="/dev/lcd-sim0">

    The text of ``attribute-name`` (default ``text``) is written as
    ``message=Welcome...``, truncated to 1024 characters of text. The element's text is
    written when the binding starts. An empty or removed attribute is never written.
    """
    tag = "iot-otext-message-binding"

    def __init__(self, *args, encoding: TextEncoding = TextEncoding.RAW_MESSAGE, **kwargs):
        super().__init__(*args, **kwargs)
        self.encoding = encoding
        self.config = ConfigRecord(attribute_name=MESSAGE_ATTRIBUTE)
        self._current_text = ""

    @property
    def attribute_name(self) -> str:
        return self.config.attribute_name

    def configure(self) -> None:
        if self.encoding == TextEncoding.RAW_MESSAGE:
            self.config = ConfigRecord(attribute_name=MESSAGE_ATTRIBUTE)
        else:
            self.config = parse_config(self.attributes).record
        self.debug(f"Writing attribute {self.attribute_name!r} as {self.encoding.name}")

    def start(self) -> None:
        if self.encoding == TextEncoding.RAW_MESSAGE:
            self._current_text = ""
            self.spawn(self.transmit(""))
        else:
            el = self.elements.get(0)
            if el is not None:
                self._write_keyed(el.get_attribute(self.attribute_name))

    def element_attribute_modified(self, index: int, el: BoundElement,
                                   attribute_name: str, value: Optional[str]) -> None:
        if index != 0 or attribute_name != self.attribute_name:
            return
        if self.channel is None:
            return
        if self.encoding == TextEncoding.RAW_MESSAGE:
            self._write_raw(el.get_attribute(self.attribute_name) or "")
        else:
            self._write_keyed(el.get_attribute(self.attribute_name))

    def _write_raw(self, text: str):
        if text == self._current_text:
            self.counter("skipped").inc()
            return
        self._current_text = text
        self.spawn(self.transmit(text[:RAW_MESSAGE_LIMIT]))

    def _write_keyed(self, text: Optional[str]):
        if not text or text == self._current_text:
            self.counter("skipped").inc()
            return
        self._current_text = text
        self.spawn(self.transmit(f"{self.attribute_name}={text[:KEYED_TEXT_LIMIT]}"))
