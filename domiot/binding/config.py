"""
Parsing of the attributes declared on a binding tag.

Everything here is a pure function of the declared attribute strings. Problems that
do not stop a binding from working are returned as warning values for the caller to
log, never raised.

The ``colors-channel`` attribute maps color names to channel offsets inside an
element's block of channels. Entries are separated by ``;`` and are either ``name``
or ``name:offset``:

- ``white;blue;red`` assigns 0, 1, 2 in declaration order
- ``red:2;white:0;blue:1`` uses the declared offsets
- ``white:0;blue;red:2`` mixes both forms. The declared offsets are discarded and
  the colors are numbered in declaration order, with a warning.
"""
import re
from enum import Enum
from typing import Dict, FrozenSet, Iterator, List, Mapping, NamedTuple, Optional, Tuple

ID = "id"
LOCATION = "location"
CHANNELS_PER_ELEMENT = "channels-per-element"
COLORS_CHANNEL = "colors-channel"
COLOR_PROPERTY_NAMES = "color-property-names"
ATTRIBUTE_NAME = "attribute-name"

DEFAULT_CHANNELS_PER_ELEMENT = 1
DEFAULT_COLOR = "white"
DEFAULT_COLOR_PROPERTY_NAMES = frozenset({"color"})
DEFAULT_TEXT_ATTRIBUTE = "text"
MESSAGE_ATTRIBUTE = "message"

_OFFSET = re.compile(r"0|[1-9][0-9]*")
_WHITESPACE = re.compile(r"\s+")


class ConfigurationError(Exception):
    """
    A required binding attribute is missing. The binding never opens its device.
    """


class ParseWarning(UserWarning):
    """
    An optional attribute could not be parsed, the default is used instead.
    """


class AmbiguousConfigWarning(UserWarning):
    """
    ``colors-channel`` mixes indexed and bare entries.
    """


class SharedDeviceWarning(UserWarning):
    """
    More than one element is associated with a single channel device.
    """


class IndexMode(Enum):
    DEFAULT = "default"
    EXPLICIT = "explicit"
    SEQUENTIAL = "sequential"
    MIXED = "mixed"


class ColorChannelMap(Mapping[str, int]):
    """
    Color name to channel offset. Names are case-insensitive.
    """
    def __init__(self, channels: Mapping[str, int]):
        self._channels: Dict[str, int] = {color.lower(): offset for color, offset in channels.items()}

    def __getitem__(self, color: str) -> int:
        return self._channels[color.lower()]

    def __len__(self) -> int:
        return len(self._channels)

    def __iter__(self) -> Iterator[str]:
        return iter(self._channels)

    def __repr__(self) -> str:
        return f"ColorChannelMap({self._channels})"

    def lookup(self, color: Optional[str]) -> Optional[int]:
        """
        Find the offset for a style value as written in the document, e.g. ``" Blue "``
        """
        if color is None:
            return None
        return self._channels.get(color.strip().lower())


class ColorChannelParse(NamedTuple):
    colors: ColorChannelMap
    mode: IndexMode
    warning: Optional[AmbiguousConfigWarning] = None


class ConfigRecord(NamedTuple):
    channels_per_element: int = DEFAULT_CHANNELS_PER_ELEMENT
    color_property_names: FrozenSet[str] = DEFAULT_COLOR_PROPERTY_NAMES
    attribute_name: str = DEFAULT_TEXT_ATTRIBUTE


class ParsedConfig(NamedTuple):
    record: ConfigRecord
    colors: ColorChannelMap
    warnings: List[UserWarning]


def _parse_color_entry(entry: str) -> Tuple[str, Optional[int]]:
    if ":" not in entry:
        return entry, None
    parts = entry.split(":")
    if len(parts) != 2:
        return entry, None
    color, offset = parts[0].strip(), parts[1].strip()
    if _OFFSET.fullmatch(offset):
        return color, int(offset)
    else:
        return color, None


def parse_colors_channel(value: Optional[str]) -> ColorChannelParse:
    entries = []
    if value is not None:
        for raw_entry in value.split(";"):
            entry = raw_entry.strip()
            if len(entry) > 0:
                entries.append(_parse_color_entry(entry))

    if len(entries) == 0:
        return ColorChannelParse(ColorChannelMap({DEFAULT_COLOR: 0}), IndexMode.DEFAULT)

    indexed = sum(1 for _, offset in entries if offset is not None)
    if indexed == len(entries):
        # Later duplicates win
        return ColorChannelParse(ColorChannelMap(dict(entries)), IndexMode.EXPLICIT)

    sequential = ColorChannelMap({color: i for i, (color, _) in enumerate(entries)})
    if indexed == 0:
        return ColorChannelParse(sequential, IndexMode.SEQUENTIAL)
    else:
        warning = AmbiguousConfigWarning(
            f"Mixed format detected in '{COLORS_CHANNEL}' attribute {value!r}. Some colors have explicit "
            f"indices while others don't. Falling back to sequential assignment from 0.")
        return ColorChannelParse(sequential, IndexMode.MIXED, warning)


def parse_channels_per_element(value: Optional[str],
                               default: int = DEFAULT_CHANNELS_PER_ELEMENT) -> Tuple[int, Optional[ParseWarning]]:
    if value is None or len(value.strip()) == 0:
        return default, None
    text = value.strip()
    if text.isdecimal() and int(text) > 0:
        return int(text), None
    return default, ParseWarning(f"Invalid '{CHANNELS_PER_ELEMENT}' attribute {value!r}, using {default}")


def parse_color_property_names(value: Optional[str]) -> FrozenSet[str]:
    if value is None:
        return DEFAULT_COLOR_PROPERTY_NAMES
    names = frozenset(name for name in _WHITESPACE.split(value.strip()) if len(name) > 0)
    if len(names) == 0:
        return DEFAULT_COLOR_PROPERTY_NAMES
    return names


def parse_attribute_name(value: Optional[str], default: str = DEFAULT_TEXT_ATTRIBUTE) -> str:
    if value is None or len(value.strip()) == 0:
        return default
    return value.strip()


def validate_required(tag: str, attributes: Mapping[str, str]) -> None:
    binding_id = attributes.get(ID)
    if not binding_id:
        raise ConfigurationError(f"Binding {tag} has no '{ID}' attribute")
    if not attributes.get(LOCATION):
        raise ConfigurationError(f"Binding {tag} with id={binding_id} has no '{LOCATION}' attribute")


def parse_config(attributes: Mapping[str, str], default_attribute_name: str = DEFAULT_TEXT_ATTRIBUTE) -> ParsedConfig:
    """
    Parse all optional binding attributes. Attributes a variant does not use are
    harmless, their defaults are simply ignored.
    """
    warnings: List[UserWarning] = []

    channels_per_element, parse_warning = parse_channels_per_element(attributes.get(CHANNELS_PER_ELEMENT))
    if parse_warning is not None:
        warnings.append(parse_warning)

    colors = parse_colors_channel(attributes.get(COLORS_CHANNEL))
    if colors.warning is not None:
        warnings.append(colors.warning)

    record = ConfigRecord(
        channels_per_element=channels_per_element,
        color_property_names=parse_color_property_names(attributes.get(COLOR_PROPERTY_NAMES)),
        attribute_name=parse_attribute_name(attributes.get(ATTRIBUTE_NAME), default_attribute_name))
    return ParsedConfig(record, colors.colors, warnings)
