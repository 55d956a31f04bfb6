"""
A small in-memory document model.

It provides what bindings expect from their surroundings: elements with attributes,
inline style properties and events, an association between each binding's channel
indexes and elements, and notification of the bindings when an associated element
changes.
"""
import logging
from collections import defaultdict
from types import MappingProxyType
from typing import Callable, Dict, List, Optional, Tuple

from domiot.binding import Binding, ChannelFactory
from domiot.element import BoundElement
from domiot.events import Event, EventBus, EventListener
from domiot.io import open_channel
from domiot.log import LoggingMixin
from domiot.registry import BindingRegistry, default_registry


class Element(BoundElement):
    def __init__(self, document: "Document", element_id: str, tag: str):
        self.document = document
        self.id = element_id
        self.tag = tag
        self._attributes: Dict[str, str] = dict()
        self._ns_attributes: Dict[Tuple[str, str], str] = dict()
        self._style: Dict[str, str] = dict()

    def __repr__(self):
        return f"<{self.tag} id={self.id}>"

    def has_attribute(self, name: str) -> bool:
        return name in self._attributes

    def get_attribute(self, name: str) -> Optional[str]:
        return self._attributes.get(name)

    def set_attribute(self, name: str, value: str) -> None:
        if self._attributes.get(name) == value:
            return
        self._attributes[name] = value
        self.document.attribute_modified(self, name, value)

    def remove_attribute(self, name: str) -> None:
        if name not in self._attributes:
            return
        del self._attributes[name]
        self.document.attribute_modified(self, name, None)

    def get_attribute_ns(self, namespace: str, name: str) -> Optional[str]:
        return self._ns_attributes.get((namespace, name))

    def set_attribute_ns(self, namespace: str, name: str, value: str) -> None:
        if self._ns_attributes.get((namespace, name)) == value:
            return
        self._ns_attributes[(namespace, name)] = value
        self.document.attribute_ns_modified(self, namespace, name, value)

    def get_style_property(self, name: str) -> Optional[str]:
        return self._style.get(name)

    def set_style_property(self, name: str, value: Optional[str]) -> None:
        """
        Set an inline style property, an empty or None value removes it
        """
        if not value:
            if name not in self._style:
                return
            del self._style[name]
            self.document.style_modified(self, name, None)
        elif self._style.get(name) != value:
            self._style[name] = value
            self.document.style_modified(self, name, value)

    def add_event_listener(self, event_name: str, callback: Callable[[Event], None]) -> EventListener:
        listener = EventListener(self.id, event_name, callback)
        self.document.events.bind(listener)
        return listener

    def remove_event_listener(self, listener: EventListener) -> None:
        self.document.events.remove(listener)

    def dispatch_event(self, event_name: str) -> None:
        self.document.events.emit(Event(event_name, self))


class Document(LoggingMixin):
    def __init__(self, registry: BindingRegistry = None, channel_factory: ChannelFactory = open_channel):
        LoggingMixin.__init__(self, logging.getLogger("document"))
        if registry is None:
            self.registry = default_registry()
        else:
            self.registry = registry
        self.channel_factory = channel_factory
        self.events = EventBus()
        self.elements: Dict[str, Element] = dict()
        self._bindings: List[Binding] = list()
        self._bindings_by_id: Dict[str, Binding] = dict()
        self._associations: Dict[str, Dict[int, Element]] = defaultdict(dict)
        self._element_channels: Dict[str, List[Tuple[str, int]]] = defaultdict(list)

    def create_binding(self, tag: str, attributes: Dict[str, str]) -> Binding:
        binding_id = attributes.get("id", "")
        if binding_id and binding_id in self._bindings_by_id:
            raise RuntimeError(f"A binding with id {binding_id} already exists")
        # Bindings only ever see a read-only view of their associations
        elements = MappingProxyType(self._associations[binding_id])
        binding = self.registry.create(tag, attributes, elements, channel_factory=self.channel_factory)
        self._bindings.append(binding)
        if binding_id:
            self._bindings_by_id[binding_id] = binding
        self.debug(f"Created binding {binding!r}")
        return binding

    def get_binding(self, binding_id: str) -> Optional[Binding]:
        return self._bindings_by_id.get(binding_id)

    def bindings(self) -> List[Binding]:
        return list(self._bindings)

    def create_element(self, element_id: str, tag: str = "iot-element") -> Element:
        if element_id in self.elements:
            raise RuntimeError(f"An element with id {element_id} already exists")
        element = Element(self, element_id, tag)
        self.elements[element_id] = element
        return element

    def get_element(self, element_id: str) -> Optional[Element]:
        return self.elements.get(element_id)

    def bind(self, element: Element, binding_id: str, channel: int) -> None:
        """
        Associate an element with a channel index of a binding
        """
        if channel < 0:
            raise ValueError(f"Channel index must not be negative, got {channel}")
        associations = self._associations[binding_id]
        previous = associations.get(channel)
        if previous is not None and previous is not element:
            self.warning(f"Channel {channel} of binding {binding_id} moves from {previous!r} to {element!r}")
            self._element_channels[previous.id].remove((binding_id, channel))
        associations[channel] = element
        self._element_channels[element.id].append((binding_id, channel))

    def _bound(self, element: Element):
        for binding_id, channel in self._element_channels[element.id]:
            binding = self._bindings_by_id.get(binding_id)
            if binding is not None:
                yield binding, channel

    def attribute_modified(self, element: Element, name: str, value: Optional[str]) -> None:
        for binding, channel in self._bound(element):
            binding.element_attribute_modified(channel, element, name, value)

    def attribute_ns_modified(self, element: Element, namespace: str, name: str, value: Optional[str]) -> None:
        for binding, channel in self._bound(element):
            binding.element_attribute_ns_modified(channel, element, namespace, name, value)

    def style_modified(self, element: Element, name: str, value: Optional[str]) -> None:
        for binding, channel in self._bound(element):
            binding.element_style_modified(channel, element, name, value)

    async def ready(self) -> None:
        for binding in self._bindings:
            await binding.ready()

    async def close(self) -> None:
        for binding in self._bindings:
            await binding.close()
