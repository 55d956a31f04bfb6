import asyncio
from collections import defaultdict
from dataclasses import dataclass
import logging
from typing import Any, Dict, List, Callable, Tuple

logger = logging.getLogger("events")


@dataclass(frozen=True)
class Event:
    name: str
    target: Any


@dataclass
class EventListener:
    element_id: str
    event_name: str
    callback: Callable[[Event], None]


class EventBus:
    """
    Delivers events dispatched on elements to the listeners registered for that
    element and event name. Listeners are called on a later turn of the event loop,
    never from inside the code that dispatched the event.
    """
    def __init__(self):
        self.listeners: Dict[Tuple[str, str], List[EventListener]] = defaultdict(list)

    def emit(self, event: Event):
        key = (event.target.id, event.name)
        logger.debug(f"{key}: {event}")
        for listener in self.listeners[key]:
            logger.debug(f"{key}: {event} {listener}")
            asyncio.get_running_loop().call_soon(listener.callback, event)

    def bind(self, listener: EventListener):
        logger.debug(f"Binding listener to {listener.event_name} on {listener.element_id}")
        self.listeners[(listener.element_id, listener.event_name)].append(listener)

    def remove(self, listener: EventListener):
        key = (listener.element_id, listener.event_name)
        if listener in self.listeners[key]:
            logger.debug(f"Removing listener from {listener.event_name} on {listener.element_id}")
            self.listeners[key].remove(listener)
