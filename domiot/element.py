from typing import Optional


class BoundElement:
    """
    The part of a document element a binding is allowed to touch. The document model
    owns the element; bindings only read its attributes, toggle attributes in response
    to device data and dispatch events on it.
    """
    def has_attribute(self, name: str) -> bool:
        raise NotImplementedError

    def get_attribute(self, name: str) -> Optional[str]:
        raise NotImplementedError

    def set_attribute(self, name: str, value: str) -> None:
        raise NotImplementedError

    def remove_attribute(self, name: str) -> None:
        raise NotImplementedError

    def dispatch_event(self, event_name: str) -> None:
        raise NotImplementedError
