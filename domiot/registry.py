from functools import partial
from typing import Callable, Dict, List, Mapping

from domiot.binding import Binding
from domiot.binding.ibits import InputBitsBinding
from domiot.binding.iobits import IOBitBinding
from domiot.binding.obits import OutputColorBinding
from domiot.binding.otext import OutputTextBinding, TextEncoding
from domiot.element import BoundElement

BindingFactory = Callable[..., Binding]


class BindingRegistry:
    """
    Maps binding tag names to the constructor of the binding they declare.
    """
    def __init__(self):
        self._factories: Dict[str, BindingFactory] = dict()

    def register(self, tag: str, factory: BindingFactory, replace=False) -> None:
        if tag in self._factories and not replace:
            raise RuntimeError(f"A binding is already registered for tag {tag}")
        self._factories[tag] = factory

    def tags(self) -> List[str]:
        return sorted(self._factories.keys())

    def __contains__(self, tag) -> bool:
        return tag in self._factories

    def create(self, tag: str, attributes: Mapping[str, str], elements: Mapping[int, BoundElement],
               **kwargs) -> Binding:
        factory = self._factories.get(tag)
        if factory is None:
            raise KeyError(f"No binding registered for tag {tag}")
        return factory(attributes, elements, tag=tag, **kwargs)


def default_registry() -> BindingRegistry:
    registry = BindingRegistry()
    registry.register("iot-ibits-button-binding", InputBitsBinding)
    registry.register("iot-ihubx24-button-binding", InputBitsBinding)
    registry.register("iot-obits-color-binding", OutputColorBinding)
    registry.register("iot-ohubx24-color-binding", OutputColorBinding)
    registry.register("iot-iobits-lock-binding", IOBitBinding)
    registry.register("iot-otext-message-binding", partial(OutputTextBinding, encoding=TextEncoding.RAW_MESSAGE))
    registry.register("iot-lcd-message-binding", partial(OutputTextBinding, encoding=TextEncoding.RAW_MESSAGE))
    registry.register("iot-otext-attribute-binding",
                      partial(OutputTextBinding, encoding=TextEncoding.KEYED_ATTRIBUTE))
    return registry
