from pyformance import global_registry
from pyformance.meters import Counter


class MetricsMixin:
    """
    Registers metrics in the global pyformance registry under a per-instance scope.
    Bindings use their declared id as the scope, so two bindings of the same class
    report separately.
    """
    def metrics_scope(self) -> str:
        return self.__class__.__qualname__

    def get_key(self, name, *extra):
        name_parts = [name]
        name_parts.extend([str(e) for e in extra])
        joined_name = ".".join(name_parts)
        return f"domiot.{self.metrics_scope()}:{joined_name}"

    def counter(self, name: str, *args) -> Counter:
        return global_registry().counter(self.get_key(name, *args))
