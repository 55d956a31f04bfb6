import configparser
import os
import re
from typing import Optional, Mapping, Iterator, Any, List, Dict

_default_settings = {
    "node": {
        "log.dir": "logs",
    }
}

BINDING_SECTION = re.compile(r"binding:(\S+)")
ELEMENT_SECTION = re.compile(r"element:(\S+)")
ATTRIBUTE_PREFIX = "attr."
STYLE_PREFIX = "style."


class Settings:
    def __init__(self, basedir: str = ".", paths: List[str] = None, defaults: Dict = None):
        self._basedir = basedir
        if paths is None:
            paths = []
        self._configfiles = [os.path.join(self._basedir, path) for path in paths]
        self._config: Optional[configparser.ConfigParser] = None
        if defaults is None:
            self._defaults = dict()
        else:
            self._defaults = defaults
        self.load()

    def load(self):
        self._config = configparser.ConfigParser(defaults=self._defaults,
                                                 interpolation=configparser.ExtendedInterpolation(),
                                                 delimiters=("=",),
                                                 inline_comment_prefixes=("#",),
                                                 default_section="default")
        # Keys are binding attribute names, keep them as written. Values use ";" and ":"
        # (colors-channel), so neither may act as a delimiter or comment prefix
        self._config.optionxform = str
        self._config.read_dict(_default_settings)
        for path in self._configfiles:
            if os.path.exists(path):
                self._config.read(path)
            else:
                raise RuntimeError(f"No such config file {path}")

    def node_config(self):
        return NodeConfig(self._config["node"])

    def binding_configs(self) -> List["BindingConfig"]:
        binding_configs = []
        for section in self._config.sections():
            m = BINDING_SECTION.fullmatch(section)
            if m:
                binding_configs.append(BindingConfig(m.group(1), self._config[section]))
        return binding_configs

    def element_configs(self) -> List["ElementConfig"]:
        element_configs = []
        for section in self._config.sections():
            m = ELEMENT_SECTION.fullmatch(section)
            if m:
                element_configs.append(ElementConfig(m.group(1), self._config[section]))
        return element_configs


class Config(Mapping):
    def __init__(self, section_name, config_section):
        self._section = section_name
        self._config_section = config_section

    def __getitem__(self, k) -> Any:
        return self._config_section[k]

    def __len__(self) -> int:
        return len(self._config_section)

    def __iter__(self) -> Iterator:
        return iter(self._config_section)

    def __repr__(self) -> str:
        return f"{self._section}: {dict(self._config_section)}"

    def get(self, key, default: str = None) -> str:
        value = self._config_section.get(key)
        if value is None:
            value = default
        if value is None:
            raise KeyError(f"Unknown key {key} in section {self._section}")
        return value

    def get_int(self, key, default: int = None) -> int:
        value = self._config_section.getint(key)
        if value is None:
            value = default
        if value is None:
            raise KeyError(f"Unknown key {key} in section {self._section}")
        return value


class NodeConfig(Config):
    def __init__(self, config_section):
        super().__init__("node", config_section)

    def log_config(self) -> Optional[str]:
        return self._config_section.get("log.config")

    def log_dir(self) -> str:
        return super().get("log.dir")


class BindingConfig(Config):
    """
    A ``[binding:<id>]`` section. Every key other than ``tag`` is an attribute
    declared on the binding.
    """
    def __init__(self, binding_id, config_section):
        super().__init__(f"binding:{binding_id}", config_section)
        self._binding_id = binding_id

    def binding_id(self) -> str:
        return self._binding_id

    def tag(self) -> str:
        return super().get("tag")

    def attributes(self) -> Dict[str, str]:
        attributes = {k: v for k, v in self._config_section.items() if k != "tag"}
        attributes["id"] = self._binding_id
        return attributes


class ElementConfig(Config):
    """
    An ``[element:<id>]`` section. ``attr.<name>`` keys are initial attributes and
    ``style.<name>`` keys initial style properties of the element.
    """
    def __init__(self, element_id, config_section):
        super().__init__(f"element:{element_id}", config_section)
        self._element_id = element_id

    def element_id(self) -> str:
        return self._element_id

    def tag(self) -> str:
        return super().get("tag", "iot-element")

    def binding(self) -> Optional[str]:
        return self._config_section.get("binding")

    def channel(self) -> int:
        return super().get_int("channel", 0)

    def attributes(self) -> Dict[str, str]:
        return {k[len(ATTRIBUTE_PREFIX):]: v for k, v in self._config_section.items()
                if k.startswith(ATTRIBUTE_PREFIX)}

    def style(self) -> Dict[str, str]:
        return {k[len(STYLE_PREFIX):]: v for k, v in self._config_section.items()
                if k.startswith(STYLE_PREFIX)}
