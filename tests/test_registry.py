import unittest

from domiot.binding.ibits import InputBitsBinding
from domiot.binding.iobits import IOBitBinding
from domiot.binding.obits import OutputColorBinding
from domiot.binding.otext import OutputTextBinding, TextEncoding
from domiot.registry import BindingRegistry, default_registry


class TestRegistry(unittest.TestCase):
    def test_default_tags(self):
        registry = default_registry()
        expected = {
            "iot-ibits-button-binding": InputBitsBinding,
            "iot-ihubx24-button-binding": InputBitsBinding,
            "iot-obits-color-binding": OutputColorBinding,
            "iot-ohubx24-color-binding": OutputColorBinding,
            "iot-iobits-lock-binding": IOBitBinding,
            "iot-otext-message-binding": OutputTextBinding,
            "iot-lcd-message-binding": OutputTextBinding,
            "iot-otext-attribute-binding": OutputTextBinding,
        }
        self.assertEqual(set(registry.tags()), set(expected.keys()))
        for tag, cls in expected.items():
            binding = registry.create(tag, {"id": tag, "location": "/dev/null"}, {})
            self.assertIsInstance(binding, cls)
            self.assertEqual(binding.tag, tag)

    def test_text_encodings(self):
        registry = default_registry()
        raw = registry.create("iot-otext-message-binding", {}, {})
        keyed = registry.create("iot-otext-attribute-binding", {}, {})
        self.assertEqual(raw.encoding, TextEncoding.RAW_MESSAGE)
        self.assertEqual(keyed.encoding, TextEncoding.KEYED_ATTRIBUTE)

    def test_duplicate_registration(self):
        registry = BindingRegistry()
        registry.register("iot-test-binding", InputBitsBinding)
        with self.assertRaises(RuntimeError):
            registry.register("iot-test-binding", IOBitBinding)
        registry.register("iot-test-binding", IOBitBinding, replace=True)
        self.assertIsInstance(registry.create("iot-test-binding", {}, {}), IOBitBinding)

    def test_unknown_tag(self):
        with self.assertRaises(KeyError):
            default_registry().create("iot-unknown-binding", {}, {})
