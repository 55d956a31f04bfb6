import os
import tempfile
import unittest

from domiot.main import build_document
from domiot.settings import Settings

CONFIG = """
[node]
log.dir = logs

[binding:lockBinding]
tag = iot-iobits-lock-binding
location = /dev/iohubx24-sim0

[binding:bogus]
tag = iot-unknown-binding
location = /dev/null

[element:hotelDoor]
tag = iot-door
binding = lockBinding
channel = 0
attr.locked =
style.color = white

[element:sign]
attr.message = hello
"""


class TestBuildDocument(unittest.IsolatedAsyncioTestCase):
    async def test_build(self):
        with tempfile.TemporaryDirectory() as d:
            with open(os.path.join(d, "node.ini"), "w") as fp:
                fp.write(CONFIG)
            settings = Settings(d, ["node.ini"])

        with self.assertLogs("root", level="ERROR"):
            document = build_document(settings)
        binding = document.get_binding("lockBinding")
        self.assertIsNotNone(binding)
        self.assertIsNone(document.get_binding("bogus"))

        door = document.get_element("hotelDoor")
        self.assertEqual(door.tag, "iot-door")
        self.assertTrue(door.has_attribute("locked"))
        self.assertEqual(door.get_style_property("color"), "white")
        self.assertIs(binding.elements[0], door)

        sign = document.get_element("sign")
        self.assertEqual(sign.tag, "iot-element")
        self.assertEqual(sign.get_attribute("message"), "hello")
