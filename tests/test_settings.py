import os
import tempfile
import unittest

from domiot.settings import Settings

SAMPLE = """
[node]
log.dir = /tmp/domiot-logs

[binding:colorBinding]
tag = iot-obits-color-binding
location = /dev/ohubx24-sim0
channels-per-element = 2
colors-channel = white:0; blue:1

[element:lamp0]
tag = iot-lamp
binding = colorBinding
channel = 1
style.color = blue
attr.locked =
attr.message = Hello ${node:log.dir}
"""


class SettingsTest(unittest.TestCase):
    def setUp(self):
        self.dir = tempfile.TemporaryDirectory()
        with open(os.path.join(self.dir.name, "node.ini"), "w") as fp:
            fp.write(SAMPLE)

    def tearDown(self):
        self.dir.cleanup()

    def test_load(self):
        s = Settings(self.dir.name, ["node.ini"])
        self.assertEqual(s.node_config().log_dir(), "/tmp/domiot-logs")
        self.assertIsNone(s.node_config().log_config())

        bindings = s.binding_configs()
        self.assertEqual(len(bindings), 1)
        self.assertEqual(bindings[0].binding_id(), "colorBinding")
        self.assertEqual(bindings[0].tag(), "iot-obits-color-binding")
        self.assertEqual(bindings[0].attributes(), {
            "id": "colorBinding",
            "location": "/dev/ohubx24-sim0",
            "channels-per-element": "2",
            "colors-channel": "white:0; blue:1"
        })

        elements = s.element_configs()
        self.assertEqual(len(elements), 1)
        lamp = elements[0]
        self.assertEqual(lamp.element_id(), "lamp0")
        self.assertEqual(lamp.tag(), "iot-lamp")
        self.assertEqual(lamp.binding(), "colorBinding")
        self.assertEqual(lamp.channel(), 1)
        self.assertEqual(lamp.style(), {"color": "blue"})
        self.assertEqual(lamp.attributes(), {"locked": "", "message": "Hello /tmp/domiot-logs"})

    def test_missing_file(self):
        with self.assertRaises(RuntimeError):
            Settings(self.dir.name, ["missing.ini"])

    def test_sample_config(self):
        s = Settings(os.path.join(os.path.dirname(__file__), ".."), ["config/node.ini.sample"])
        tags = {b.binding_id(): b.tag() for b in s.binding_configs()}
        self.assertEqual(tags["lockBinding"], "iot-iobits-lock-binding")
        self.assertEqual(len(s.element_configs()), 4)
