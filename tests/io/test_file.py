import asyncio
import os
import tempfile
import unittest

from domiot.io import ChannelIOError, open_channel
from domiot.io.file import FileDeviceChannel
from domiot.io.serial import SerialDeviceChannel


class TestFileDeviceChannel(unittest.IsolatedAsyncioTestCase):
    async def asyncSetUp(self):
        self.dir = tempfile.TemporaryDirectory()
        self.path = os.path.join(self.dir.name, "ohubx24-sim0")

    async def asyncTearDown(self):
        self.dir.cleanup()

    async def test_write_replaces_contents(self):
        channel = FileDeviceChannel(self.path)
        await channel.open()
        await channel.write("0001")
        await channel.write("01")
        with open(self.path, "rb") as fp:
            self.assertEqual(fp.read(), b"01")
        await channel.close()

    async def test_write_failure(self):
        channel = FileDeviceChannel(os.path.join(self.dir.name, "missing", "device"))
        await channel.open()
        with self.assertRaises(ChannelIOError):
            await channel.write("1")
        await channel.close()

    async def test_streaming_read(self):
        with open(self.path, "wb") as fp:
            fp.write(b"0100\n01")
        channel = FileDeviceChannel(self.path, poll_interval=0.01)
        await channel.open()
        chunks = []
        received = asyncio.Event()

        def on_data(chunk):
            chunks.append(chunk)
            if b"".join(chunks).endswith(b"\n0110\n"):
                received.set()

        channel.read(on_data, self.fail)

        # More data shows up after the reader reached end of file
        await asyncio.sleep(0.05)
        with open(self.path, "ab") as fp:
            fp.write(b"10\n0110\n")
        await asyncio.wait_for(received.wait(), 2.0)
        self.assertEqual(b"".join(chunks), b"0100\n0110\n0110\n")
        await channel.close()

    async def test_read_failure(self):
        channel = FileDeviceChannel(os.path.join(self.dir.name, "missing"))
        await channel.open()
        errors = []
        failed = asyncio.Event()

        def on_error(err):
            errors.append(err)
            failed.set()

        channel.read(self.fail, on_error)
        await asyncio.wait_for(failed.wait(), 2.0)
        self.assertIsInstance(errors[0], ChannelIOError)
        await channel.close()

    def open_descriptors(self, path):
        path = os.path.realpath(path)
        found = []
        for fd in os.listdir("/proc/self/fd"):
            try:
                if os.readlink(os.path.join("/proc/self/fd", fd)) == path:
                    found.append(fd)
            except OSError:
                continue
        return found

    @unittest.skipUnless(hasattr(os, "mkfifo") and os.path.isdir("/proc/self/fd"), "needs fifos and procfs")
    async def test_close_while_read_is_blocked(self):
        os.mkfifo(self.path)
        # Keeps the fifo open so the channel's reader blocks in read instead of seeing EOF
        device = os.open(self.path, os.O_RDWR)
        try:
            channel = FileDeviceChannel(self.path)
            await channel.open()
            channel.read(self.fail, self.fail)
            await asyncio.sleep(0.05)
            self.assertEqual(len(self.open_descriptors(self.path)), 2)

            await asyncio.wait_for(channel.close(), 2.0)
            # The blocked read still owns the descriptor
            self.assertEqual(len(self.open_descriptors(self.path)), 2)

            os.write(device, b"1\n")
            loop = asyncio.get_running_loop()
            await loop.run_in_executor(None, channel._reader.shutdown, True)
            self.assertEqual(len(self.open_descriptors(self.path)), 1)
        finally:
            os.close(device)


class TestOpenChannel(unittest.TestCase):
    def test_file(self):
        channel = open_channel("/dev/ohubx24-sim0")
        self.assertIsInstance(channel, FileDeviceChannel)
        self.assertEqual(channel.location, "/dev/ohubx24-sim0")

    def test_serial(self):
        channel = open_channel("serial:/dev/ttyUSB0@115200")
        self.assertIsInstance(channel, SerialDeviceChannel)
        self.assertEqual(channel.port, "/dev/ttyUSB0")
        self.assertEqual(channel.baudrate, 115200)

        channel = open_channel("serial:/dev/ttyACM0")
        self.assertEqual(channel.baudrate, 9600)

    def test_bad_serial_location(self):
        with self.assertRaises(ChannelIOError):
            open_channel("serial:")
        with self.assertRaises(ChannelIOError):
            open_channel("serial:/dev/ttyUSB0@fast")
