import argparse
import asyncio
import logging
import logging.config
import os
import signal
import sys

from domiot.binding.ibits import PRESSED, RELEASED
from domiot.document import Document
from domiot.events import Event
from domiot.settings import Settings

logger = logging.getLogger("root")


def main():
    parser = argparse.ArgumentParser(description='Bind document elements to devices')
    parser.add_argument("config", nargs="?", default="config/node.ini", help="Config file")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    args = parser.parse_args()
    run_node(args)


def run_node(args):
    # Load settings from ini file
    try:
        s = Settings(".", [args.config])
    except RuntimeError as err:
        print(f"Could not load configuration: {err}")
        sys.exit(1)
    node_settings = s.node_config()

    # Setup logging
    logging_config_file = node_settings.log_config()
    if logging_config_file is not None:
        log_dir = node_settings.log_dir()
        if not os.path.exists(log_dir):
            os.makedirs(log_dir)
        logging.config.fileConfig(
            logging_config_file, defaults={"log.dir": log_dir}, disable_existing_loggers=False)
    else:
        logging.basicConfig(stream=sys.stdout, level=logging.INFO,
                            format="%(levelname)-8s %(asctime)s %(name)s -- %(message)s")

    if args.verbose:
        for name in ("root", "binding", "device", "document"):
            logging.getLogger(name).setLevel(logging.DEBUG)

    asyncio.run(run_document(s))


def build_document(settings: Settings) -> Document:
    document = Document()
    for binding_config in settings.binding_configs():
        try:
            document.create_binding(binding_config.tag(), binding_config.attributes())
        except KeyError as err:
            logger.error(f"Skipping {binding_config!r}: {err}")

    for element_config in settings.element_configs():
        element = document.create_element(element_config.element_id(), element_config.tag())
        binding_id = element_config.binding()
        if binding_id is not None:
            document.bind(element, binding_id, element_config.channel())
        for name, value in element_config.attributes().items():
            element.set_attribute(name, value)
        for name, value in element_config.style().items():
            element.set_style_property(name, value)
    return document


def log_event(event: Event):
    logger.info(f"{event.target!r} {event.name}")


async def run_document(settings: Settings):
    document = build_document(settings)
    for element in document.elements.values():
        element.add_event_listener(PRESSED, log_event)
        element.add_event_listener(RELEASED, log_event)

    stopped = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, stopped.set)

    await document.ready()
    logger.info(f"Started {len(document.bindings())} bindings for {len(document.elements)} elements")
    await stopped.wait()

    logger.info("Shutting down")
    await document.close()
    logger.info("Finished shutdown")
