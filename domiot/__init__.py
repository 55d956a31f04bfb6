from importlib.metadata import version, PackageNotFoundError

try:
    __version__ = version("domiot-bindings")
except PackageNotFoundError:
    # package is not installed
    pass
