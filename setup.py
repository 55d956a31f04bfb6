import os
from setuptools import setup, find_packages

here = os.path.abspath(os.path.dirname(__file__))


def read_file_contents(path):
    import codecs

    with codecs.open(path, encoding="utf-8") as f:
        return f.read()


EXTRA_REQUIRES = dict(
    develop=[
        # Linting, according to PEP8
        'flake8==7.1.1',

        # Type checker
        'mypy==1.11.2',

        # Testing
        'pytest==8.3.3'
    ]
)
setup(
    name='domiot-bindings',
    version='0.1.0',
    packages=find_packages(exclude=["tests", "tests.*"]),
    data_files=[
        ("config", ["config/node.ini.sample", "config/logging.ini"])
    ],
    license='MIT License',

    description='Bind document elements to devices that speak a line protocol over a device file',
    long_description=read_file_contents(os.path.join(here, "README.md")),
    long_description_content_type="text/markdown",

    entry_points={
             'console_scripts': [
                 'domiot-node = domiot.main:main',
                 'domiot-device-dump = domiot.tools.device_dump:main'
             ]},
    python_requires='>=3.8',
    install_requires=[
        'hexdump==3.3',
        'pyserial==3.5',
        'pyserial-asyncio==0.6',
        'pyformance==0.4'
    ],
    extras_require=EXTRA_REQUIRES
)
