[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "mcradio"
version = "0.1.0"
description = "Multicast radio: a server that streams MP3 channels over UDP multicast and a client that pipes a chosen channel into a player"
requires-python = ">=3.10"
dependencies = []
keywords = ["radio", "multicast", "udp", "mp3", "streaming", "token-bucket", "thread-pool"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: End Users/Desktop",
    "Operating System :: POSIX",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Multimedia :: Sound/Audio :: Players",
    "Topic :: System :: Networking",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
mcradio-server = "mcradio.server:main"
mcradio-client = "mcradio.client:main"

[tool.hatch.build.targets.wheel]
packages = ["mcradio"]

[tool.pytest.ini_options]
addopts = "-ra"
