[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "sensornode"
version = "0.1.0"
description = "Sensor node building blocks: NMEA parsing, GNSS stream handling, alerts, CBOR sensor payloads and gas sensor scheduling"
requires-python = ">=3.10"
dependencies = [
    "cbor2",
]
keywords = ["nmea", "gnss", "gps", "cbor", "sensor", "alerts", "scheduler", "iot"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Embedded Systems",
    "Topic :: Scientific/Engineering :: GIS",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["sensornode"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
