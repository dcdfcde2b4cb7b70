[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "antifurto"
version = "0.1.0"
description = "NMEA sentence parsing and anti-theft backpack logic: motion detection, GPS fixes, GSM alerts"
requires-python = ">=3.10"
dependencies = []
keywords = ["nmea", "gps", "gnss", "gsm", "sms", "mpu6050", "anti-theft", "motion-detection"]
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
    "Topic :: Scientific/Engineering :: GIS",
    "Topic :: Communications :: Telephony",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["antifurto"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
