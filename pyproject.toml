[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "debilek"
version = "0.1.0"
description = "Core of a chat voice bot: greeting selection, sound-clip commands, text-to-speech requests and voice-state handling"
requires-python = ">=3.10"
keywords = ["chat", "bot", "voice", "soundboard", "text-to-speech"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Communications :: Chat",
    "Topic :: Multimedia :: Sound/Audio :: Players",
]
dependencies = [
    "python-dotenv",
]

[project.optional-dependencies]
test = [
    "pytest",
    "pytest-asyncio",
]

[project.scripts]
debilek = "debilek.bot:main"

[tool.hatch.build.targets.wheel]
packages = ["debilek"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
