"""Core of a voice chat bot: greetings, sound-clip commands, text-to-speech and voice-state handling."""

__version__ = "0.1.0"