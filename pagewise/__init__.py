"""pagewise - chat with a personal corpus of saved web pages."""

__version__ = "1.0.0"
