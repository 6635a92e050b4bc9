"""Ask a human a question from an automated backend and wait for the answer."""

__version__ = "0.1.0"
