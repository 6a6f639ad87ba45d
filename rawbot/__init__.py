"""RAWBOT: Instagram-linked store assistant backend and owner client."""

__version__ = "2.5.0"
