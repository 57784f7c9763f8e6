"""Inbound links delivering raw reading payloads."""

from .serial_link import LinkConnectionError, LinkError, LinkReadError, SerialLink

__all__ = ["SerialLink", "LinkError", "LinkConnectionError", "LinkReadError"]
