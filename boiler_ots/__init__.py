"""Waste-incineration boiler operator training simulator."""

__version__ = "1.1.0"
