"""Forensic Timeliner: normalize forensic tool exports into one timeline."""

__version__ = "0.1.0"
