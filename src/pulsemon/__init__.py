"""PulseMon: desktop monitor for a serial pulse oximeter / thermometer."""

__version__ = "0.1.0"
