"""Miscellaneous development helpers.

:mod:`debug` holds the ``PULSEMON_DEBUG`` switch, the timing context manager
used around the ingest path, and the log setup shared by the entry points.
"""
