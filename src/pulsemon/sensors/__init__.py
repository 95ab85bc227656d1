"""Sensor-specific data models and parsers.

The :mod:`pulse_oximeter` module knows the text format printed by the
oximeter firmware and converts single lines into
:class:`Reading` records used across the pipeline.
"""
