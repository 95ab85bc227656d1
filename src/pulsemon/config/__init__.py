"""Configuration objects and helpers for PulseMon.

A YAML file (passed with ``--config``) may override the serial link settings
(port, baud rate, framing) and the chart's temperature range. Keys can sit at
the top level or inside ``serial:`` / ``display:`` blocks; unknown keys are
ignored.
"""

from .runtime import PulseMonConfig, config_from_mapping, load_config

__all__ = ["PulseMonConfig", "config_from_mapping", "load_config"]
