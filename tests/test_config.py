import pathlib
import sys
import tempfile
import unittest

# Ensure src/ is on path for direct test execution
ROOT = pathlib.Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from pulsemon.config import PulseMonConfig, config_from_mapping, load_config  # noqa: E402


class PulseMonConfigTest(unittest.TestCase):
    def test_defaults_match_device_firmware(self):
        cfg = PulseMonConfig()
        self.assertEqual(cfg.port, "COM15")
        self.assertEqual(cfg.baud_rate, 115200)
        self.assertEqual((cfg.data_bits, cfg.parity, cfg.stop_bits), (8, "N", 1))
        self.assertEqual((cfg.chart_min_temp, cfg.chart_max_temp), (25.0, 45.0))

    def test_missing_file_falls_back_to_defaults(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            cfg = load_config(pathlib.Path(tmpdir) / "nope.yaml")
        self.assertEqual(cfg, PulseMonConfig())
        self.assertEqual(load_config(None), PulseMonConfig())

    def test_load_nested_blocks(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = pathlib.Path(tmpdir) / "pulsemon.yaml"
            path.write_text(
                "serial:\n"
                "  port: /dev/ttyUSB0\n"
                "  baud_rate: 9600\n"
                "  parity: even\n"
                "display:\n"
                "  chart_min_temp: 40\n"
                "  chart_max_temp: 30\n"
                "unknown_key: 1\n",
                encoding="utf-8",
            )

            cfg = load_config(path)

        self.assertEqual(cfg.port, "/dev/ttyUSB0")
        self.assertEqual(cfg.baud_rate, 9600)
        self.assertEqual(cfg.parity, "E")
        self.assertEqual((cfg.chart_min_temp, cfg.chart_max_temp), (30.0, 40.0))

    def test_empty_file_gives_defaults(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = pathlib.Path(tmpdir) / "empty.yaml"
            path.write_text("", encoding="utf-8")
            self.assertEqual(load_config(path), PulseMonConfig())

    def test_top_level_and_block_keys_merge(self):
        cfg = config_from_mapping({"baud_rate": 57600, "serial": {"port": "COM7"}, "bogus": True})
        self.assertEqual((cfg.port, cfg.baud_rate), ("COM7", 57600))
        self.assertEqual(config_from_mapping(None), PulseMonConfig())

    def test_non_mapping_yaml_rejected(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = pathlib.Path(tmpdir) / "list.yaml"
            path.write_text("- 1\n- 2\n", encoding="utf-8")
            with self.assertRaises(ValueError):
                load_config(path)

    def test_invalid_framing_rejected(self):
        with self.assertRaises(ValueError):
            config_from_mapping({"parity": "X"})
        with self.assertRaises(ValueError):
            config_from_mapping({"data_bits": 9})
        with self.assertRaises(ValueError):
            config_from_mapping({"stop_bits": 3})

    def test_sanitized_clamps_values(self):
        cfg = config_from_mapping({"port": "  ", "read_poll_ms": 0, "detect_timeout_s": -1, "stop_bits": 1.5})
        self.assertIsNone(cfg.port)
        self.assertEqual(cfg.read_poll_ms, 1)
        self.assertEqual(cfg.detect_timeout_s, 0.1)
        self.assertEqual(cfg.stop_bits, 1.5)


if __name__ == "__main__":
    unittest.main()
