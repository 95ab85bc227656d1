"""Launch PulseMon from a source checkout (``python main.py [options]``)."""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent / "src"))

from pulsemon.gui.application import run  # noqa: E402

if __name__ == "__main__":
    run()
