"""Desktop GUI implementation built with PySide6/Qt and pyqtgraph.

:mod:`main_window` shows the latest readings and the temperature chart,
:mod:`serial_controller` owns the reader thread and the device session, and
:mod:`application` wires up the CLI and the Qt event loop.
"""
