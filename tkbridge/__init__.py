"""tkbridge talks to Tk through the Tcl interpreter of a tkinter root window.

It has two parts: :mod:`tkbridge.events` binds callbacks to Tk events and
parses the ``%`` substitutions of a binding into :class:`tkbridge.events.Event`
objects, and :mod:`tkbridge.images` creates photo images and moves pixel data
in and out of them.

Everything goes through one :class:`tkbridge.interp.Interpreter` session::

    import tkbridge
    from tkbridge import events

    interp = tkbridge.init()
    events.bind_event(".", "<Button-1>", lambda event: print(event.pos_x, event.pos_y))
    interp.root.mainloop()
"""

import os
import sys

import platformdirs

version_info = (2026, 10, 19)
__version__ = "%d.%02d.%02d" % version_info
__author__ = "Akuli"
__copyright__ = "Copyright (c) 2017-2026 Akuli"
__license__ = "MIT"

if sys.platform in {"win32", "darwin"}:
    dirs = platformdirs.PlatformDirs("tkbridge", "Akuli")
else:
    # platformdirs puts logs to ~/.local/state/tkbridge/log by default
    # See https://github.com/platformdirs/platformdirs/issues/106
    class _TkbridgePlatformDirs(platformdirs.PlatformDirs):  # type: ignore
        @property
        def user_log_dir(self) -> str:
            return os.path.join(self.user_cache_dir, "log")

    dirs = _TkbridgePlatformDirs("tkbridge", "akuli")

# Must be after creating dirs
from tkbridge import interp as _interp

InvalidError = _interp.InvalidError
Interpreter = _interp.Interpreter
init = _interp.init
get_interpreter = _interp.get_interpreter
shutdown = _interp.shutdown
