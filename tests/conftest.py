# note about virtual events: sometimes running any_widget.update()
# before generating a virtual event is needed for the virtual event to
# actually do something, if you have weird problems with tests try
# adding any_widget.update() calls
# see also update(3tcl)

import logging
import operator
import os
import tempfile
import tkinter

import platformdirs
import pytest

from tkbridge import dirs, events, interp, settings


class MonkeypatchedPlatformDirs(platformdirs.PlatformDirs):
    user_cache_dir = property(operator.attrgetter("_cache"))
    user_config_dir = property(operator.attrgetter("_config"))
    user_log_dir = property(operator.attrgetter("_logs"))


@pytest.fixture(scope="session", autouse=True)
def monkeypatch_dirs():
    with tempfile.TemporaryDirectory() as d:
        # This is a hack because:
        #   - pytest monkeypatch fixture doesn't work (not for scope='session')
        #   - assigning to dirs.user_cache_dir doesn't work (platformdirs uses @property)
        #   - "tkbridge.dirs = blahblah" doesn't work (from tkbridge import dirs)
        dirs.__class__ = MonkeypatchedPlatformDirs
        dirs._cache = os.path.join(d, "cache")
        dirs._config = os.path.join(d, "config")
        dirs._logs = os.path.join(d, "logs")
        assert dirs.user_cache_dir.startswith(d)
        yield


@pytest.fixture(autouse=True)
def fresh_settings():
    settings.reset()
    yield
    settings.reset()


@pytest.fixture(scope="session")
def tk_session():
    try:
        root = tkinter.Tk()
    except tkinter.TclError as e:
        pytest.skip(f"cannot create a Tk window: {e}")
    root.withdraw()

    session = interp.init(root)
    yield session
    interp.shutdown()
    root.destroy()


@pytest.fixture
def root(tk_session):
    return tk_session.root


@pytest.fixture
def frame(root):
    frame = tkinter.Frame(root)
    yield frame
    frame.destroy()


@pytest.fixture(autouse=True)
def fail_test_if_a_tkinter_callback_errors(mocker):
    mock = mocker.patch("tkinter.Tk.report_callback_exception")
    yield
    if mock.call_count != 0:
        exc_type, exc_value, exc_tb = mock.call_args.args
        raise ValueError("error in tkinter callback while running test") from exc_value


@pytest.fixture(scope="function", autouse=True)
def check_nothing_logged(request):
    if "caplog" in request.fixturenames:
        # Test uses caplog fixture, expects to get logging errors
        yield
    else:
        # Fail test if it logs an error
        def emit(record: logging.LogRecord):
            raise RuntimeError(f"test logged error: {record}")

        handler = logging.Handler()
        handler.setLevel(logging.ERROR)
        handler.emit = emit
        logging.getLogger().addHandler(handler)
        yield
        logging.getLogger().removeHandler(handler)


# Runs a binding's Tcl command like Tk would, with one value for each %-substitution.
# Key events are hard to generate with "event generate" when the window doesn't have focus.
@pytest.fixture
def fire(tk_session):
    defaults = {"%T": "2", "%E": "0", "%W": ".", "%t": "1234", "%s": "0"}

    def actually_fire(action, substitutions=None):
        values = {**defaults, **(substitutions or {})}
        codes = events.SUBSTITUTION_TEMPLATE.split()
        tk_session.root.tk.call(action, *[values.get(code, "??") for code in codes])

    return actually_fire
