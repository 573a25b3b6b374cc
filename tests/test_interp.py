import logging
import tkinter

import pytest

import tkbridge
from tkbridge import interp
from tkbridge.tclcommand import Command


def test_get_interpreter_before_init(monkeypatch):
    monkeypatch.setattr(interp, "_interpreter", None)
    with pytest.raises(RuntimeError):
        tkbridge.get_interpreter()


def test_init_twice(tk_session):
    assert tkbridge.get_interpreter() is tk_session
    with pytest.raises(RuntimeError):
        tkbridge.init(tk_session.root)


def test_eval_helpers(tk_session):
    assert tk_session.eval("expr {1 + 2}") == "3"
    assert tk_session.eval_int("expr {1 + 2}") == 3
    assert tk_session.eval_int("string repeat x 3") == 0
    assert tk_session.eval_int("no_such_command") == 0
    assert tk_session.eval_float("expr {1 / 4.0}") == 0.25
    assert tk_session.eval_float("no_such_command") == 0.0
    assert tk_session.eval_list("list a {b c} {}") == ["a", "b c", ""]
    with pytest.raises(tkinter.TclError):
        tk_session.eval("no_such_command")


def test_eval_logs_scripts(tk_session, caplog):
    caplog.set_level(logging.DEBUG, logger="tkbridge.interp")
    tk_session.eval(Command("set", "tkbridge_test_var", "hello world"))
    assert "evaluating: set tkbridge_test_var {hello world}" in caplog.text

    caplog.clear()
    tk_session.eval(Command("set", "tkbridge_test_var", "x" * 1000))
    [record] = caplog.records
    assert record.levelno == logging.DEBUG
    assert record.getMessage().endswith("... (1022 characters)")
    assert "x" * 1000 not in caplog.text


def test_create_action(tk_session):
    calls = []
    name = tk_session.create_action("tkbridge_test_action", calls.append)
    assert name == "tkbridge_test_action"
    tk_session.eval("tkbridge_test_action a {b c} 3")
    assert calls == [["a", "b c", "3"]]


def test_bind_event_ids_are_unique(tk_session):
    ids = {tk_session.make_bind_event_id() for i in range(100)}
    assert len(ids) == 100


def test_sessions_dont_share_ids(tk_session):
    other = interp.Interpreter(tk_session.root)
    assert other.serial != tk_session.serial
    assert other.make_bind_event_id() != tk_session.make_bind_event_id()


def test_find_widget(tk_session, frame):
    assert tk_session.find_widget(".") is tk_session.root
    assert tk_session.find_widget(str(frame)) is frame
    assert tk_session.find_widget(".nonexistent") is None
    assert tk_session.find_widget("??") is None
    assert tk_session.find_widget("") is None


def test_is_valid_widget(tk_session, frame):
    assert tk_session.is_valid_widget(tk_session.root)
    assert tk_session.is_valid_widget(frame)
    assert not tk_session.is_valid_widget(str(frame))
    assert not tk_session.is_valid_widget(None)

    destroyed = tkinter.Frame(tk_session.root)
    destroyed.destroy()
    assert not tk_session.is_valid_widget(destroyed)


def test_find_photo(tk_session):
    tk_session.eval("image create photo tkbridge_test_photo")
    tk_session.eval("image create bitmap tkbridge_test_bitmap")
    try:
        photo = tk_session.find_photo("tkbridge_test_photo")
        assert photo is not None
        assert photo.id == "tkbridge_test_photo"
        assert tk_session.find_photo("tkbridge_test_bitmap") is None
        assert tk_session.find_photo("nonexistent") is None
    finally:
        tk_session.eval("image delete tkbridge_test_photo tkbridge_test_bitmap")


def test_destroy_deletes_actions(tk_session):
    other = interp.Interpreter(tk_session.root)
    other.create_action("tkbridge_destroy_test", print)
    assert tk_session.eval("info commands tkbridge_destroy_test") == "tkbridge_destroy_test"
    other.destroy()
    assert tk_session.eval("info commands tkbridge_destroy_test") == ""
