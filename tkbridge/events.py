"""Bind callbacks to Tk events, and generate events.

Tk tells bindings about the event with ``%`` substitutions (see bind(3tk)).
Every binding created here passes the same 21 substitutions to the callback,
in the order of :data:`SUBSTITUTION_TEMPLATE`, and :meth:`Event.parse` turns
them into an :class:`Event`.
"""
from __future__ import annotations

import dataclasses
import enum
import json
import logging
import re
import tkinter
from typing import Any, Callable, Sequence, Type, TypeVar

import dacite

from tkbridge.interp import InvalidError, get_interpreter
from tkbridge.tclcommand import Command, Raw

log = logging.getLogger(__name__)
_T = TypeVar("_T")

# The order of these is the order of the arguments that Event.parse() gets
SUBSTITUTION_TEMPLATE = "%T %E %W %t %b %x %y %D %k %K %A %d %f %w %h %m %o %p %s %X %Y"
FIELD_COUNT = len(SUBSTITUTION_TEMPLATE.split())

# Tk substitutes this when the field doesn't make sense for the event type
_NOT_APPLICABLE = "??"

# optional sign and ASCII digits only, int() also allows whitespace and underscores
_DECIMAL_INTEGER = re.compile(r"[+-]?[0-9]+")

# out-of-range values saturate to 64-bit limits
_INT_MIN = -(2**63)
_INT_MAX = 2**63 - 1


def _to_int(string: str) -> int:
    if _DECIMAL_INTEGER.fullmatch(string) is None:
        return 0
    # int() refuses very long digit strings, and they are out of range anyway
    if len(string.lstrip("+-").lstrip("0")) > len(str(_INT_MAX)):
        return _INT_MIN if string.startswith("-") else _INT_MAX
    return max(_INT_MIN, min(int(string), _INT_MAX))


def _to_bool(string: str) -> bool:
    return string == "1"


def _to_string(string: str) -> str:
    return "" if string == _NOT_APPLICABLE else string


class EventDataclass:
    """
    Inherit from this class when creating a dataclass to send with the
    ``data`` argument of :func:`send_event`.

    All values should be JSON safe or data classes containing JSON safe values.
    Example::

        import dataclasses
        from typing import List
        from tkbridge import events

        @dataclasses.dataclass
        class Selection(events.EventDataclass):
            names: List[str]

        def on_select(event: events.Event) -> None:
            print(event.data_class(Selection).names)

        events.bind_event(".", "<<Select>>", on_select)
        events.send_event(root, "<<Select>>", data=Selection(["a", "b"]))

    Use ``List[str]`` rather than ``list[str]`` if you need Python 3.9 or
    older, because dacite evaluates the type annotations.
    """

    def __str__(self) -> str:
        # str(Foo(a=1, b=2)) --> 'Foo{"a": 1, "b": 2}'
        # Content after Foo is JSON parsed in Event.data_class()
        return type(self).__name__ + json.dumps(dataclasses.asdict(self))  # type: ignore


@dataclasses.dataclass(frozen=True)
class Event:
    """What happened, according to the ``%`` substitutions of a binding.

    Fields that don't apply to the type of the event are ``0``, ``False``
    or ``""``.
    """

    #: Tk's numeric event type, e.g. 2 for KeyPress and 4 for ButtonPress.
    type: int = 0
    #: True for events created with :func:`send_event` and other generated events.
    synthetic: bool = False
    #: The tkinter widget that got the event, or None if it wasn't created
    #: with tkinter or doesn't exist anymore.
    widget: tkinter.Misc | None = None
    #: Milliseconds since some unspecified point in time, never negative.
    timestamp: int = 0
    mouse_button: int = 0
    #: Mouse position relative to the widget.
    pos_x: int = 0
    pos_y: int = 0
    #: Mouse position relative to the screen.
    global_pos_x: int = 0
    global_pos_y: int = 0
    wheel_delta: int = 0
    key_code: int = 0
    key_sym: str = ""
    key_text: str = ""
    #: First character of :attr:`key_text`, or empty string.
    key_rune: str = ""
    #: For virtual events, the ``data`` given to :func:`send_event`.
    #: For Enter, Leave, FocusIn and FocusOut events, a string like ``"NotifyAncestor"``.
    user_data: str = ""
    focus: bool = False
    width: int = 0
    height: int = 0
    mode: str = ""
    override_redirect: str = ""
    place: str = ""
    state: str = ""

    @classmethod
    def parse(
        cls,
        args: Sequence[str],
        find_widget: Callable[[str], tkinter.Misc | None] | None = None,
    ) -> Event:
        """Create an event from the values substituted with :data:`SUBSTITUTION_TEMPLATE`.

        This never fails. Numbers that don't parse become zero, and missing
        arguments are treated like Tk's ``??``.
        """
        args = list(args[:FIELD_COUNT])
        args += [_NOT_APPLICABLE] * (FIELD_COUNT - len(args))

        widget = None
        if find_widget is not None:
            widget = find_widget(_to_string(args[2]))

        key_text = _to_string(args[10])
        return cls(
            type=_to_int(args[0]),
            synthetic=_to_bool(args[1]),
            widget=widget,
            timestamp=max(_to_int(args[3]), 0),
            mouse_button=_to_int(args[4]),
            pos_x=_to_int(args[5]),
            pos_y=_to_int(args[6]),
            wheel_delta=_to_int(args[7]),
            key_code=_to_int(args[8]),
            key_sym=_to_string(args[9]),
            key_text=key_text,
            key_rune=key_text[:1],
            user_data=_to_string(args[11]),
            focus=_to_bool(args[12]),
            width=_to_int(args[13]),
            height=_to_int(args[14]),
            mode=_to_string(args[15]),
            override_redirect=_to_string(args[16]),
            place=_to_string(args[17]),
            state=_to_string(args[18]),
            global_pos_x=_to_int(args[19]),
            global_pos_y=_to_int(args[20]),
        )

    def data_class(self, T: Type[_T]) -> _T:
        """
        If a dataclass instance of type ``T`` was passed as ``data`` to
        :func:`send_event`, then this returns a copy of it. Otherwise this
        raises an error.

        ``T`` must be a dataclass that inherits from :class:`EventDataclass`.
        """
        if not self.user_data.startswith(T.__name__ + "{"):
            raise ValueError(f"event data is not a {T.__name__}: {self.user_data!r}")
        result = dacite.from_dict(T, json.loads(self.user_data[len(T.__name__) :]))
        assert isinstance(result, T)
        return result


def is_event(event: str) -> bool:
    """Check whether a string looks like ``<Button-1>``. Virtual events also count."""
    return event.startswith("<") and event.endswith(">")


def is_virtual_event(event: str) -> bool:
    """Check whether a string looks like ``<<Paste>>``."""
    return event.startswith("<<") and event.endswith(">>")


def _check_tag_and_event(tag: str, event: str) -> None:
    if not tag:
        raise InvalidError("tag must not be empty")
    if not is_event(event):
        raise InvalidError(f"not an event: {event!r}")


def _bind(tag: str, event: str, callback: Callable[[Event], object], prefix: str) -> str:
    interp = get_interpreter()

    def run_callback(args: list[str]) -> None:
        callback(Event.parse(args, interp.find_widget))

    action = interp.create_action(interp.make_bind_event_id(), run_callback)
    log.debug(f"binding {event} of {tag!r} to {action}")
    interp.eval(Command("bind", tag, event, f"{prefix}{action} {SUBSTITUTION_TEMPLATE}"))
    return action


def bind_event(tag: str, event: str, callback: Callable[[Event], object]) -> str:
    """Run ``callback(event_object)`` when *event* happens in *tag*.

    The *tag* is a widget path name like ``".!frame.!button"``, a class name
    like ``"Button"``, ``"all"`` or any other bindtag. An existing binding of
    the same tag and event is replaced. Use :func:`add_bind_event` to keep it.

    Raises :class:`tkbridge.InvalidError` if the tag is empty or the event
    is not in angle brackets, and :class:`tkinter.TclError` if Tk doesn't
    accept the binding. Returns the name of the Tcl command that runs the
    callback.
    """
    _check_tag_and_event(tag, event)
    return _bind(tag, event, callback, "")


def add_bind_event(tag: str, event: str, callback: Callable[[Event], object]) -> str:
    """Like :func:`bind_event`, but existing bindings are kept and run first."""
    _check_tag_and_event(tag, event)
    return _bind(tag, event, callback, "+")


def clear_bind_event(tag: str, event: str) -> None:
    """Make *event* of *tag* do nothing.

    The Tcl commands that ran the callbacks are not deleted.
    """
    _check_tag_and_event(tag, event)
    get_interpreter().eval(Command("bind", tag, event, ""))


def bind_info(tag: str) -> list[str]:
    """Return the events that have bindings in *tag*, or an empty list on error."""
    if not tag:
        return []
    try:
        return get_interpreter().eval_list(Command("bind", tag))
    except tkinter.TclError:
        return []


class KeyModifier(enum.Flag):
    SHIFT = enum.auto()
    CONTROL = enum.auto()
    ALT = enum.auto()
    META = enum.auto()
    FN = enum.auto()

    def __str__(self) -> str:
        # Fn is tracked, but not shown
        names = [
            name
            for name, modifier in [
                ("Shift", KeyModifier.SHIFT),
                ("Control", KeyModifier.CONTROL),
                ("Alt", KeyModifier.ALT),
                ("Meta", KeyModifier.META),
            ]
            if modifier in self
        ]
        return " ".join(names)


# e.g. "Shift_L" and "Shift_R" both start with "Shift_"
_MODIFIER_KEYSYM_PREFIXES = [
    ("Shift_", KeyModifier.SHIFT),
    ("Control_", KeyModifier.CONTROL),
    ("Alt_", KeyModifier.ALT),
    ("Meta_", KeyModifier.META),
    ("Super_", KeyModifier.FN),
]


class ModifierTracker:
    """Figures out which modifier keys are held down by watching presses and releases.

    There's no counting: pressing both shift keys and releasing one of them
    clears the Shift bit, and if a release event never arrives (e.g. the
    window lost focus), the bit stays set until the next release of that key.
    """

    def __init__(self) -> None:
        self.modifiers = KeyModifier(0)

    def press(self, key_sym: str) -> None:
        for prefix, modifier in _MODIFIER_KEYSYM_PREFIXES:
            if key_sym.startswith(prefix):
                self.modifiers |= modifier

    def release(self, key_sym: str) -> None:
        for prefix, modifier in _MODIFIER_KEYSYM_PREFIXES:
            if key_sym.startswith(prefix) and modifier in self.modifiers:
                self.modifiers ^= modifier


@dataclasses.dataclass(frozen=True)
class KeyEvent:
    """An :class:`Event` and the modifier keys that were held down.

    Attributes of the event can be accessed directly, e.g.
    ``key_event.key_sym`` is same as ``key_event.event.key_sym``.
    """

    event: Event
    modifiers: KeyModifier

    def __getattr__(self, name: str) -> Any:
        # only called when usual attribute lookup fails
        if name == "event":
            raise AttributeError(name)
        return getattr(self.event, name)


def bind_key_event_ex(
    tag: str,
    on_press: Callable[[KeyEvent], object] | None,
    on_release: Callable[[KeyEvent], object] | None,
) -> ModifierTracker:
    """Bind ``<KeyPress>`` and ``<KeyRelease>`` of *tag*, keeping track of modifier keys.

    When a modifier key is pressed, its bit is set before *on_press* runs.
    When it's released, *on_release* still sees the bit and it's cleared
    afterwards. Either callback can be None.

    The returned tracker is shared by the two bindings and not by anything
    else, so each call to this function tracks modifiers separately.
    """
    tracker = ModifierTracker()

    def press(event: Event) -> None:
        tracker.press(event.key_sym)
        if on_press is not None:
            on_press(KeyEvent(event, tracker.modifiers))

    def release(event: Event) -> None:
        try:
            if on_release is not None:
                on_release(KeyEvent(event, tracker.modifiers))
        finally:
            tracker.release(event.key_sym)

    bind_event(tag, "<KeyPress>", press)
    bind_event(tag, "<KeyRelease>", release)
    return tracker


def add_virtual_event(virtual: str, sequence: str, *sequences: str) -> None:
    """Make the virtual event happen when any of the given event sequences happens.

    Sequences already associated with the virtual event stay associated.
    For example, ``add_virtual_event("<<Paste>>", "<Control-v>", "<Shift-Insert>")``.
    """
    if not is_virtual_event(virtual):
        raise InvalidError(f"not a virtual event: {virtual!r}")
    get_interpreter().eval(Command("event", "add", virtual, sequence, *sequences))


def remove_virtual_event(virtual: str, *sequences: str) -> None:
    """Stop the sequences from triggering the virtual event.

    With no sequences, all of them are removed and the virtual event
    doesn't trigger anymore. Sequences that were not associated with the
    virtual event are ignored.
    """
    if not is_virtual_event(virtual):
        raise InvalidError(f"not a virtual event: {virtual!r}")
    get_interpreter().eval(Command("event", "remove", virtual, *sequences))


def virtual_event_info(virtual: str) -> list[str]:
    """Return the sequences that trigger a virtual event, or an empty list on error."""
    if not is_virtual_event(virtual):
        return []
    try:
        return get_interpreter().eval_list(Command("event", "info", virtual))
    except tkinter.TclError:
        return []


@dataclasses.dataclass(frozen=True)
class EventAttr:
    """A ``-key value`` option of ``event generate``, e.g. ``EventAttr("x", 10)``.

    The key is not checked, see event(3tk) for valid keys.
    """

    key: str
    value: object


def native_event_attr(key: str, value: object) -> EventAttr:
    return EventAttr(key, value)


def _send_event(
    target: str | Raw, event: str, attrs: Sequence[EventAttr | None], data: object
) -> None:
    if not is_event(event):
        raise InvalidError(f"not an event: {event!r}")

    command = Command("event", "generate", target, event)
    for attr in attrs:
        if attr is not None:
            command.option(attr.key, attr.value)
    if data is not None:
        command.option("data", data)
    get_interpreter().eval(command)


def send_event(
    widget: tkinter.Misc, event: str, *attrs: EventAttr | None, data: object = None
) -> None:
    """Generate an event as if it really happened in the widget.

    Raises :class:`tkbridge.InvalidError` if the widget has been destroyed
    or doesn't belong to tkbridge's session, or if the event is not in angle
    brackets. The *data* can be any string or an :class:`EventDataclass`,
    and it shows up as :attr:`Event.user_data` in virtual event bindings.
    """
    if not get_interpreter().is_valid_widget(widget):
        raise InvalidError(f"not a valid widget: {widget!r}")
    _send_event(str(widget), event, attrs, data)


def send_event_to_focus(event: str, *attrs: EventAttr | None, data: object = None) -> None:
    """Like :func:`send_event`, but the event goes to the widget that has keyboard focus."""
    _send_event(Raw("[focus]"), event, attrs, data)
