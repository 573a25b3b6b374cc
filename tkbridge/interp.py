"""The Tcl interpreter session that everything in tkbridge goes through."""
from __future__ import annotations

import base64
import io
import itertools
import logging
import tkinter
from typing import Callable

import PIL.Image

from tkbridge import settings
from tkbridge.tclcommand import Command

log = logging.getLogger(__name__)

# image data is passed inline as base64, don't dump all of it to the log
_MAX_LOGGED_SCRIPT_LENGTH = 500


class InvalidError(ValueError):
    """Raised when an argument is invalid. Nothing is sent to Tcl in that case."""


def _to_png_base64(image: PIL.Image.Image) -> str:
    # PNG can't store all Pillow modes, e.g. "CMYK" or "F"
    if image.mode not in {"1", "L", "LA", "P", "RGB", "RGBA"}:
        image = image.convert("RGBA")
    buffer = io.BytesIO()
    image.save(buffer, format="PNG")
    return base64.b64encode(buffer.getvalue()).decode("ascii")


class Photo:
    """Pixel access to an existing Tk photo image.

    Use :meth:`Interpreter.find_photo` to get one of these.
    """

    def __init__(self, interp: Interpreter, image_id: str) -> None:
        self._interp = interp
        self.id = image_id

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.id!r}>"

    def _copy_from_pil_image(
        self, image: PIL.Image.Image, zoom: tuple[int, int], subsample: tuple[int, int]
    ) -> None:
        # Tk can't put zoomed data directly, only copy from another photo.
        # With -shrink, the copied pixels replace everything that was there before.
        temp_id = self._interp.make_image_id()
        self._interp.eval(
            Command("image", "create", "photo", temp_id)
            .option("format", "png")
            .option("data", _to_png_base64(image))
        )
        try:
            self.blank()
            self._interp.eval(
                Command(self.id, "copy", temp_id)
                .option("zoom", zoom[0])
                .append(zoom[1])
                .option("subsample", subsample[0])
                .append(subsample[1])
                .option("compositingrule", "set")
                .append("-shrink")
            )
        finally:
            self._interp.eval(Command("image", "delete", temp_id))

    def put_image(self, image: PIL.Image.Image) -> None:
        self._copy_from_pil_image(image, (1, 1), (1, 1))

    def put_zoomed_image(
        self, image: PIL.Image.Image, zoom_x: int, zoom_y: int, subsample_x: int, subsample_y: int
    ) -> None:
        self._copy_from_pil_image(image, (zoom_x, zoom_y), (subsample_x, subsample_y))

    def to_image(self) -> PIL.Image.Image:
        data = self._interp.eval(Command(self.id, "data", "-format", "png"))
        image = PIL.Image.open(io.BytesIO(base64.b64decode(data)))
        image.load()
        return image

    def blank(self) -> None:
        self._interp.eval(Command(self.id, "blank"))

    def size(self) -> tuple[int, int]:
        width = int(self._interp.eval(Command("image", "width", self.id)))
        height = int(self._interp.eval(Command("image", "height", self.id)))
        return (width, height)

    def set_size(self, width: int, height: int) -> None:
        self._interp.eval(
            Command(self.id, "configure").option("width", width).option("height", height)
        )


class Interpreter:
    """A tkinter root window and the Tcl interpreter inside it.

    Names of images and Tcl commands created by tkbridge come from counters
    stored here. Each session also gets a serial number that goes to the
    names, so two sessions in the same process never generate the same name.
    """

    _serials = itertools.count(1)

    def __init__(self, root: tkinter.Tk) -> None:
        self.root = root
        self.serial = next(Interpreter._serials)
        self._image_counter = itertools.count(1)
        self._action_counter = itertools.count(1)
        self._actions: list[str] = []

    def __repr__(self) -> str:
        return f"<{type(self).__name__} #{self.serial}>"

    def eval(self, script: str | Command) -> str:
        """Run Tcl code and return the result.

        Raises :class:`tkinter.TclError` if the code fails.
        """
        code = str(script)
        if len(code) > _MAX_LOGGED_SCRIPT_LENGTH:
            log.debug(f"evaluating: {code[:_MAX_LOGGED_SCRIPT_LENGTH]}... ({len(code)} characters)")
        else:
            log.debug(f"evaluating: {code}")
        return str(self.root.tk.eval(code))

    def eval_list(self, script: str | Command) -> list[str]:
        return [str(item) for item in self.root.tk.splitlist(self.eval(script))]

    def eval_int(self, script: str | Command) -> int:
        """Like :meth:`eval`, but returns 0 if anything goes wrong."""
        try:
            return int(self.eval(script))
        except (tkinter.TclError, ValueError):
            return 0

    def eval_float(self, script: str | Command) -> float:
        """Like :meth:`eval`, but returns 0.0 if anything goes wrong."""
        try:
            return float(self.eval(script))
        except (tkinter.TclError, ValueError):
            return 0.0

    def create_action(self, name: str, callback: Callable[[list[str]], object]) -> str:
        """Create a Tcl command that calls ``callback(list_of_arguments)``.

        Errors in the callback are shown with ``root.report_callback_exception``,
        just like errors in usual tkinter callbacks.
        """

        def run_callback(*args: object) -> None:
            try:
                callback([str(arg) for arg in args])
            except Exception as e:
                self.root.report_callback_exception(type(e), e, e.__traceback__)

        self.root.tk.createcommand(name, run_callback)
        if name not in self._actions:
            self._actions.append(name)
        return name

    def make_image_id(self) -> str:
        existing = set(self.eval_list("image names"))
        prefix = settings.get().image_id_prefix
        while True:
            image_id = f"{prefix}{self.serial}_{next(self._image_counter)}"
            if image_id not in existing:
                return image_id

    def make_bind_event_id(self) -> str:
        prefix = settings.get().action_id_prefix
        return f"{prefix}{self.serial}_{next(self._action_counter)}"

    def find_widget(self, path: str) -> tkinter.Misc | None:
        """Return the tkinter widget with the given Tk path name, or None if there isn't one."""
        if not path or path == "??":
            return None
        try:
            return self.root.nametowidget(path)
        except KeyError:
            # not created with tkinter, or already destroyed
            return None

    def is_valid_widget(self, widget: object) -> bool:
        if not isinstance(widget, tkinter.Misc) or widget.tk is not self.root.tk:
            return False
        try:
            if not widget.winfo_exists():
                return False
        except tkinter.TclError:
            return False
        return self.find_widget(str(widget)) is widget

    def find_photo(self, image_id: str) -> Photo | None:
        try:
            image_type = self.eval(Command("image", "type", image_id))
        except tkinter.TclError:
            return None
        if image_type != "photo":
            return None
        return Photo(self, image_id)

    def dump_error(self, error: BaseException) -> None:
        log.error(f"Tcl operation failed: {error}", exc_info=error)

    def destroy(self) -> None:
        """Delete the Tcl commands created with :meth:`create_action`."""
        for name in self._actions:
            try:
                self.root.tk.deletecommand(name)
            except tkinter.TclError:
                # root window destroyed already
                pass
        self._actions.clear()


_interpreter: Interpreter | None = None


def init(root: tkinter.Tk | None = None) -> Interpreter:
    """Start the tkbridge session.

    If no *root* is given, a new :class:`tkinter.Tk` is created.
    """
    global _interpreter
    if _interpreter is not None:
        raise RuntimeError("tkbridge is already initialized")

    if root is None:
        root = tkinter.Tk(className="Tkbridge")
        log.debug("root window created")
    log.debug("Tcl/Tk version: " + root.tk.eval("info patchlevel"))

    _interpreter = Interpreter(root)
    return _interpreter


def get_interpreter() -> Interpreter:
    """Return the session created with :func:`init`."""
    if _interpreter is None:
        raise RuntimeError("tkbridge.init() has not been called")
    return _interpreter


def shutdown() -> None:
    """End the session started with :func:`init`. The root window is not destroyed."""
    global _interpreter
    if _interpreter is not None:
        _interpreter.destroy()
        _interpreter = None
