import argparse
import logging
import tkinter
from pathlib import Path
from tkinter import ttk

from tkbridge import __version__ as tkbridge_version
from tkbridge import _logs, events, images, interp

log = logging.getLogger(__name__)


_EPILOG = r"""
Examples:
  %(prog)s                      # show an empty window, log key presses
  %(prog)s cat.png dog.gif      # show images, press F5 to reload them
  %(prog)s -v                   # produce lots of output for debugging
"""


def _show_images(frame: ttk.Frame, paths: list[Path]) -> None:
    for child in frame.winfo_children():
        child.destroy()

    for path in paths:
        try:
            image = images.load_image(str(path))
        except (OSError, ValueError, RuntimeError) as e:
            log.warning(f"cannot load {path}: {e}")
            ttk.Label(frame, text=f"{path.name}: {e}").pack()
            continue

        width, height = image.size()
        log.info(f"loaded {path} as {image.id!r}, {width}x{height}")
        ttk.Label(frame, image=image.id, text=path.name, compound="top").pack(side="left")


def main() -> None:
    parser = argparse.ArgumentParser(
        prog="tkbridge", epilog=_EPILOG, formatter_class=argparse.RawDescriptionHelpFormatter
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"tkbridge {tkbridge_version}",
        help="display the tkbridge version number and exit",
    )

    verbose_group = parser.add_mutually_exclusive_group()
    verbose_group.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help=(
            "print all logging messages to stderr, only warnings and errors "
            "are printed by default (but all messages always go to a log "
            "file as well)"
        ),
    )
    verbose_group.add_argument(
        "--verbose-logger",
        action="append",
        help=(
            "increase verbosity for just one logger only, e.g. "
            "--verbose-logger=tkbridge.events to see what gets bound"
        ),
    )
    parser.add_argument(
        "images", metavar="IMAGES", nargs=argparse.ZERO_OR_MORE, type=Path, help="show these images"
    )
    args = parser.parse_args()

    _logs.setup(all_loggers_verbose=args.verbose, verbose_loggers=(args.verbose_logger or []))

    session = interp.init()
    root = session.root
    root.title(f"tkbridge {tkbridge_version}")

    status = ttk.Label(root, text="Press some keys")
    status.pack(side="bottom", fill="x")
    frame = ttk.Frame(root)
    frame.pack(fill="both", expand=True)

    _show_images(frame, args.images)

    def reload_images(event: events.Event) -> None:
        log.info("reloading images")
        _show_images(frame, args.images)

    def on_key(key_event: events.KeyEvent) -> None:
        modifiers = str(key_event.modifiers) or "no modifiers"
        status.config(text=f"{key_event.key_sym} ({modifiers})")
        log.debug(f"key {key_event.key_sym!r}, text {key_event.key_text!r}, {modifiers}")

    events.add_virtual_event("<<Reload>>", "<F5>")
    events.bind_event(str(root), "<<Reload>>", reload_images)
    events.bind_key_event_ex(str(root), on_key, None)

    try:
        root.mainloop()
    finally:
        interp.shutdown()
        try:
            root.destroy()
        except tkinter.TclError:
            # already destroyed by closing the window
            pass


if __name__ == "__main__":
    main()
