"""Create Tk photo images and move pixels in and out of them.

Pixels are given and returned as :class:`PIL.Image.Image` objects, so any
file format that Pillow can read works with :func:`load_image`.
"""
from __future__ import annotations

import logging
import tkinter
from pathlib import Path
from typing import NamedTuple

import PIL.Image

from tkbridge import settings
from tkbridge.interp import Interpreter, InvalidError, Photo, get_interpreter
from tkbridge.tclcommand import Command

log = logging.getLogger(__name__)


class Size(NamedTuple):
    width: int
    height: int


class ImageOpt(NamedTuple):
    """An option of ``image create photo``, e.g. ``ImageOpt("gamma", 1.5)``.

    The special key ``"id"`` sets the name of the image instead.
    """

    key: str
    value: object


def opt_id(image_id: str) -> ImageOpt:
    return ImageOpt("id", image_id)


def opt_gamma(gamma: float) -> ImageOpt:
    return ImageOpt("gamma", gamma)


def opt_file(path: str | Path) -> ImageOpt:
    return ImageOpt("file", path)


def opt_width(width: int) -> ImageOpt:
    return ImageOpt("width", width)


def opt_height(height: int) -> ImageOpt:
    return ImageOpt("height", height)


def opt_palette(palette: str) -> ImageOpt:
    return ImageOpt("palette", palette)


def opt_format(format_name: str) -> ImageOpt:
    return ImageOpt("format", format_name)


class Image:
    """A photo image in Tk.

    Tk owns the pixels, this object only knows the name of the image. The
    image can be given to tkinter widgets, e.g. ``label.config(image=image.id)``.

    Methods that change the image don't raise errors. If something goes
    wrong, the error is logged. Methods that return something return zeros
    on error.
    """

    def __init__(self, interp: Interpreter, image_id: str, photo: Photo | None) -> None:
        self._interp = interp
        self.id = image_id
        self.photo = photo

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.id!r}>"

    def __str__(self) -> str:
        return self.id

    def is_valid(self) -> bool:
        return bool(self.id) and self.photo is not None

    def _do(self, what: str, *args: object) -> Image:
        if self.photo is None:
            self._interp.dump_error(InvalidError(f"image {self.id!r} has no photo"))
            return self
        try:
            getattr(self.photo, what)(*args)
        except (tkinter.TclError, OSError, ValueError) as e:
            self._interp.dump_error(e)
        return self

    def set_image(self, image: PIL.Image.Image) -> Image:
        """Replace the pixels of the photo with the given image."""
        return self._do("put_image", image)

    def set_zoomed_image(
        self, image: PIL.Image.Image, zoom_x: int, zoom_y: int, subsample_x: int, subsample_y: int
    ) -> Image:
        """Like :meth:`set_image`, but Tk scales the pixels while copying.

        The image becomes ``zoom_x / subsample_x`` times wider and
        ``zoom_y / subsample_y`` times taller. Zooming repeats pixels and
        subsampling skips them.
        """
        return self._do("put_zoomed_image", image, zoom_x, zoom_y, subsample_x, subsample_y)

    def to_image(self) -> PIL.Image.Image:
        """Return a copy of the pixels. On error, this returns a 0x0 image."""
        if self.photo is not None:
            try:
                return self.photo.to_image()
            except (tkinter.TclError, OSError, ValueError):
                log.debug(f"cannot get pixels of {self.id!r}", exc_info=True)
        return PIL.Image.new("RGBA", (0, 0))

    def blank(self) -> Image:
        """Make every pixel transparent."""
        return self._do("blank")

    def size(self) -> Size:
        if self.photo is None:
            return Size(0, 0)
        try:
            return Size(*self.photo.size())
        except (tkinter.TclError, ValueError):
            return Size(0, 0)

    def set_size(self, width: int, height: int) -> Image:
        return self._do("set_size", width, height)

    def gamma(self) -> float:
        return self._interp.eval_float(Command(self.id, "cget", "-gamma"))

    def set_gamma(self, gamma: float) -> Image:
        try:
            self._interp.eval(Command(self.id, "configure").option("gamma", gamma))
        except tkinter.TclError as e:
            self._interp.dump_error(e)
        return self


def new_image(*options: ImageOpt | None) -> Image | None:
    """Create a photo image with ``image create photo``.

    See photo(3tk) for the options. If there is no ``opt_id(...)`` option,
    a new unique name is generated. Returns None if Tk fails to create the
    image.
    """
    interp = get_interpreter()

    image_id = ""
    command = Command()
    for opt in options:
        if opt is None:
            continue
        if opt.key == "id":
            if isinstance(opt.value, str):
                image_id = opt.value
            continue
        command.option(opt.key, opt.value)

    if not image_id:
        image_id = interp.make_image_id()

    try:
        interp.eval(Command("image", "create", "photo", image_id).extend(command.words))
    except tkinter.TclError:
        log.debug(f"creating image {image_id!r} failed", exc_info=True)
        return None

    photo = interp.find_photo(image_id)
    if photo is None:
        log.debug(f"image {image_id!r} was created, but there's no photo named {image_id!r}")
        return None
    return Image(interp, image_id, photo)


def load_image(file: str | Path, *options: ImageOpt | None) -> Image:
    """Create a photo image from an image file.

    Files with a suffix listed in the ``native_image_suffixes`` setting
    (``.gif`` by default) are loaded by Tk. Other files are opened with
    Pillow, and Pillow's errors (e.g. :class:`FileNotFoundError` or
    :class:`PIL.UnidentifiedImageError`) are raised as is.
    """
    if not Path(file).parts:
        raise InvalidError(f"file name must not be empty, got {str(file)!r}")

    pil_image = None
    if Path(file).suffix in settings.get().native_image_suffixes:
        options += (opt_file(file),)
    else:
        with PIL.Image.open(file) as opened:
            opened.load()
            pil_image = opened.copy()

    image = new_image(*options)
    if image is None:
        raise RuntimeError(f"creating an image for {str(file)!r} failed")
    if pil_image is not None:
        image.set_image(pil_image)
    return image
