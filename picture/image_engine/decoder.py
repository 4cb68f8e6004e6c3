"""Image decoder using pyvips.

Turns fetched bytes into a read-only RGB numpy array. Anything pyvips
cannot read decodes to None.
"""

import contextlib
from typing import Any

import numpy as np

from picture.logger import get_logger

_logger = get_logger("decoder")

RGB_CHANNELS = 3

_pyvips: Any | None = None


def _get_pyvips_module() -> Any:
    global _pyvips
    if _pyvips is None:
        import pyvips  # type: ignore

        _pyvips = pyvips
    return _pyvips


def _decode_with_pyvips_from_buffer(data: bytes) -> "np.ndarray":
    """Decode arbitrary image bytes into an RGB numpy array using pyvips."""
    pyvips = _get_pyvips_module()
    # Decoded results are memoised by ImageCache; keep libvips' own cache off
    with contextlib.suppress(Exception):
        pyvips.cache_set_max(0)
        pyvips.cache_set_max_mem(0)

    image = pyvips.Image.new_from_buffer(data, "", access="sequential")

    with contextlib.suppress(Exception):
        image = image.colourspace("srgb")
    if image.hasalpha():
        image = image.flatten(background=[0, 0, 0])
    if image.bands > RGB_CHANNELS:
        image = image.extract_band(0, n=RGB_CHANNELS)
    elif image.bands < RGB_CHANNELS:
        image = pyvips.Image.bandjoin([image] * RGB_CHANNELS)
    if image.format != "uchar":
        image = image.cast("uchar")

    mem = image.write_to_memory()
    array = np.frombuffer(mem, dtype=np.uint8).reshape(image.height, image.width, image.bands)
    array = array.copy()
    if array.shape[2] != RGB_CHANNELS:
        raise RuntimeError(f"Unsupported band count after conversion: {array.shape[2]}")
    array.flags.writeable = False
    return array


def decode_image(data: bytes) -> "np.ndarray | None":
    """Decode image bytes into a read-only RGB numpy array.

    Returns None when the bytes are empty or not a recognisable image.
    """
    if not data:
        _logger.debug("decode skipped: empty payload")
        return None
    try:
        return _decode_with_pyvips_from_buffer(bytes(data))
    except Exception as e:
        _logger.debug("decode failed: %s", e)
        return None
