import io
import logging
import os
from typing import Union

from PIL import Image

from photoshoot.models.session import OrientationType

logger = logging.getLogger(__name__)

ImageSource = Union[bytes, str, os.PathLike]


def image_size(source: ImageSource) -> tuple:
    """Read pixel dimensions from the image header without decoding pixels."""
    if isinstance(source, (bytes, bytearray)):
        with Image.open(io.BytesIO(source)) as img:
            return img.size
    with Image.open(source) as img:
        return img.size


def classify(source: ImageSource) -> OrientationType:
    """Classify an image as landscape or portrait from its dimensions.

    Square images count as portrait. Unreadable images are logged and also
    reported as portrait so a single bad file cannot abort a collage run.
    """
    label = "<buffer>" if isinstance(source, (bytes, bytearray)) else os.fspath(source)
    try:
        width, height = image_size(source)
    except (OSError, ValueError, Image.DecompressionBombError) as e:
        logger.warning("Could not read dimensions of %s, assuming portrait: %s", label, e)
        return OrientationType.portrait

    if width > height:
        return OrientationType.landscape
    return OrientationType.portrait
