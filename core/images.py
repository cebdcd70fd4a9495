"""
Image compression for uploaded photos.

Every photo is re-encoded as JPEG, bounded to 1024 px on its longest side
and to roughly 1 MB, before it reaches the object store.
"""

import io
import logging

from django.conf import settings
from PIL import Image, ImageOps

logger = logging.getLogger(__name__)

MAX_DIMENSION = getattr(settings, 'KIVVLY_IMAGE_MAX_DIMENSION', 1024)
MAX_SIZE_BYTES = getattr(settings, 'KIVVLY_IMAGE_MAX_BYTES', 1024 * 1024)

_QUALITY_STEPS = (85, 75, 65, 55, 45, 35)


def compress_image(source, max_dimension=MAX_DIMENSION, max_size_bytes=MAX_SIZE_BYTES) -> bytes:
    """
    Return JPEG bytes for ``source`` (a file-like object or path).

    Quality is lowered step by step until the output fits ``max_size_bytes``;
    the last step is returned even if it is still larger. Pillow errors
    (unreadable or truncated images) propagate to the caller.
    """
    if hasattr(source, 'seek'):
        source.seek(0)

    with Image.open(source) as img:
        img = ImageOps.exif_transpose(img)
        if img.mode not in ('RGB', 'L'):
            img = img.convert('RGB')
        img.thumbnail((max_dimension, max_dimension))

        data = b''
        for quality in _QUALITY_STEPS:
            buffer = io.BytesIO()
            img.save(buffer, format='JPEG', quality=quality, optimize=True)
            data = buffer.getvalue()
            if len(data) <= max_size_bytes:
                break

    logger.debug(f"Compressed image to {len(data)} bytes ({img.width}x{img.height})")
    return data
