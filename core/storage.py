"""
Blob storage for user uploads.

Files go through Django's ``default_storage``: the local filesystem in
development, S3 (django-storages) when ``AWS_STORAGE_BUCKET_NAME`` is set.
Keys are ``<prefix>/<uuid>.<extension>`` so uploads never overwrite each
other.

Usage:
    from core.storage import upload_blob

    url = upload_blob(f'places/{user.pk}', jpeg_bytes)
"""

import logging
import uuid

from django.core.files.base import ContentFile
from django.core.files.storage import default_storage

from core.exceptions import StorageUploadError

logger = logging.getLogger(__name__)
security_logger = logging.getLogger('security.storage')


def blob_key(prefix: str, extension: str = 'jpg') -> str:
    return f"{prefix.strip('/')}/{uuid.uuid4()}.{extension}"


def upload_blob(prefix: str, content: bytes, extension: str = 'jpg') -> str:
    """
    Store ``content`` under a generated key below ``prefix``.

    Returns:
        The retrieval URL of the stored blob.

    Raises:
        StorageUploadError: the storage backend refused or failed the write.
    """
    key = blob_key(prefix, extension)
    try:
        name = default_storage.save(key, ContentFile(content))
        url = default_storage.url(name)
    except Exception as e:
        logger.error(f"Upload of {key} failed: {e}")
        raise StorageUploadError() from e

    security_logger.info(f"BLOB_STORED: {name} ({len(content)} bytes)")
    return url
