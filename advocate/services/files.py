"""
Storage for uploaded document bytes.

Document records live in the database; the files themselves go to a
:class:`FileStore`. The local store keeps them in one directory under
generated names, so user-supplied names never reach the filesystem.
"""

import logging
import os
from typing import IO, Optional

from flask import current_app
from werkzeug.datastructures import FileStorage
from werkzeug.utils import safe_join

logger = logging.getLogger(__name__)


class StoredFileMissing(IOError):
    """There is nothing stored under that name."""


class FileStore(object):
    """Interface for document file storage."""

    def save(self, upload: FileStorage, name: str) -> int:
        """Store an uploaded file under ``name``; returns its size."""
        raise NotImplementedError('Implement in a child class')

    def open(self, name: str) -> IO[bytes]:
        """
        Open a stored file for reading.

        Raises
        ------
        :class:`StoredFileMissing`

        """
        raise NotImplementedError('Implement in a child class')

    def delete(self, name: str) -> None:
        """Remove a stored file, if it is there."""
        raise NotImplementedError('Implement in a child class')


class LocalFileStore(FileStore):
    """Keeps files in a directory on the local filesystem."""

    def __init__(self, root: str) -> None:
        self.root = root
        os.makedirs(root, exist_ok=True)

    def _path(self, name: str) -> str:
        path = safe_join(self.root, name)
        if path is None:
            raise StoredFileMissing(name)
        return path

    def save(self, upload: FileStorage, name: str) -> int:
        path = self._path(name)
        upload.save(path)
        logger.debug('Stored %s (%s)', name, upload.filename)
        return os.path.getsize(path)

    def open(self, name: str) -> IO[bytes]:
        try:
            return open(self._path(name), 'rb')
        except FileNotFoundError as e:
            raise StoredFileMissing(name) from e

    def delete(self, name: str) -> None:
        try:
            os.remove(self._path(name))
        except FileNotFoundError:
            logger.debug('Nothing to delete at %s', name)


def init_app(app: object = None) -> None:
    """Set default configuration parameters for an application instance."""
    config = app.config if app is not None else current_app.config
    config.setdefault('UPLOAD_FOLDER', 'uploads/documents')
    config.setdefault('MAX_FILE_SIZE', 50 * 1024 * 1024)
    config.setdefault('MAX_FILES_PER_UPLOAD', 10)


def get_store(app: object = None,
              root: Optional[str] = None) -> LocalFileStore:
    """Get a local file store from application config."""
    config = app.config if app is not None else current_app.config
    return LocalFileStore(root or config['UPLOAD_FOLDER'])


def get_file_store() -> FileStore:
    """Get the file store registered on the current application."""
    return current_app.extensions['advocate.file_store']
