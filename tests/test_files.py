"""Tests for :mod:`advocate.services.files`."""

import io
import os
import shutil
import tempfile
from unittest import TestCase

from werkzeug.datastructures import FileStorage

from advocate.services import files


class TestLocalFileStore(TestCase):

    def setUp(self):
        self.root = tempfile.mkdtemp()
        self.addCleanup(shutil.rmtree, self.root, ignore_errors=True)
        self.store = files.LocalFileStore(os.path.join(self.root, 'docs'))

    def _upload(self, content=b'%PDF-1.4 brief', name='brief.pdf'):
        return FileStorage(stream=io.BytesIO(content), filename=name,
                           content_type='application/pdf')

    def test_root_created(self):
        self.assertTrue(os.path.isdir(self.store.root))

    def test_save_and_open(self):
        size = self.store.save(self._upload(), 'doc_1.pdf')
        self.assertEqual(size, len(b'%PDF-1.4 brief'))
        with self.store.open('doc_1.pdf') as stream:
            self.assertEqual(stream.read(), b'%PDF-1.4 brief')

    def test_open_missing(self):
        with self.assertRaises(files.StoredFileMissing):
            self.store.open('doc_2.pdf')

    def test_names_stay_inside_root(self):
        with self.assertRaises(files.StoredFileMissing):
            self.store.open('../outside.pdf')

    def test_delete(self):
        self.store.save(self._upload(), 'doc_1.pdf')
        self.store.delete('doc_1.pdf')
        with self.assertRaises(files.StoredFileMissing):
            self.store.open('doc_1.pdf')
        self.store.delete('doc_1.pdf')
