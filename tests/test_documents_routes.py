"""Tests for the ``/api/documents`` routes."""

import io
import os

from advocate.services import documents

from .helpers import AppTestCase

PDF = b'%PDF-1.4 motion to dismiss'


class DocumentRoutesTestCase(AppTestCase):

    def setUp(self):
        super(DocumentRoutesTestCase, self).setUp()
        self.alice = self.make_user('alice')
        self.bob = self.make_user('bob')
        self.headers = self.headers_for(self.alice)

    def upload(self, *uploads, headers=None, **fields):
        data = dict(fields)
        data['documents'] = [(io.BytesIO(content), name)
                             for content, name in uploads]
        return self.client.post('/api/documents/upload',
                                headers=headers or self.headers, data=data,
                                content_type='multipart/form-data')

    def upload_one(self, **fields):
        response = self.upload((PDF, 'motion.pdf'), **fields)
        self.assertEqual(response.status_code, 201)
        return response.get_json()['documents'][0]


class TestUpload(DocumentRoutesTestCase):

    def test_upload(self):
        response = self.upload((PDF, 'motion.pdf'), (b'notes', 'notes.txt'),
                               category='motion', tags=['draft'])
        self.assertEqual(response.status_code, 201)
        data = response.get_json()
        self.assertEqual(data['message'], '2 document(s) uploaded successfully')
        first, second = data['documents']
        self.assertEqual(first['title'], 'motion.pdf')
        self.assertEqual(first['fileType'], 'pdf')
        self.assertEqual(first['fileSize'], len(PDF))
        self.assertEqual(first['category'], 'motion')
        self.assertEqual(first['tags'], ['draft'])
        self.assertEqual(first['status'], 'uploaded')
        self.assertEqual(second['fileType'], 'txt')
        self.assertTrue(first['filename'].startswith('doc_'))
        self.assertTrue(first['filename'].endswith('.pdf'))
        self.assertTrue(os.path.exists(
            os.path.join(self.upload_folder, first['filename'])))

    def test_title_applies_to_upload(self):
        document = self.upload_one(title='Motion to dismiss')
        self.assertEqual(document['title'], 'Motion to dismiss')
        self.assertEqual(document['originalName'], 'motion.pdf')

    def test_no_files(self):
        response = self.client.post('/api/documents/upload',
                                    headers=self.headers, data={},
                                    content_type='multipart/form-data')
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.get_json()['code'], 'NO_FILES')

    def test_file_type_not_allowed(self):
        response = self.upload((PDF, 'motion.pdf'), (b'MZ', 'tool.exe'))
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.get_json()['code'], 'INVALID_FILE_TYPE')
        self.assertEqual(os.listdir(self.upload_folder), [])

    def test_too_many_files(self):
        response = self.upload(*[(b'x', f'{i}.txt') for i in range(11)])
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.get_json()['code'], 'TOO_MANY_FILES')
        self.assertEqual(response.get_json()['maxFiles'], 10)

    def test_unexpected_field(self):
        response = self.client.post(
            '/api/documents/upload', headers=self.headers,
            data={'avatar': (io.BytesIO(PDF), 'motion.pdf')},
            content_type='multipart/form-data')
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.get_json()['code'], 'UNEXPECTED_FILE')

    def test_bad_category(self):
        response = self.upload((PDF, 'motion.pdf'), category='poetry')
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.get_json()['code'], 'VALIDATION_FAILED')

    def test_case_must_be_owned(self):
        response = self.client.post('/api/cases', headers=self.headers, json={
            'title': 'A case', 'description': 'About it',
            'caseType': 'civil'})
        case_id = response.get_json()['case']['id']
        document = self.upload_one(caseId=case_id)
        self.assertEqual(document['caseId'], case_id)

        response = self.upload((PDF, 'motion.pdf'), caseId=case_id,
                               headers=self.headers_for(self.bob))
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.get_json()['code'], 'INVALID_CASE')


class TestFileSizeLimit(DocumentRoutesTestCase):

    environ = {'MAX_FILE_SIZE': '10'}

    def test_too_large(self):
        response = self.upload((PDF, 'motion.pdf'))
        self.assertEqual(response.status_code, 400)
        data = response.get_json()
        self.assertEqual(data['code'], 'FILE_TOO_LARGE')
        self.assertEqual(os.listdir(self.upload_folder), [])


class TestDocuments(DocumentRoutesTestCase):

    def setUp(self):
        super(TestDocuments, self).setUp()
        self.document = self.upload_one(category='motion',
                                        description='Draft for review')
        self.url = f'/api/documents/{self.document["id"]}'

    def test_get(self):
        response = self.client.get(self.url, headers=self.headers)
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.get_json()['document']['description'],
                         'Draft for review')

    def test_not_found(self):
        response = self.client.get(self.url,
                                   headers=self.headers_for(self.bob))
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.get_json()['code'], 'DOCUMENT_NOT_FOUND')

    def test_list(self):
        self.upload((b'notes', 'notes.txt'))
        response = self.client.get('/api/documents?fileType=pdf',
                                   headers=self.headers)
        self.assertEqual(response.status_code, 200)
        data = response.get_json()
        self.assertEqual([d['id'] for d in data['documents']],
                         [self.document['id']])
        response = self.client.get('/api/documents', headers=self.headers)
        self.assertEqual(response.get_json()['pagination']['totalRecords'], 2)

    def test_update(self):
        response = self.client.put(self.url, headers=self.headers,
                                   json={'title': 'Final motion',
                                         'category': 'pleading',
                                         'tags': ['final']})
        self.assertEqual(response.status_code, 200)
        document = response.get_json()['document']
        self.assertEqual(document['title'], 'Final motion')
        self.assertEqual(document['category'], 'pleading')
        self.assertEqual(document['tags'], ['final'])

    def test_update_invalid(self):
        response = self.client.put(self.url, headers=self.headers,
                                   json={'category': 'poetry'})
        self.assertEqual(response.status_code, 400)
        response = self.client.put(self.url, headers=self.headers,
                                   json={'tags': 'final'})
        self.assertEqual(response.status_code, 400)
        response = self.client.put(self.url, headers=self.headers,
                                   json={'title': '  '})
        self.assertEqual(response.status_code, 400)

    def test_delete(self):
        response = self.client.delete(self.url, headers=self.headers)
        self.assertEqual(response.status_code, 200)
        response = self.client.get(self.url, headers=self.headers)
        self.assertEqual(response.status_code, 404)

    def test_download(self):
        response = self.client.get(f'{self.url}/download',
                                   headers=self.headers)
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data, PDF)
        self.assertIn('attachment', response.headers['Content-Disposition'])
        self.assertIn('motion.pdf', response.headers['Content-Disposition'])
        response.close()

        response = self.client.get(self.url, headers=self.headers)
        self.assertEqual(response.get_json()['document']['downloadCount'], 1)

    def test_download_missing_file(self):
        os.remove(os.path.join(self.upload_folder, self.document['filename']))
        response = self.client.get(f'{self.url}/download',
                                   headers=self.headers)
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.get_json()['code'], 'FILE_NOT_FOUND')

    def test_annotation(self):
        response = self.client.post(f'{self.url}/annotations',
                                    headers=self.headers,
                                    json={'type': 'highlight', 'page': 2,
                                          'position': {'x': 10, 'y': 20},
                                          'content': 'Key argument',
                                          'color': 'yellow'})
        self.assertEqual(response.status_code, 201)
        data = response.get_json()
        self.assertEqual(data['message'], 'Annotation added successfully')
        annotation = data['document']['annotations'][0]
        self.assertEqual(annotation['type'], 'highlight')
        self.assertEqual(annotation['page'], 2)
        self.assertEqual(annotation['position'], {'x': 10, 'y': 20})

    def test_annotation_invalid(self):
        response = self.client.post(f'{self.url}/annotations',
                                    headers=self.headers,
                                    json={'type': 'doodle', 'page': 0})
        self.assertEqual(response.status_code, 400)
        fields = {e['field'] for e in response.get_json()['errors']}
        self.assertEqual(fields, {'type', 'page'})

    def test_search(self):
        response = self.client.get('/api/documents/search/text?q=review',
                                   headers=self.headers)
        self.assertEqual(response.status_code, 200)
        self.assertEqual(len(response.get_json()['documents']), 1)
        response = self.client.get('/api/documents/search/text?q=review',
                                   headers=self.headers_for(self.bob))
        self.assertEqual(response.get_json()['documents'], [])

    def test_categories(self):
        self.upload((b'notes', 'notes.txt'), category='evidence')
        response = self.client.get('/api/documents/meta/categories',
                                   headers=self.headers)
        self.assertEqual(response.get_json()['categories'],
                         ['evidence', 'motion'])

    def test_stats(self):
        self.upload((b'notes', 'notes.txt'))
        response = self.client.get('/api/documents/meta/stats',
                                   headers=self.headers)
        data = response.get_json()
        self.assertEqual(data['totalDocuments'], 2)
        self.assertEqual(data['totalSize'], len(PDF) + 5)
        self.assertEqual(data['categoryBreakdown'],
                         {'motion': 1, 'other': 1})
        self.assertEqual(data['fileTypeBreakdown'], {'pdf': 1, 'txt': 1})

    def test_user_stats(self):
        response = self.client.get(f'/api/users/{self.alice.user_id}/stats',
                                   headers=self.headers)
        self.assertEqual(response.get_json()['stats']['documents'], 1)


class TestFileTypes(DocumentRoutesTestCase):

    def test_classification(self):
        self.assertEqual(documents.file_type('Scan.JPEG'), 'jpeg')
        self.assertEqual(documents.file_type('archive.zip'), 'other')

    def test_allowed_by_mime_type(self):
        self.assertTrue(documents.is_allowed('memo', 'text/plain'))
        self.assertFalse(documents.is_allowed('memo.zip',
                                              'application/zip'))
