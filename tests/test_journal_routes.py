"""Tests for the ``/api/journal`` routes."""

from datetime import datetime, timedelta

from pytz import UTC

from .helpers import AppTestCase


class JournalRoutesTestCase(AppTestCase):

    def setUp(self):
        super(JournalRoutesTestCase, self).setUp()
        self.alice = self.make_user('alice')
        self.bob = self.make_user('bob')
        self.headers = self.headers_for(self.alice)
        response = self.client.post('/api/journal', headers=self.headers,
                                    json={'title': 'First week',
                                          'content': 'Filed the complaint',
                                          'category': 'milestone',
                                          'tags': ['filing']})
        self.assertEqual(response.status_code, 201)
        self.entry = response.get_json()['entry']
        self.url = f'/api/journal/{self.entry["id"]}'


class TestEntries(JournalRoutesTestCase):

    def test_created(self):
        response = self.client.post('/api/journal', headers=self.headers,
                                    json={'title': 'x', 'content': 'y'})
        self.assertEqual(response.get_json()['message'],
                         'Journal entry created successfully')
        self.assertEqual(self.entry['category'], 'milestone')
        self.assertEqual(self.entry['tags'], ['filing'])

    def test_create_invalid(self):
        response = self.client.post('/api/journal', headers=self.headers,
                                    json={'mood': 'furious'})
        self.assertEqual(response.status_code, 400)
        fields = {e['field'] for e in response.get_json()['errors']}
        self.assertEqual(fields, {'title', 'content', 'mood'})

    def test_create_field_types(self):
        response = self.client.post('/api/journal', headers=self.headers,
                                    json={'title': 'x', 'content': 'y',
                                          'tags': 'filing',
                                          'isPrivate': 'no'})
        self.assertEqual(response.status_code, 400)
        fields = {e['field'] for e in response.get_json()['errors']}
        self.assertEqual(fields, {'tags', 'isPrivate'})

    def test_create_for_case(self):
        response = self.client.post('/api/cases', headers=self.headers, json={
            'title': 'A case', 'description': 'About it',
            'caseType': 'civil'})
        case_id = response.get_json()['case']['id']
        response = self.client.post('/api/journal', headers=self.headers,
                                    json={'title': 'x', 'content': 'y',
                                          'caseId': case_id})
        self.assertEqual(response.get_json()['entry']['caseId'], case_id)

        response = self.client.post('/api/journal',
                                    headers=self.headers_for(self.bob),
                                    json={'title': 'x', 'content': 'y',
                                          'caseId': case_id})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.get_json()['code'], 'INVALID_CASE')

    def test_get(self):
        response = self.client.get(self.url, headers=self.headers)
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.get_json()['entry']['content'],
                         'Filed the complaint')

    def test_not_found(self):
        response = self.client.get(self.url,
                                   headers=self.headers_for(self.bob))
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.get_json()['code'], 'ENTRY_NOT_FOUND')

    def test_list(self):
        response = self.client.get('/api/journal?category=milestone',
                                   headers=self.headers)
        self.assertEqual(response.status_code, 200)
        data = response.get_json()
        self.assertEqual(data['pagination']['totalRecords'], 1)
        self.assertEqual(data['entries'][0]['summary'],
                         'Filed the complaint')
        self.assertNotIn('content', data['entries'][0])

    def test_list_bad_filter(self):
        response = self.client.get('/api/journal?limit=500',
                                   headers=self.headers)
        self.assertEqual(response.status_code, 400)

    def test_update(self):
        response = self.client.put(self.url, headers=self.headers,
                                   json={'content': 'Filed and served'})
        self.assertEqual(response.status_code, 200)
        entry = response.get_json()['entry']
        self.assertEqual(entry['version'], 2)
        self.assertEqual(entry['editHistory'][0]['content'],
                         'Filed the complaint')

    def test_update_blank_title(self):
        response = self.client.put(self.url, headers=self.headers,
                                   json={'title': '   '})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.get_json()['errors'][0]['field'], 'title')

    def test_update_null_content(self):
        response = self.client.put(self.url, headers=self.headers,
                                   json={'content': None})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.get_json()['errors'],
                         [{'field': 'content',
                           'message': 'Must not be null'}])

    def test_delete(self):
        response = self.client.delete(self.url, headers=self.headers)
        self.assertEqual(response.status_code, 200)
        response = self.client.get(self.url, headers=self.headers)
        self.assertEqual(response.status_code, 404)

    def test_favorite(self):
        response = self.client.patch(f'{self.url}/favorite',
                                     headers=self.headers)
        self.assertEqual(response.get_json(), {
            'message': 'Journal entry added to favorites',
            'isFavorite': True})
        response = self.client.get('/api/journal?favorites=true',
                                   headers=self.headers)
        self.assertEqual(len(response.get_json()['entries']), 1)
        response = self.client.patch(f'{self.url}/favorite',
                                     headers=self.headers)
        self.assertEqual(response.get_json()['message'],
                         'Journal entry removed from favorites')

    def test_search(self):
        response = self.client.get('/api/journal/search/text?q=complaint',
                                   headers=self.headers)
        self.assertEqual(response.status_code, 200)
        data = response.get_json()
        self.assertEqual(data['searchQuery'], 'complaint')
        self.assertEqual(len(data['entries']), 1)

    def test_search_needs_query(self):
        response = self.client.get('/api/journal/search/text',
                                   headers=self.headers)
        self.assertEqual(response.status_code, 400)

    def test_stats(self):
        response = self.client.get('/api/journal/meta/stats',
                                   headers=self.headers)
        self.assertEqual(response.status_code, 200)
        data = response.get_json()
        self.assertEqual(data['totalEntries'], 1)
        self.assertEqual(data['totalWords'], 3)
        self.assertEqual(data['categoryBreakdown'], {'milestone': 1})

    def test_token_required(self):
        response = self.client.get('/api/journal')
        self.assertEqual(response.status_code, 401)


class TestReminders(JournalRoutesTestCase):

    def test_add_and_list_upcoming(self):
        due = (datetime.now(tz=UTC) + timedelta(days=3)).isoformat()
        response = self.client.post(f'{self.url}/reminders',
                                    headers=self.headers,
                                    json={'date': due,
                                          'message': 'Serve the defendant'})
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.get_json()['message'],
                         'Reminder added successfully')

        response = self.client.get('/api/journal/reminders/upcoming',
                                   headers=self.headers)
        self.assertEqual(response.status_code, 200)
        data = response.get_json()
        self.assertEqual(data['days'], 7)
        self.assertEqual([r['message'] for r in data['reminders']],
                         ['Serve the defendant'])

        response = self.client.get('/api/journal/reminders/upcoming?days=1',
                                   headers=self.headers)
        self.assertEqual(response.get_json()['reminders'], [])

    def test_invalid_reminder(self):
        response = self.client.post(f'{self.url}/reminders',
                                    headers=self.headers,
                                    json={'date': 'next tuesday'})
        self.assertEqual(response.status_code, 400)
        messages = {e['field']: e['message']
                    for e in response.get_json()['errors']}
        self.assertEqual(messages, {
            'date': 'Valid date is required',
            'message': 'Reminder message is required'})

    def test_days_out_of_range(self):
        response = self.client.get('/api/journal/reminders/upcoming?days=400',
                                   headers=self.headers)
        self.assertEqual(response.status_code, 400)

    def test_reminder_for_missing_entry(self):
        response = self.client.post('/api/journal/9999/reminders',
                                    headers=self.headers,
                                    json={'date': '2030-01-01',
                                          'message': 'x'})
        self.assertEqual(response.status_code, 404)


class TestUserStats(JournalRoutesTestCase):

    def test_counts_journal_entries(self):
        response = self.client.get(f'/api/users/{self.alice.user_id}/stats',
                                   headers=self.headers)
        stats = response.get_json()['stats']
        self.assertEqual(stats['journalEntries'], 1)
        self.assertEqual(stats['documents'], 0)
