"""Tests for :mod:`advocate.services.cases`."""

from datetime import datetime, timedelta

from pytz import UTC
from sqlalchemy.exc import IntegrityError

from advocate.services import cases, users

from .helpers import AppTestCase


def case_data(**extra):
    data = {'title': 'Smith v. Jones', 'description': 'Breach of contract',
            'caseType': 'civil'}
    data.update(extra)
    return data


class CasesTestCase(AppTestCase):

    def setUp(self):
        super(CasesTestCase, self).setUp()
        self.ctx = self.app.app_context()
        self.ctx.push()
        self.addCleanup(self.ctx.pop)
        self.owner = users.create_user('alice').user_id
        self.other = users.create_user('bob').user_id


class TestCreateCase(CasesTestCase):
    """Creating cases and numbering them."""

    def test_create(self):
        case = cases.create_case(self.owner, case_data(priority='high'))
        self.assertEqual(case['userId'], self.owner)
        self.assertEqual(case['title'], 'Smith v. Jones')
        self.assertEqual(case['priority'], 'high')
        self.assertEqual(case['status'], 'active')
        self.assertEqual(case['timeline'], [])
        year = datetime.now(tz=UTC).year
        self.assertEqual(case['caseNumber'], f'CASE-{year}-0001')

    def test_numbers_count_up_per_owner(self):
        first = cases.create_case(self.owner, case_data())
        second = cases.create_case(self.owner, case_data())
        theirs = cases.create_case(self.other, case_data())
        self.assertTrue(first['caseNumber'].endswith('-0001'))
        self.assertTrue(second['caseNumber'].endswith('-0002'))
        self.assertTrue(theirs['caseNumber'].endswith('-0001'))

    def test_number_after_delete(self):
        """Numbers already in use are skipped."""
        first = cases.create_case(self.owner, case_data())
        cases.create_case(self.owner, case_data())
        cases.delete_case(first['id'])
        third = cases.create_case(self.owner, case_data())
        self.assertTrue(third['caseNumber'].endswith('-0003'))

    def test_duplicate_number(self):
        cases.create_case(self.owner, case_data(caseNumber='X-1'))
        with self.assertRaises(cases.DuplicateCaseNumber):
            cases.create_case(self.owner, case_data(caseNumber='X-1'))

    def test_same_number_other_owner(self):
        cases.create_case(self.owner, case_data(caseNumber='X-1'))
        theirs = cases.create_case(self.other, case_data(caseNumber='X-1'))
        self.assertEqual(theirs['caseNumber'], 'X-1')


class TestQueries(CasesTestCase):

    def setUp(self):
        super(TestQueries, self).setUp()
        self.case = cases.create_case(self.owner, case_data())
        cases.create_case(self.owner, case_data(title='Doe estate',
                                                caseType='family',
                                                status='closed'))
        cases.create_case(self.other, case_data())

    def test_get_owned_case(self):
        self.assertEqual(cases.get_owned_case(self.case['id'], self.owner),
                         self.case)
        self.assertIsNone(cases.get_owned_case(self.case['id'], self.other))
        self.assertIsNone(cases.get_case('9999'))

    def test_list_only_own(self):
        found, pagination = cases.list_cases(self.owner)
        self.assertEqual(pagination['totalRecords'], 2)
        self.assertTrue(all(c['userId'] == self.owner for c in found))

    def test_filters(self):
        found, _ = cases.list_cases(self.owner, status='closed')
        self.assertEqual([c['title'] for c in found], ['Doe estate'])
        found, _ = cases.list_cases(self.owner, search='smith')
        self.assertEqual([c['id'] for c in found], [self.case['id']])
        found, _ = cases.list_cases(self.owner, case_type='family')
        self.assertEqual(len(found), 1)

    def test_sort(self):
        found, _ = cases.list_cases(self.owner, sort_by='title',
                                    sort_order='asc')
        self.assertEqual([c['title'] for c in found],
                         ['Doe estate', 'Smith v. Jones'])

    def test_count(self):
        self.assertEqual(cases.count_for_user(self.owner), 2)
        self.assertEqual(cases.count_for_user(self.other), 1)


class TestUpdateCase(CasesTestCase):

    def setUp(self):
        super(TestUpdateCase, self).setUp()
        self.case = cases.create_case(self.owner, case_data())

    def test_update(self):
        updated = cases.update_case(self.case['id'],
                                    {'status': 'on-hold', 'tags': ['x']})
        self.assertEqual(updated['status'], 'on-hold')
        self.assertEqual(updated['tags'], ['x'])
        self.assertEqual(updated['title'], 'Smith v. Jones')

    def test_update_to_taken_case_number(self):
        other = cases.create_case(self.owner, case_data(caseNumber='CV-1'))
        with self.assertRaises(cases.DuplicateCaseNumber):
            cases.update_case(self.case['id'],
                              {'caseNumber': other['caseNumber']})

    def test_other_integrity_failures_propagate(self):
        """Only a changed case number is reported as a duplicate."""
        with self.assertRaises(IntegrityError):
            cases.update_case(self.case['id'], {'title': None})

    def test_update_missing(self):
        with self.assertRaises(cases.NoSuchCase):
            cases.update_case('9999', {'status': 'closed'})

    def test_delete(self):
        cases.delete_case(self.case['id'])
        self.assertIsNone(cases.get_case(self.case['id']))


class TestTimeline(CasesTestCase):
    """Timeline events live on the case."""

    def setUp(self):
        super(TestTimeline, self).setUp()
        self.case = cases.create_case(self.owner, case_data())
        updated = cases.add_timeline_event(self.case['id'], {
            'title': 'Filing', 'description': 'File the complaint',
            'date': '2030-01-15', 'type': 'filing'})
        self.event = updated['timeline'][0]

    def test_add(self):
        self.assertEqual(self.event['title'], 'Filing')
        self.assertEqual(self.event['status'], 'upcoming')
        self.assertEqual(self.event['priority'], 'medium')
        self.assertTrue(self.event['date'].startswith('2030-01-15T00:00:00'))
        self.assertTrue(self.event['id'])

    def test_update(self):
        event = cases.update_timeline_event(self.case['id'],
                                            self.event['id'],
                                            {'status': 'completed'})
        self.assertEqual(event['status'], 'completed')
        self.assertEqual(event['title'], 'Filing')
        stored = cases.get_case(self.case['id'])['timeline'][0]
        self.assertEqual(stored['status'], 'completed')

    def test_update_missing(self):
        with self.assertRaises(cases.NoSuchEvent):
            cases.update_timeline_event(self.case['id'], 'nope', {})

    def test_delete(self):
        cases.delete_timeline_event(self.case['id'], self.event['id'])
        self.assertEqual(cases.get_case(self.case['id'])['timeline'], [])
        with self.assertRaises(cases.NoSuchEvent):
            cases.delete_timeline_event(self.case['id'], self.event['id'])

    def test_add_note(self):
        note = cases.add_note(self.case['id'], 'Call the witness')
        self.assertEqual(note['title'], 'Untitled Note')
        self.assertEqual(cases.get_case(self.case['id'])['notes'], [note])


class TestUpcomingDeadlines(CasesTestCase):
    """Incomplete deadlines within the horizon, nothing else."""

    def test_upcoming(self):
        now = datetime(2030, 1, 1, tzinfo=UTC)
        case = {'deadlines': [
            {'title': 'soon', 'date': '2030-01-10T00:00:00Z'},
            {'title': 'done', 'date': '2030-01-10T00:00:00Z',
             'completed': True},
            {'title': 'later', 'date': '2030-03-01T00:00:00Z'},
            {'title': 'past', 'date': '2029-12-01T00:00:00Z'},
            {'title': 'undated'},
            {'title': 'garbled', 'date': 'someday'},
        ]}
        found = cases.upcoming_deadlines(case, days=30, now=now)
        self.assertEqual([d['title'] for d in found], ['soon'])
        found = cases.upcoming_deadlines(case, days=90, now=now)
        self.assertEqual([d['title'] for d in found], ['soon', 'later'])

    def test_malformed_entries_skipped(self):
        now = datetime(2030, 1, 1, tzinfo=UTC)
        case = {'deadlines': ['soon', None,
                              {'title': 'soon', 'date': '2030-01-10'}]}
        found = cases.upcoming_deadlines(case, days=30, now=now)
        self.assertEqual([d['title'] for d in found], ['soon'])
        self.assertEqual(cases.upcoming_deadlines({'deadlines': 'soon'},
                                                  now=now), [])

    def test_naive_dates_are_utc(self):
        now = datetime(2030, 1, 1, tzinfo=UTC)
        case = {'deadlines': [{'title': 'soon', 'date': '2030-01-02'}]}
        self.assertEqual(len(cases.upcoming_deadlines(case, 7, now=now)), 1)
        self.assertEqual(cases.upcoming_deadlines(case, 0, now=now), [])

    def test_default_now(self):
        soon = (datetime.now(tz=UTC) + timedelta(days=1)).isoformat()
        case = {'deadlines': [{'title': 'soon', 'date': soon}]}
        self.assertEqual(len(cases.upcoming_deadlines(case)), 1)
