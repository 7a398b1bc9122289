"""Tests for :mod:`advocate.factory`."""

from unittest import TestCase, mock

from flask import Flask

from advocate import factory
from advocate.auth.ratelimit import InMemoryRateWindowStore
from advocate.services.database import DatabaseUnavailable

from .helpers import AppTestCase


class TestApp(AppTestCase):
    """Health, root and error rendering."""

    def test_health(self):
        response = self.client.get('/api/health')
        self.assertEqual(response.status_code, 200)
        data = response.get_json()
        self.assertEqual(data['status'], 'OK')
        self.assertGreaterEqual(data['uptime'], 0)
        self.assertIn('T', data['timestamp'])

    def test_root(self):
        response = self.client.get('/')
        self.assertEqual(response.get_json()['version'], '1.0.0')

    def test_unknown_route(self):
        response = self.client.get('/api/nowhere')
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.get_json(), {'message': 'Route not found',
                                               'code': 'NOT_FOUND'})

    def test_non_numeric_case_id(self):
        response = self.client.get('/api/cases/abc')
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.get_json()['code'], 'NOT_FOUND')

    def test_method_not_allowed(self):
        response = self.client.delete('/api/health')
        self.assertEqual(response.status_code, 405)
        self.assertEqual(response.get_json()['code'], 'METHOD_NOT_ALLOWED')

    def test_unexpected_error(self):
        """Details of unexpected errors are shown outside production."""
        def boom():
            raise RuntimeError('kaboom')
        self.app.add_url_rule('/boom', 'boom', boom)
        response = self.client.get('/boom')
        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.get_json(), {
            'message': 'Internal server error', 'code': 'INTERNAL_ERROR',
            'error': 'kaboom'})

    def test_verification_failure_detail(self):
        user = self.make_user()
        with mock.patch('advocate.auth.users.find_by_id') as mock_find:
            mock_find.side_effect = DatabaseUnavailable('db is down')
            response = self.client.get('/api/auth/profile',
                                       headers=self.headers_for(user))
        self.assertEqual(response.status_code, 500)
        data = response.get_json()
        self.assertEqual(data['code'], 'TOKEN_VERIFICATION_FAILED')
        self.assertEqual(data['error'], 'db is down')

    def test_cors(self):
        response = self.client.get('/api/health',
                                   headers={'Origin': 'http://localhost:3000'})
        self.assertIn('Access-Control-Allow-Origin', response.headers)


class TestProduction(AppTestCase):
    """Production responses never include internal error details."""

    environ = {'ENVIRONMENT': 'production',
               'FRONTEND_URL': 'https://advocate.example.org'}

    def test_unexpected_error(self):
        def boom():
            raise RuntimeError('kaboom')
        self.app.add_url_rule('/boom', 'boom', boom)
        response = self.client.get('/boom')
        self.assertEqual(response.status_code, 500)
        self.assertNotIn('error', response.get_json())

    def test_verification_failure_detail(self):
        user = self.make_user()
        with mock.patch('advocate.auth.users.find_by_id') as mock_find:
            mock_find.side_effect = DatabaseUnavailable('db is down')
            response = self.client.get('/api/auth/profile',
                                       headers=self.headers_for(user))
        self.assertEqual(response.status_code, 500)
        self.assertNotIn('error', response.get_json())

    def test_cors_origin(self):
        response = self.client.get(
            '/api/health', headers={'Origin': 'https://advocate.example.org'})
        self.assertEqual(response.headers['Access-Control-Allow-Origin'],
                         'https://advocate.example.org')


class TestClientRateLimit(AppTestCase):
    """Every request counts against the client address."""

    environ = {'GLOBAL_RATE_LIMIT_MAX': '2', 'GLOBAL_RATE_LIMIT_WINDOW': '60'}

    def test_limit(self):
        self.assertEqual(self.client.get('/api/health').status_code, 200)
        self.assertEqual(self.client.get('/').status_code, 200)
        response = self.client.get('/api/health')
        self.assertEqual(response.status_code, 429)
        self.assertEqual(response.get_json()['message'],
                         factory.CLIENT_LIMIT_MESSAGE)
        self.assertIn('Retry-After', response.headers)

    def test_addresses_counted_separately(self):
        for _ in range(3):
            self.client.get('/api/health')
        response = self.client.get(
            '/api/health', environ_base={'REMOTE_ADDR': '10.0.0.9'})
        self.assertEqual(response.status_code, 200)


class TestCreateRateStore(TestCase):

    def test_memory(self):
        app = Flask('test')
        app.config['RATE_LIMIT_BACKEND'] = 'memory'
        self.assertIsInstance(factory.create_rate_store(app),
                              InMemoryRateWindowStore)

    @mock.patch('advocate.factory.rate_windows')
    def test_redis(self, mock_rate_windows):
        app = Flask('test')
        app.config['RATE_LIMIT_BACKEND'] = 'redis'
        store = factory.create_rate_store(app)
        mock_rate_windows.get_store.assert_called_once_with(app)
        self.assertIs(store, mock_rate_windows.get_store.return_value)

    def test_unknown(self):
        app = Flask('test')
        app.config['RATE_LIMIT_BACKEND'] = 'carrier-pigeon'
        with self.assertRaises(ValueError):
            factory.create_rate_store(app)
