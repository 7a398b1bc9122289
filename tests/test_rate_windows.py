"""Tests for :mod:`advocate.services.rate_windows`."""

from unittest import TestCase, mock

from redis.exceptions import ConnectionError

from advocate.services import rate_windows


class TestRedisRateWindowStore(TestCase):
    """Rate windows are kept in Redis sorted sets."""

    @mock.patch(f'{rate_windows.__name__}.redis')
    def setUp(self, mock_redis):
        mock_redis.exceptions.ConnectionError = ConnectionError
        self.mock_redis = mock_redis
        self.connection = mock.MagicMock()
        mock_redis.StrictRedis.return_value = self.connection
        self.store = rate_windows.RedisRateWindowStore('localhost', 6379, 0,
                                                       ttl=60)

    def test_connect(self):
        self.mock_redis.StrictRedis.assert_called_once_with(
            host='localhost', port=6379, db=0)

    def test_get(self):
        """Scores are the timestamps, oldest first."""
        self.connection.zrange.return_value = [(b'0:1.0', 1.0),
                                               (b'1:2.5', 2.5)]
        self.assertEqual(self.store.get('user:1'), [1.0, 2.5])
        self.connection.zrange.assert_called_once_with(
            'ratewindow:user:1', 0, -1, withscores=True)

    def test_put(self):
        """Replacing a window rewrites the set and refreshes its expiry."""
        pipe = self.connection.pipeline.return_value
        self.store.put('user:1', [1.0, 1.0])
        pipe.delete.assert_called_once_with('ratewindow:user:1')
        pipe.zadd.assert_called_once_with('ratewindow:user:1',
                                          {'0:1.0': 1.0, '1:1.0': 1.0})
        pipe.expire.assert_called_once_with('ratewindow:user:1', 60)
        self.assertEqual(pipe.execute.call_count, 1)

    def test_put_expiry_follows_window(self):
        """Windows longer than the default are kept for their full length."""
        pipe = self.connection.pipeline.return_value
        self.store.put('ip:127.0.0.1', [1.0], ttl=899.5)
        pipe.expire.assert_called_once_with('ratewindow:ip:127.0.0.1', 900)

    def test_put_empty(self):
        pipe = self.connection.pipeline.return_value
        self.store.put('user:1', [])
        pipe.delete.assert_called_once_with('ratewindow:user:1')
        self.assertEqual(pipe.zadd.call_count, 0)

    def test_prune(self):
        self.connection.zrange.return_value = [(b'2:3.0', 3.0)]
        self.assertEqual(self.store.prune('user:1', 2.0), [3.0])
        self.connection.zremrangebyscore.assert_called_once_with(
            'ratewindow:user:1', '-inf', 2.0)

    def test_lock(self):
        """Checks on a key are serialized by a Redis lock."""
        lock = self.store.lock('user:1')
        self.connection.lock.assert_called_once_with(
            'ratewindow:user:1:lock', timeout=5.0, blocking_timeout=5.0)
        self.assertIs(lock, self.connection.lock.return_value)

    def test_connection_failed(self):
        """:class:`.RateWindowStoreUnavailable` when Redis is unreachable."""
        self.connection.zrange.side_effect = ConnectionError
        with self.assertRaises(rate_windows.RateWindowStoreUnavailable):
            self.store.get('user:1')
        self.connection.pipeline.return_value.execute.side_effect = \
            ConnectionError
        with self.assertRaises(rate_windows.RateWindowStoreUnavailable):
            self.store.put('user:1', [1.0])


class TestGetStore(TestCase):

    @mock.patch(f'{rate_windows.__name__}.redis')
    def test_get_store_from_config(self, mock_redis):
        app = mock.MagicMock(config={'REDIS_HOST': 'redis.local',
                                     'REDIS_PORT': '6380',
                                     'REDIS_DATABASE': '2',
                                     'USER_RATE_LIMIT_WINDOW': 120})
        store = rate_windows.get_store(app)
        mock_redis.StrictRedis.assert_called_once_with(host='redis.local',
                                                       port=6380, db=2)
        self.assertEqual(store._ttl, 120)

    def test_init_app_defaults(self):
        app = mock.MagicMock(config={})
        rate_windows.init_app(app)
        self.assertEqual(app.config['REDIS_HOST'], 'localhost')
        self.assertEqual(app.config['REDIS_PORT'], '6379')
