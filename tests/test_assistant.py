"""Tests for :mod:`advocate.services.assistant`."""

from unittest import TestCase

from advocate.services import assistant


class TestGenerate(TestCase):
    """Replies are picked by keyword."""

    def test_keyword_reply(self):
        reply = assistant.generate([{'content': 'Is my Contract valid?'}])
        self.assertTrue(reply.content.startswith(assistant.PREAMBLE))
        self.assertIn('contracts', reply.content)

    def test_fallback(self):
        reply = assistant.generate([{'content': 'hello'}])
        self.assertTrue(reply.content.endswith(assistant.FALLBACK))

    def test_nothing_to_reply_to(self):
        with self.assertRaises(assistant.AssistantUnavailable):
            assistant.generate([])

    def test_settings_defaults(self):
        reply = assistant.generate([{'content': 'hi'}])
        self.assertEqual(reply.metadata['model'], assistant.DEFAULT_MODEL)
        self.assertEqual(reply.metadata['temperature'],
                         assistant.DEFAULT_TEMPERATURE)

    def test_zero_temperature_kept(self):
        reply = assistant.generate([{'content': 'hi'}],
                                   {'temperature': 0, 'aiModel': 'local'})
        self.assertEqual(reply.metadata['temperature'], 0)
        self.assertEqual(reply.metadata['model'], 'local')
