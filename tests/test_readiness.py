"""
Tests for the readiness wait
"""
import unittest
import os
import sys

# Add parent directory to path to import our modules
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from pyrouter.readiness import wait_until


class FakeClock(object):
    """Clock that only moves when sleep is called."""

    def __init__(self):
        self.now = 0.0
        self.sleeps = []

    def __call__(self):
        return self.now

    def sleep(self, seconds):
        self.sleeps.append(seconds)
        self.now += seconds


class TestWaitUntil(unittest.TestCase):

    def setUp(self):
        self.clock = FakeClock()

    def wait(self, check, **options):
        return wait_until(check, sleep=self.clock.sleep, clock=self.clock, **options)

    def test_ready_immediately(self):
        result = self.wait(lambda: True)
        self.assertTrue(result.ready)
        self.assertEqual(result.attempts, 1)
        self.assertEqual(self.clock.sleeps, [])

    def test_ready_after_retries(self):
        answers = iter([False, False, True])
        result = self.wait(lambda: next(answers), timeout=8, interval=1)
        self.assertTrue(result.ready)
        self.assertEqual(result.attempts, 3)
        self.assertEqual(self.clock.sleeps, [1, 1])

    def test_timeout_with_fixed_interval(self):
        result = self.wait(lambda: False, timeout=8, interval=1)
        self.assertFalse(result.ready)
        self.assertEqual(result.attempts, 9)
        self.assertEqual(result.elapsed, 8)

    def test_backoff_is_capped(self):
        result = self.wait(lambda: False, timeout=20, interval=1, backoff=2, max_interval=5)
        self.assertFalse(result.ready)
        self.assertEqual(self.clock.sleeps, [1, 2, 4, 5, 5, 3])

    def test_interval_above_cap_is_kept(self):
        result = self.wait(lambda: False, timeout=25, interval=10, max_interval=5)
        self.assertFalse(result.ready)
        self.assertEqual(self.clock.sleeps, [10, 10, 5])

    def test_zero_timeout_checks_once(self):
        result = self.wait(lambda: False, timeout=0)
        self.assertFalse(result.ready)
        self.assertEqual(result.attempts, 1)

    def test_on_retry_reports_attempts(self):
        calls = []
        self.wait(lambda: False, timeout=2, interval=1, on_retry=lambda attempt, delay: calls.append((attempt, delay)))
        self.assertEqual(calls, [(1, 1), (2, 1)])

    def test_invalid_options(self):
        with self.assertRaises(ValueError):
            self.wait(lambda: True, interval=0)
        with self.assertRaises(ValueError):
            self.wait(lambda: True, backoff=0.5)


if __name__ == '__main__':
    unittest.main()
