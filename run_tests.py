#!/usr/bin/env python3
"""
Test runner for the Wi-Fi router controller
Run this script to execute the tests in the tests directory.
An optional argument narrows the run to matching test files, e.g. 'test_firewall*.py'.
"""
import unittest
import sys

if __name__ == "__main__":
    pattern = sys.argv[1] if len(sys.argv) > 1 else 'test*.py'
    test_suite = unittest.defaultTestLoader.discover('tests', pattern=pattern)
    test_runner = unittest.TextTestRunner(verbosity=2)
    result = test_runner.run(test_suite)

    # Non-zero exit code on failure, for CI integration
    sys.exit(0 if result.wasSuccessful() else 1)
