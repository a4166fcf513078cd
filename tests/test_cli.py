"""
Tests for the command-line interface
"""
import unittest
import os
import sys
import tempfile
from unittest.mock import patch
from click.testing import CliRunner

# Add parent directory to path to import our modules
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from pyrouter.cli import cli

SAVED = """ETH_IF="eth0"
WIFI_IF="wlan0"
SSID="MonWifi"
PSK="ChangeMe1234"
WIFI_IP="192.168.50.1/24"
DHCP_START="192.168.50.10"
DHCP_END="192.168.50.50"
"""


class TestCli(unittest.TestCase):
    """Test cases for action dispatch and exit codes"""

    def setUp(self):
        self.runner = CliRunner()
        self.tmp = tempfile.TemporaryDirectory()
        self.config_path = os.path.join(self.tmp.name, 'router.conf')

    def tearDown(self):
        self.tmp.cleanup()

    def write_saved(self):
        with open(self.config_path, 'w') as f:
            f.write(SAVED)

    def invoke(self, *args):
        return self.runner.invoke(cli, ['--config', self.config_path] + list(args))

    @patch('pyrouter.cli.load_config')
    @patch('pyrouter.cli.start_router')
    @patch('pyrouter.cli.stop_router')
    @patch('pyrouter.cli.show_status')
    @patch('pyrouter.cli.configure_interactive')
    @patch('os.geteuid', return_value=1000)
    def test_requires_root(self, mock_geteuid, *mocks):
        for action in ('start', 'stop', 'status', 'interactive', 'bogus'):
            result = self.invoke(action)
            self.assertEqual(result.exit_code, 1, action)
        result = self.invoke()
        self.assertEqual(result.exit_code, 1)
        for mock in mocks:
            mock.assert_not_called()
        self.assertFalse(os.path.exists(self.config_path))

    @patch('os.geteuid', return_value=0)
    def test_unknown_action(self, mock_geteuid):
        result = self.invoke('restart')
        self.assertEqual(result.exit_code, 1)
        self.assertIn("Usage: router.py {start|stop|status|interactive}", result.output)

    @patch('pyrouter.cli.configure_interactive')
    @patch('os.geteuid', return_value=0)
    def test_defaults_to_interactive(self, mock_geteuid, mock_interactive):
        result = self.invoke()
        self.assertEqual(result.exit_code, 0, result.output)
        mock_interactive.assert_called_once()
        config, paths = mock_interactive.call_args[0]
        self.assertEqual(paths['ROUTER_CONF'], self.config_path)

    @patch('pyrouter.cli.start_router')
    @patch('os.geteuid', return_value=0)
    def test_start_passes_loaded_config(self, mock_geteuid, mock_start):
        self.write_saved()
        result = self.invoke('start', '--ap-timeout', '3', '--ap-backoff', '2')
        self.assertEqual(result.exit_code, 0, result.output)
        config, paths = mock_start.call_args[0]
        self.assertEqual(config['WIFI_IF'], 'wlan0')
        self.assertEqual(mock_start.call_args[1]['ap_wait'],
                         {'timeout': 3.0, 'interval': 1.0, 'backoff': 2.0, 'max_interval': 5.0})

    @patch('pyrouter.cli.start_router')
    @patch('os.geteuid', return_value=0)
    def test_start_passes_max_interval(self, mock_geteuid, mock_start):
        self.write_saved()
        result = self.invoke('start', '--ap-interval', '10', '--ap-max-interval', '30')
        self.assertEqual(result.exit_code, 0, result.output)
        ap_wait = mock_start.call_args[1]['ap_wait']
        self.assertEqual(ap_wait['interval'], 10.0)
        self.assertEqual(ap_wait['max_interval'], 30.0)

    @patch('pyrouter.cli.collect_config')
    @patch('pyrouter.cli.start_router')
    @patch('os.geteuid', return_value=0)
    def test_start_without_config_prompts(self, mock_geteuid, mock_start, mock_collect):
        mock_collect.return_value = {'ETH_IF': 'eth0', 'WIFI_IF': 'wlan0'}
        result = self.invoke('start')
        self.assertEqual(result.exit_code, 0, result.output)
        mock_collect.assert_called_once()
        self.assertEqual(mock_start.call_args[0][0], mock_collect.return_value)

    @patch('os.geteuid', return_value=0)
    def test_start_rejects_bad_backoff(self, mock_geteuid):
        self.write_saved()
        result = self.invoke('start', '--ap-backoff', '0.5')
        self.assertNotEqual(result.exit_code, 0)

    @patch('pyrouter.firewall.run_command')
    @patch('pyrouter.services.run_command')
    @patch('pyrouter.network.run_command')
    @patch('os.geteuid', return_value=0)
    def test_stop_without_config(self, mock_geteuid, *run_mocks):
        result = self.invoke('stop')
        self.assertEqual(result.exit_code, 2)
        for mock in run_mocks:
            mock.assert_not_called()

    @patch('os.geteuid', return_value=0)
    def test_status_without_config(self, mock_geteuid):
        result = self.invoke('status')
        self.assertEqual(result.exit_code, 2)

    @patch('pyrouter.cli.stop_router')
    @patch('os.geteuid', return_value=0)
    def test_stop_reset_policy_flag(self, mock_geteuid, mock_stop):
        self.write_saved()
        result = self.invoke('stop', '--reset-forward-policy')
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertTrue(mock_stop.call_args[1]['reset_policy'])

    @patch('pyrouter.cli.show_status')
    @patch('os.geteuid', return_value=0)
    def test_status(self, mock_geteuid, mock_status):
        self.write_saved()
        result = self.invoke('status')
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertEqual(mock_status.call_args[0][0]['ETH_IF'], 'eth0')


if __name__ == '__main__':
    unittest.main()
