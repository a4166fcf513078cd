"""
Configuration handling for the Wi-Fi router controller
"""
import os
import ipaddress
from datetime import datetime
from .utils import log, warn, warn_continue

CONFIG_KEYS = ('ETH_IF', 'WIFI_IF', 'SSID', 'PSK', 'WIFI_IP', 'DHCP_START', 'DHCP_END')

DEFAULTS = {
    'SSID': 'MonWifi',
    'PSK': 'ChangeMe1234',
    'WIFI_IP': '192.168.50.1/24',
    'DHCP_START': '192.168.50.10',
    'DHCP_END': '192.168.50.50',
}

DEFAULT_PREFIX = '24'

DEFAULT_PATHS = {
    'ROUTER_CONF': '/etc/router.conf',
    'HOSTAPD_CONF': '/etc/hostapd/hostapd.conf',
    'DNSMASQ_CONF': '/etc/dnsmasq.d/router.conf',
    'HOSTAPD_DEFAULTS': '/etc/default/hostapd',
    'IP_FORWARD': '/proc/sys/net/ipv4/ip_forward',
}


def default_paths(**overrides):
    """Return the file locations used by the router, with optional overrides."""
    paths = dict(DEFAULT_PATHS)
    for key, value in overrides.items():
        if value:
            paths[key] = value
    return paths


def empty_config():
    return {key: '' for key in CONFIG_KEYS}


def load_config(config_path):
    """
    Load the saved router parameters.
    Returns a dictionary with every key present; unset values are empty strings.
    """
    config = empty_config()

    if not os.path.exists(config_path):
        warn_continue(f"Configuration file not found: {config_path}")
        return config

    log(f"Loading configuration from {config_path}")
    with open(config_path, 'r') as f:
        for line in f:
            line = line.strip()
            if line and not line.startswith('#'):
                if '=' in line:
                    key, value = line.split('=', 1)
                    key = key.strip()
                    value = value.strip().strip('"')
                    if key in config:
                        config[key] = value

    return config


def is_configured(config):
    """Interface names are the minimum needed to act on the system."""
    return bool(config.get('ETH_IF')) and bool(config.get('WIFI_IF'))


def validate_config(config):
    """
    Check the record for consistency.
    Returns a list of problems; an empty list means the record is usable.
    """
    errors = []
    for key in CONFIG_KEYS:
        if not config.get(key):
            errors.append(f"{key} is not set")
    if errors:
        return errors

    ssid_len = len(config['SSID'].encode('utf-8'))
    if ssid_len > 32:
        errors.append(f"SSID must be at most 32 bytes (got {ssid_len})")

    if not 8 <= len(config['PSK']) <= 63:
        errors.append("PSK must be between 8 and 63 characters")

    try:
        interface = ipaddress.IPv4Interface(config['WIFI_IP'])
    except ValueError:
        errors.append(f"WIFI_IP is not a valid IPv4 address with prefix: {config['WIFI_IP']}")
        return errors

    if '/' not in config['WIFI_IP']:
        errors.append(f"WIFI_IP must include a prefix length: {config['WIFI_IP']}")
        return errors

    network = interface.network
    if interface.ip in (network.network_address, network.broadcast_address):
        errors.append(f"WIFI_IP {interface.ip} is not a host address of {network}")

    bounds = {}
    for key in ('DHCP_START', 'DHCP_END'):
        try:
            address = ipaddress.IPv4Address(config[key])
        except ValueError:
            errors.append(f"{key} is not a valid IPv4 address: {config[key]}")
            continue
        if address not in network:
            errors.append(f"{key} {address} is outside {network}")
        elif address in (network.network_address, network.broadcast_address):
            errors.append(f"{key} {address} is not a host address of {network}")
        elif address == interface.ip:
            errors.append(f"{key} {address} is the access point address")
        bounds[key] = address

    if len(bounds) == 2 and bounds['DHCP_START'] > bounds['DHCP_END']:
        errors.append(f"DHCP_START {bounds['DHCP_START']} is after DHCP_END {bounds['DHCP_END']}")

    return errors


def ap_address(config):
    """The access point address without prefix."""
    return str(ipaddress.IPv4Interface(config['WIFI_IP']).ip)


def ap_netmask(config):
    return str(ipaddress.IPv4Interface(config['WIFI_IP']).netmask)


def _ask(prompt, default=''):
    suffix = f" [{default}]" if default else ""
    answer = input(f"{prompt}{suffix}: ").strip()
    return answer or default


def _ask_required(prompt, current=''):
    while True:
        answer = _ask(prompt, current)
        if answer:
            return answer
        warn("A value is required.")


def collect_config(config):
    """
    Prompt for every router parameter.
    Fields already set are offered as defaults; after a rejected round the
    values just entered are offered instead. Returns a new dictionary.
    """
    result = dict(config)
    current = dict(config)

    result['ETH_IF'] = _ask_required("Internet interface (upstream, e.g. eth0)", config.get('ETH_IF', ''))
    result['WIFI_IF'] = _ask_required("Wi-Fi interface for the access point (e.g. wlan0)", config.get('WIFI_IF', ''))

    while True:
        result['SSID'] = _ask("SSID (network name)", current.get('SSID') or DEFAULTS['SSID'])
        result['PSK'] = _ask("WPA2 passphrase (8-63 chars)", current.get('PSK') or DEFAULTS['PSK'])

        # Addresses typed without a prefix get /24
        address = _ask("Access point address (gateway)", current.get('WIFI_IP') or DEFAULTS['WIFI_IP'])
        if '/' not in address:
            address = f"{address}/{DEFAULT_PREFIX}"
        result['WIFI_IP'] = address

        result['DHCP_START'] = _ask("DHCP range start", current.get('DHCP_START') or DEFAULTS['DHCP_START'])
        result['DHCP_END'] = _ask("DHCP range end", current.get('DHCP_END') or DEFAULTS['DHCP_END'])

        errors = validate_config(result)
        if not errors:
            return result
        for error in errors:
            warn(error)
        log("Please enter the values again.")
        current = dict(result)


def save_config(config, filepath):
    """Save the router parameters, readable by root only."""
    directory = os.path.dirname(filepath)
    if directory:
        os.makedirs(directory, exist_ok=True)

    fd = os.open(filepath, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
    with os.fdopen(fd, 'w') as f:
        f.write("# Wi-Fi router configuration\n")
        f.write(f"# Generated on {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}\n")
        for key in CONFIG_KEYS:
            f.write(f"{key}=\"{config.get(key, '')}\"\n")
    os.chmod(filepath, 0o600)

    log(f"Configuration saved to {filepath}")
