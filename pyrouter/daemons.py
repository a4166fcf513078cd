"""
hostapd and dnsmasq configuration for the Wi-Fi router controller
"""
import os
from .backup import backup_file
from .config import ap_address, ap_netmask
from .utils import log

HOSTAPD_DRIVER = 'nl80211'
HOSTAPD_HW_MODE = 'g'
HOSTAPD_CHANNEL = 6
DHCP_LEASE_TIME = '24h'
DNS_SERVERS = ('8.8.8.8', '8.8.4.4')


def render_hostapd_conf(config):
    lines = [
        f"interface={config['WIFI_IF']}",
        f"driver={HOSTAPD_DRIVER}",
        f"ssid={config['SSID']}",
        f"hw_mode={HOSTAPD_HW_MODE}",
        f"channel={HOSTAPD_CHANNEL}",
        "wmm_enabled=1",
        "macaddr_acl=0",
        "auth_algs=1",
        "ignore_broadcast_ssid=0",
        "wpa=2",
        f"wpa_passphrase={config['PSK']}",
        "wpa_key_mgmt=WPA-PSK",
        "rsn_pairwise=CCMP",
    ]
    return "\n".join(lines) + "\n"


def render_dnsmasq_conf(config):
    lines = [
        f"interface={config['WIFI_IF']}",
        "bind-interfaces",
        f"dhcp-range={config['DHCP_START']},{config['DHCP_END']},{ap_netmask(config)},{DHCP_LEASE_TIME}",
        f"dhcp-option=3,{ap_address(config)}",
        f"dhcp-option=6,{','.join(DNS_SERVERS)}",
    ]
    return "\n".join(lines) + "\n"


def write_config_file(path, content):
    """Write a daemon config file, keeping a timestamped copy of the old one."""
    backup_file(path)

    directory = os.path.dirname(path)
    if directory:
        os.makedirs(directory, exist_ok=True)

    with open(path, 'w') as f:
        f.write(content)


def write_hostapd_conf(config, paths):
    path = paths['HOSTAPD_CONF']
    write_config_file(path, render_hostapd_conf(config))
    log(f"hostapd configuration written to {path}")


def write_dnsmasq_conf(config, paths):
    path = paths['DNSMASQ_CONF']
    write_config_file(path, render_dnsmasq_conf(config))
    log(f"dnsmasq configuration written to {path}")


def point_hostapd_defaults(paths):
    """Make the hostapd init defaults file reference our generated config."""
    defaults_path = paths['HOSTAPD_DEFAULTS']
    setting = f"DAEMON_CONF=\"{paths['HOSTAPD_CONF']}\"\n"

    if os.path.exists(defaults_path):
        with open(defaults_path, 'r') as f:
            lines = f.readlines()

        replaced = False
        for index, line in enumerate(lines):
            if line.startswith('DAEMON_CONF='):
                lines[index] = setting
                replaced = True

        if not replaced:
            if lines and not lines[-1].endswith('\n'):
                lines[-1] += '\n'
            lines.append(setting)

        with open(defaults_path, 'w') as f:
            f.writelines(lines)
    else:
        os.makedirs(os.path.dirname(defaults_path), exist_ok=True)
        with open(defaults_path, 'w') as f:
            f.write(setting)

    log(f"{defaults_path} now points hostapd at {paths['HOSTAPD_CONF']}")
