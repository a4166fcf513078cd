"""
Router actions: interactive setup, start, stop and status
"""
from .config import collect_config, save_config, validate_config, is_configured
from .daemons import write_hostapd_conf, write_dnsmasq_conf, point_hostapd_defaults
from .firewall import (setup_firewall, remove_firewall, open_forward_policy,
                       reset_forward_policy, save_firewall_rules, show_rules)
from .network import (ensure_interfaces, assign_address, remove_address, bring_up,
                      enable_ip_forwarding, wait_for_ap_mode, show_addresses)
from .services import start_service, stop_service, show_service_status
from .utils import log, warn, error_exit, display_banner, EXIT_NOT_CONFIGURED


def configure_interactive(config, paths):
    """Ask for the router parameters and save them. Returns the new configuration."""
    display_banner()
    config = collect_config(config)
    save_config(config, paths['ROUTER_CONF'])
    return config


def require_configuration(config):
    if not is_configured(config):
        warn("No configuration found. Run 'interactive' first.")
        error_exit("Cannot continue without a saved configuration.", EXIT_NOT_CONFIGURED)


def check_configuration(config):
    errors = validate_config(config)
    if errors:
        for error in errors:
            warn(error)
        error_exit("The saved configuration is invalid. Run 'interactive' to fix it.",
                   EXIT_NOT_CONFIGURED)


def start_router(config, paths, ap_wait=None):
    """
    Bring up the access point.

    Every step is idempotent and failures are logged without undoing earlier steps.
    ap_wait holds keyword options for the AP mode wait (timeout, interval, backoff).
    """
    check_configuration(config)
    ensure_interfaces(config)

    wifi_if = config['WIFI_IF']

    assign_address(config)
    bring_up(wifi_if)
    enable_ip_forwarding(paths)

    write_hostapd_conf(config, paths)
    write_dnsmasq_conf(config, paths)
    point_hostapd_defaults(paths)

    start_service("hostapd", ["hostapd", paths['HOSTAPD_CONF']])
    wait_for_ap_mode(wifi_if, **(ap_wait or {}))

    start_service("dnsmasq", ["dnsmasq", f"--conf-file={paths['DNSMASQ_CONF']}"])

    setup_firewall(config)
    open_forward_policy()
    save_firewall_rules()

    save_config(config, paths['ROUTER_CONF'])

    log(f"Startup complete. The SSID '{config['SSID']}' should now be visible.")


def stop_router(config, reset_policy=False):
    """
    Tear down what start_router set up.
    The FORWARD policy is only touched when reset_policy is set.
    """
    require_configuration(config)
    log("Stopping the access point")

    stop_service("dnsmasq")
    stop_service("hostapd")

    if config.get('WIFI_IP'):
        try:
            remove_address(config)
        except ValueError as e:
            warn(f"Cannot parse WIFI_IP {config['WIFI_IP']} ({e}); leaving addresses untouched.")
    else:
        warn("No access point address configured; leaving addresses untouched.")

    remove_firewall(config)
    if reset_policy:
        reset_forward_policy()

    save_firewall_rules()
    log("Stop complete.")


def show_status(config):
    """Print a read-only snapshot of the router state."""
    require_configuration(config)

    print("=== Quick status ===")
    print(f"Internet interface (ETH_IF): {config['ETH_IF']}")
    print(f"Wi-Fi interface (WIFI_IF): {config['WIFI_IF']}")
    print()
    show_addresses(config['WIFI_IF'])
    print()
    show_service_status("hostapd")
    print()
    show_service_status("dnsmasq")
    print()
    show_rules()
