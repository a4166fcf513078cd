"""
Network interface configuration for the Wi-Fi router controller
"""
import ipaddress
from .readiness import wait_until
from .utils import log, warn, warn_continue, error_exit, run_command, EXIT_NOT_CONFIGURED


def interface_exists(iface):
    """Check whether the kernel knows a link with this name."""
    if not iface:
        return False
    result = run_command(["ip", "link", "show", iface], silent=True)
    return result.returncode == 0


def ensure_interfaces(config):
    """Abort unless both configured interfaces exist."""
    if not interface_exists(config['ETH_IF']):
        error_exit(f"Internet interface {config['ETH_IF']} not found. Check the name and retry.",
                   EXIT_NOT_CONFIGURED)
    if not interface_exists(config['WIFI_IF']):
        error_exit(f"Wi-Fi interface {config['WIFI_IF']} not found. Check the name and retry.",
                   EXIT_NOT_CONFIGURED)


def interface_addresses(iface):
    """
    Return the IPv4 addresses assigned to an interface.
    Parses the one-line-per-address output of 'ip -o -4 addr show'.
    """
    result = run_command(["ip", "-o", "-4", "addr", "show", "dev", iface], silent=True)
    if result.returncode != 0 or not result.stdout:
        return []

    addresses = []
    for line in result.stdout.splitlines():
        tokens = line.split()
        for index, token in enumerate(tokens[:-1]):
            if token == 'inet':
                try:
                    addresses.append(ipaddress.IPv4Interface(tokens[index + 1]))
                except ValueError:
                    pass
                break
    return addresses


def has_address(iface, cidr):
    """Compare by host address, so a different prefix still counts as present."""
    wanted = ipaddress.IPv4Interface(cidr).ip
    return any(address.ip == wanted for address in interface_addresses(iface))


def assign_address(config):
    wifi_if = config['WIFI_IF']
    wifi_ip = config['WIFI_IP']

    log(f"Assigning static address {wifi_ip} to {wifi_if}")
    if has_address(wifi_if, wifi_ip):
        log(f"Address already present on {wifi_if}")
        return

    result = run_command(["ip", "addr", "add", wifi_ip, "dev", wifi_if], silent=True)
    if result.returncode != 0:
        warn(f"Could not add the address to {wifi_if} (maybe already present).")


def remove_address(config):
    wifi_if = config['WIFI_IF']
    wifi_ip = config['WIFI_IP']

    if not has_address(wifi_if, wifi_ip):
        log(f"Address {wifi_ip.split('/', 1)[0]} not present on {wifi_if}")
        return

    result = run_command(["ip", "addr", "del", wifi_ip, "dev", wifi_if], silent=True)
    if result.returncode != 0:
        warn(f"Could not remove the address from {wifi_if} (already removed?)")
    else:
        log(f"Removed {wifi_ip} from {wifi_if}")


def bring_up(iface):
    result = run_command(["ip", "link", "set", iface, "up"], silent=True)
    if result.returncode != 0:
        warn_continue(f"Failed to bring up {iface}.")


def enable_ip_forwarding(paths):
    """Enable IPv4 forwarding if not already enabled."""
    forward_path = paths['IP_FORWARD']
    try:
        with open(forward_path, "r") as f:
            ip_forward = f.read().strip()

        if ip_forward != "1":
            log("Enabling IP forwarding...")
            with open(forward_path, "w") as f:
                f.write("1\n")
        else:
            log("IP forwarding is already enabled. Skipping.")
    except OSError as e:
        warn_continue(f"Failed to enable IP forwarding: {e}")


def is_ap_mode(iface):
    result = run_command(["iw", "dev", iface, "info"], silent=True)
    return result.returncode == 0 and "type AP" in (result.stdout or "")


def wait_for_ap_mode(iface, **options):
    """Wait until the interface reports AP mode. Returns a ReadinessResult."""
    def report(attempt, delay):
        log(f"Waiting for AP mode on {iface} (attempt {attempt}, next check in {delay:.1f}s)...")

    result = wait_until(lambda: is_ap_mode(iface), on_retry=report, **options)
    if result.ready:
        log(f"Interface {iface} is in AP mode.")
    else:
        warn(f"{iface} did not report AP mode after {result.attempts} checks; continuing anyway.")
    return result


def show_addresses(iface, max_lines=4):
    """Print the first lines of the interface address information."""
    result = run_command(["ip", "addr", "show", iface], silent=True)
    output = result.stdout if result.returncode == 0 and result.stdout else (result.stderr or "")
    for line in output.splitlines()[:max_lines]:
        print(line)
