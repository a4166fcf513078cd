"""
Service management for hostapd and dnsmasq (systemd or OpenRC)
"""
import time
from .utils import log, warn, run_command, command_exists, launch_background

FALLBACK_SETTLE_SECONDS = {
    'hostapd': 2,
    'dnsmasq': 1,
}


def detect_service_manager():
    """Detect which service manager to use (systemd or openrc)."""
    if command_exists("systemctl"):
        return "systemd"
    if command_exists("rc-service"):
        return "openrc"
    return None


def _supervisor_start(name, manager):
    if manager == "systemd":
        run_command(["systemctl", "unmask", name], silent=True)
        result = run_command(["systemctl", "enable", "--now", name])
        return result.returncode == 0
    if manager == "openrc":
        run_command(["rc-update", "add", name, "default"], silent=True)
        result = run_command(["rc-service", name, "start"])
        return result.returncode == 0
    return False


def start_service(name, fallback_command):
    """
    Start and enable a daemon through the service manager.
    If that fails, launch it directly in the background.
    Returns "supervisor", "direct" or None.
    """
    log(f"Starting {name}")
    manager = detect_service_manager()
    if _supervisor_start(name, manager):
        return "supervisor"

    warn(f"Could not start {name} through the service manager. Launching it directly...")
    process = launch_background(fallback_command)
    if process is None:
        return None
    time.sleep(FALLBACK_SETTLE_SECONDS.get(name, 1))
    return "direct"


def stop_service(name):
    """Stop a daemon, ignoring failures."""
    manager = detect_service_manager()
    if manager == "systemd":
        result = run_command(["systemctl", "stop", name], silent=True)
    elif manager == "openrc":
        result = run_command(["rc-service", name, "stop"], silent=True)
    else:
        result = run_command(["pkill", "-x", name], silent=True)
    if result.returncode == 0:
        log(f"Stopped {name}")
    return result.returncode == 0


def show_service_status(name):
    """Print the service manager's status report for a daemon."""
    print(f"{name} status:")
    manager = detect_service_manager()
    if manager == "systemd":
        run_command(["systemctl", "status", name, "--no-pager"])
    elif manager == "openrc":
        run_command(["rc-service", name, "status"])
    else:
        run_command(["pgrep", "-a", "-x", name])
