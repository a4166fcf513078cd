"""
Utility functions for the Wi-Fi router controller
"""
import os
import sys
import subprocess
import shutil
import time

EXIT_PRIVILEGE = 1
EXIT_USAGE = 1
EXIT_NOT_CONFIGURED = 2


def log(message):
    """Print a formatted log message."""
    print(f"[INFO] {message}")


def warn(message):
    """Print a warning message."""
    print(f"[WARNING] {message}")


def warn_continue(message):
    """Print a warning message but continue execution."""
    print(f"[WARNING] {message} - Skipping this step.")


def error_exit(message, code=1):
    """Print an error message and exit with the given status."""
    print(f"[ERROR] {message}", file=sys.stderr)
    sys.exit(code)


def ensure_root():
    """Check if running as root."""
    if os.geteuid() != 0:
        error_exit("This script must be run as root. Use 'sudo'.", EXIT_PRIVILEGE)


def run_command(command, check=False, silent=False):
    """
    Run a command and return the result.

    A list is executed directly, a string goes through the shell.
    A missing executable yields a result with returncode 127 instead of raising.
    """
    try:
        result = subprocess.run(
            command,
            shell=isinstance(command, str),
            check=check,
            stdout=subprocess.PIPE if silent else None,
            stderr=subprocess.PIPE if silent else None,
            text=True
        )
        return result
    except subprocess.CalledProcessError as e:
        if check:
            warn_continue(f"Command failed: {format_command(command)}")
        return e
    except OSError as e:
        return subprocess.CompletedProcess(command, 127, stdout="", stderr=str(e))


def launch_background(command):
    """Start a long-running process detached from this one."""
    try:
        return subprocess.Popen(
            command,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
            start_new_session=True
        )
    except OSError as e:
        warn(f"Could not launch {format_command(command)}: {e}")
        return None


def format_command(command):
    if isinstance(command, str):
        return command
    return " ".join(command)


def command_exists(command):
    """Check if a command exists."""
    return shutil.which(command) is not None


def timestamp():
    """Seconds since the epoch, used as backup suffix."""
    return int(time.time())


def display_banner():
    """Display the application banner."""
    print("==================================================")
    print("        Wi-Fi Access Point Router Setup           ")
    print("==================================================")
    print("")
