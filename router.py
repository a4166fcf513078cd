#!/usr/bin/env python3
"""
Turn an Ethernet-connected host into a Wi-Fi access point.

Usage:
    sudo ./router.py start
    sudo ./router.py stop
    sudo ./router.py status
    sudo ./router.py interactive   # asks for the parameters
"""
from pyrouter.cli import cli

if __name__ == '__main__':
    cli()
