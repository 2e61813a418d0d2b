#!/usr/bin/env python3
"""
HostGuard

Main executable entry point for the Linux hardening audit tool.
This script runs the CLI and exits with appropriate status codes.

Usage:
    ./harden.py [options]
    python3 harden.py [options]

Exit Codes:
    0 - Success, all rules passed
    1 - Error occurred during execution
    2 - At least one rule failed, warned or could not be evaluated

Examples:
    # Evaluate the hardening catalogue and print the text report
    ./harden.py

    # Evaluate the CIS baseline and export JSON
    ./harden.py --catalogue baseline --format json --pretty -o baseline.json

    # Fix two rules, then report
    sudo ./harden.py --fix ssh-root --fix kernel-aslr

    # Save the report to a file
    ./harden.py -o hardening-report.txt
"""

import sys
from hostguard.cli import main

if __name__ == "__main__":
    sys.exit(main())
