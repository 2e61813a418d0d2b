"""
HostGuard

A single-host hardening audit tool for Linux systems. Evaluates a fixed
catalogue of compliance rules and, on explicit request, applies an
idempotent privileged remediation to a non-compliant rule.
"""

__version__ = "1.0.0"
__author__ = "HostGuard Project"
