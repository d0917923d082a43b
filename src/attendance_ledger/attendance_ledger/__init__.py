"""Attendance Ledger package.

Organized by feature modules (policy, directory, ledger, reconciliation, ...)
with pluggable store repositories and thin script/Flask entry points.
"""
