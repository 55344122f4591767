# =======================================================================================
# qrbadge/__init__.py - Package Initialization
# =======================================================================================
"""
QR Badge Access Control API

Validates scanned QR badges, logs every successful scan as an access event,
and exposes token-protected administration of badges, users and access history.
"""

__version__ = "1.0.0"
__author__ = "QR Badge Team"
