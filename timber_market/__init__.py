"""
Timber Market: local-first core for a timber trading marketplace.

Customers submit demand, manufacturers list stock, administrators review
volumes, statuses and AI-assisted matchmaking.
"""

__version__ = "0.1.0"
