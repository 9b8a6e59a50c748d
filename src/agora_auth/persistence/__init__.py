"""Persistence implementations for agora_auth, grouped by technology.

- ``sqlalchemy``: users and refresh sessions
- ``redis``: shared rate-limit counters
- ``memory``: process-local rate-limit counters
"""
