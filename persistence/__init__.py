"""
SQLite persistence: connection helpers, key-value settings, and the zone document slot.
"""
