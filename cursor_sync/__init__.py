"""
Real-time cursor presence and shared-object synchronization server.
"""

__version__ = "1.0.0"

__all__ = ["core", "collaboration", "client"]
