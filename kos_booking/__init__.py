"""
kos-booking: boarding-house ("kos") booking backend.
"""
__version__ = "1.0.0"
