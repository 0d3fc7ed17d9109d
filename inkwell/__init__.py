"""
Inkwell backend.

Content and community platform API: accounts, per-device sessions and the
HTTP surface around them.
"""

__version__ = "1.0.0"
