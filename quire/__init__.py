"""
Quire - backend for a manuscript-submission platform.

Users register and log in, authors submit manuscripts to publications,
editors and admins review and comment on them.
"""

__version__ = "0.1.0"
