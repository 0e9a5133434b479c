"""
Coursework: assignment lifecycle and staged attachment uploads for an LMS.
"""

__version__ = "0.1.0"
