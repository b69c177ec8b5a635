"""
Great Forums - server-rendered discussion forum.
"""

__version__ = "1.0.0"
