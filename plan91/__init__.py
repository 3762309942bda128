"""
Plan91 - 91-completion habit commitment tracker
"""

__version__ = "0.1.0"
