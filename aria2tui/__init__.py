"""
aria2tui - build aria2c command lines from an interactive terminal view and run them.
"""

__version__ = "0.3.0"
