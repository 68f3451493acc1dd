"""
Helper utilities shared across the application: value formatting, shell word
splitting and path handling.
"""
