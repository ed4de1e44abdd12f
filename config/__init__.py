"""
Configuration package for TastyTray application.

Selects the backend store implementation.
"""
