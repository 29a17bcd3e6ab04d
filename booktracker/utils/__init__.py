"""
Utilities Package

Helper functions used across the application:
- books.py: tag sanitization, pagination clamping, status display names
"""
