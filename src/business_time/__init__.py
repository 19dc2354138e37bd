"""
Business time service for Colombia.

A Flask API that adds business days and hours to a date, honouring
working hours, the lunch break and Colombian holidays.
"""

__version__ = "1.0.0"
