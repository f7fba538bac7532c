'''
Name: apps/planner/utils/exceptions.py
Description: Errors raised by the scheduling utilities.
Authors: Planner Team
Created: October 5, 2026
Last Modified: October 12, 2026
'''


class InvalidInput(ValueError):
    """Raised when a date, time, duration or choice token cannot be accepted."""
