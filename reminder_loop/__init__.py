"""
reminder_loop: one-shot timed reminders that re-arm from the delivered notification.
"""
__version__ = "1.0.0"
