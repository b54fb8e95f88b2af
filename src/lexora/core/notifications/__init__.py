"""Notification utilities - email.

Re-exports the mail dispatch capability.
"""

from src.lexora.core.notifications.email import Mailer, ResendMailer, get_mailer

__all__ = [
    "Mailer",
    "ResendMailer",
    "get_mailer",
]
