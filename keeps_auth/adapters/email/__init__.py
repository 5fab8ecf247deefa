"""Email sender adapters - Resend API and console implementations."""

from .console import ConsoleEmailSender
from .resend import ResendEmailSender

__all__ = ["ConsoleEmailSender", "ResendEmailSender"]
