"""Agora: email OTP authentication and admin broadcast email service."""

__version__ = "1.0.0"
