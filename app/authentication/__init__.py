"""
Authentication application.

Key components:
    - User model: Custom email-based user authentication
    - Profile model: First/last name shown in chat previews
    - JWT token endpoints (simplejwt) used by HTTP and websocket clients

Usage:
    from authentication.models import User, Profile
"""
