"""
Accounts service.

User registration, login, token refresh and profile management on top of
the common infrastructure package.
"""
