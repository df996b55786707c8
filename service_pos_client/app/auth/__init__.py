"""
Authentication helpers for the POS client.

Login is delegated to the data service; the resulting user is held by
the session controller for the lifetime of the login.
"""
