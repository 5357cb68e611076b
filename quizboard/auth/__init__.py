"""
Requester identity.

Login, registration and password handling live in the external auth
service; this package only holds the user record the session resolves to.
"""
