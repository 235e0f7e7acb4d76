"""
auth — User registration and login.

Provides:
  • Password hashing (bcrypt, off the event loop)
  • ``AuthService`` with ``register`` / ``login``
  • Register / Login API routes
  • The ``AuthError`` taxonomy returned to callers
"""
