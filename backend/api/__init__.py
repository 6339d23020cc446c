"""
Accounts API package.

Provides the FastAPI application for the user account service. The
application instance lives in api.app.
"""
