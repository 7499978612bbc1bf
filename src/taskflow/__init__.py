"""TaskFlow identity service.

Telegram login verification, account provisioning, public account
identifiers and one-time role assignment behind a FastAPI HTTP API.
"""

__version__ = "0.1.0"
