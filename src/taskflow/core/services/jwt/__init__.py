"""Session JWT package."""

from .jwt_gen import SessionIssuer
from .jwt_verify import SessionClaims, SessionVerifier
