from dataclasses import dataclass
from uuid import UUID

from src.api.core.constants import (
    JWT_COMPANY_CLAIM,
    JWT_CONTEXT_CLAIM,
    JWT_SUBJECT_CLAIM,
)
from src.database.models import AuthContext


@dataclass(frozen=True)
class AccessTokenClaims:
    user_id: UUID
    company_id: UUID
    context: AuthContext


def extract_access_claims(payload: dict) -> AccessTokenClaims:
    """Extract the caller identity from decoded access token claims.

    Raises ValueError when a required claim is missing or malformed.
    """
    user_id = payload.get(JWT_SUBJECT_CLAIM)
    company_id = payload.get(JWT_COMPANY_CLAIM)
    context = payload.get(JWT_CONTEXT_CLAIM)

    if not user_id or not company_id or not context:
        raise ValueError("Access token is missing required claims")

    return AccessTokenClaims(
        user_id=UUID(str(user_id)),
        company_id=UUID(str(company_id)),
        context=AuthContext(context),
    )
