"""Row-set calls to stored procedures.

Drivers disagree on the shape a procedure call comes back in: some return the
rows directly, others wrap each statement's result set in an outer list
(``[[row, row, ...], status]``). Both shapes are flattened here and every row is
decoded into a typed model, so callers only ever see a flat list of rows.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Sequence, TypeVar
from uuid import UUID

from pydantic import BaseModel
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.database.models import AuthContext, UserRole
from src.utils.logger import get_logger

logger = get_logger(__name__)


class StoredProcedure(str, Enum):
    USER_MEMBERSHIPS = "sp_get_user_memberships"
    USER_REFRESH_TOKENS = "sp_get_user_refresh_tokens"


class UserMembershipRow(BaseModel):
    """One row of ``v_user_memberships``."""

    user_id: UUID
    user_email: str
    user_first_name: str
    user_last_name: str
    user_phone: str | None = None
    user_created_at: datetime
    user_updated_at: datetime
    user_role: UserRole
    membership_role: UserRole
    company_id: UUID


class RefreshTokenRow(BaseModel):
    """One row of ``v_user_refresh_tokens``."""

    refresh_token_id: UUID
    user_id: UUID
    token_identifier: str
    expires_at: datetime
    # MySQL hands BOOLEAN back as TINYINT 0/1
    is_revoked: bool
    created_at: datetime
    token_context: AuthContext


RowT = TypeVar("RowT", bound=BaseModel)


def unwrap_row_set(result: Any) -> list[Any]:
    """Flatten a procedure result into a plain list of rows.

    Accepts either a flat sequence of rows or a sequence whose first element is
    itself the sequence of rows. Anything else yields an empty list.
    """
    if isinstance(result, (list, tuple)):
        if result and isinstance(result[0], (list, tuple)):
            return list(result[0])
        return list(result)
    return []


async def _execute_procedure(
    db: AsyncSession,
    procedure: StoredProcedure,
    params: Sequence[Any],
) -> list[dict[str, Any]]:
    dialect = db.get_bind().dialect.name
    bind_names = [f"p{index}" for index in range(len(params))]
    arguments = ", ".join(f":{name}" for name in bind_names)

    if dialect == "mysql":
        statement = text(f"CALL {procedure.value}({arguments})")
        params = [str(value) if isinstance(value, UUID) else value for value in params]
    else:
        # PostgreSQL exposes the procedures as set-returning functions
        statement = text(f"SELECT * FROM {procedure.value}({arguments})")

    result = await db.execute(statement, dict(zip(bind_names, params)))
    return [dict(row) for row in result.mappings().all()]


async def call_procedure(
    db: AsyncSession,
    procedure: StoredProcedure,
    row_model: type[RowT],
    *params: Any,
) -> list[RowT]:
    """Call a stored procedure and decode its rows into ``row_model``."""
    raw = await _execute_procedure(db, procedure, params)
    rows = unwrap_row_set(raw)
    logger.debug(
        "Stored procedure returned rows", procedure=procedure.value, count=len(rows)
    )
    return [row_model.model_validate(dict(row)) for row in rows]
