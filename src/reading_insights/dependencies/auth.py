from typing import Annotated

from fastapi import Depends, HTTPException, status
from fastapi.security import APIKeyHeader

from reading_insights.domain import UserId

# The identity provider in front of this service forwards the authenticated user id.
user_id_header = APIKeyHeader(name="X-User-Id", auto_error=False)


def get_user_id(
    api_key: Annotated[str | None, Depends(user_id_header)] = None,
) -> UserId:
    if not api_key or not api_key.strip():
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing or empty X-User-Id header",
        )
    return UserId(api_key.strip())
