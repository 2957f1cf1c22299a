"""Authenticated operator dependency."""

from typing import Annotated, Optional

from fastapi import Depends, HTTPException, Request, status

from stockscan.core.config import settings
from stockscan.core.security import decode_access_token


class OperatorContext:
    """Decoded operator session.

    Attributes:
        subject: The identity provider's user id.
        email: The operator's email address, if the provider sent one.
        name: Display name (defaults to the email prefix).
    """

    def __init__(self, subject: str, email: Optional[str] = None, name: str = ""):
        self.subject = subject
        self.email = email
        self.name = name or (email.split("@")[0] if email else subject)


ANONYMOUS_OPERATOR = OperatorContext(subject="anonymous", name="Operator")


async def get_current_operator(request: Request) -> OperatorContext:
    """Get the current operator from the session token.

    Checks in order:
    1. Authorization: Bearer <token> header
    2. access_token cookie (HttpOnly)
    """
    if not settings.auth_required:
        return ANONYMOUS_OPERATOR

    payload = None

    auth_header = request.headers.get("Authorization", "")
    if auth_header.startswith("Bearer "):
        token = auth_header.split(" ", 1)[1]
        if token:
            payload = decode_access_token(token)

    # Fall back to cookie if no Bearer or Bearer was invalid
    if payload is None:
        cookie_token = request.cookies.get("access_token")
        if cookie_token:
            payload = decode_access_token(cookie_token)

    if payload is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )

    subject = payload.get("sub")
    if not subject:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token payload",
        )

    return OperatorContext(
        subject=str(subject),
        email=payload.get("email"),
        name=payload.get("name") or "",
    )


CurrentOperator = Annotated[OperatorContext, Depends(get_current_operator)]
