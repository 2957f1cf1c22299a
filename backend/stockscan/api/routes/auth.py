"""Operator session routes.

Login and logout redirects belong to the identity provider; the scanner UI
only needs to know who is signed in.
"""

from fastapi import APIRouter

from stockscan.core.auth import CurrentOperator

router = APIRouter()


@router.get("/me")
def get_current_operator_info(current_operator: CurrentOperator):
    """Get the signed-in operator's display details."""
    return {
        "id": current_operator.subject,
        "name": current_operator.name,
        "email": current_operator.email,
    }
