# billing/api/deps.py

from typing import Optional

from fastapi import Header

from billing.errors import UnauthorizedError


def get_owner_id(x_owner_id: Optional[str] = Header(default=None)) -> str:
    """
    The authenticated owner, as forwarded by the auth layer in front of the API.
    """
    if not x_owner_id or not x_owner_id.strip():
        raise UnauthorizedError("Not authorized, no owner")
    return x_owner_id.strip()
