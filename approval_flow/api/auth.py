from fastapi import Depends, Header, HTTPException
from approval_flow.database import Database, get_db
from approval_flow.models.user import User

async def get_current_user(
    x_user_id: str = Header(..., alias="X-User-Id"),
    database: Database = Depends(get_db),
) -> User:
    """
    Resolve the caller from the X-User-Id header. Token verification happens
    upstream at the gateway; this only loads the user record.
    """
    user = await database.users.get_by_user_id(x_user_id)
    if user is None or not user.is_active:
        raise HTTPException(status_code=401, detail="Unknown or inactive user")
    return user
