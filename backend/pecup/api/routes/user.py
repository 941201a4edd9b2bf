"""User Context Endpoint — who the caller is and what the role matrix lets them do."""

from dataclasses import asdict

from fastapi import APIRouter, Depends

from pecup.api.dependencies import get_user_context
from pecup.core.permissions import UserContext, permissions_for

router = APIRouter(prefix="/api/v1/user", tags=["profile"])


@router.get("/context")
async def get_context(context: UserContext = Depends(get_user_context)):
    return {
        "userContext": asdict(context),
        "permissions": permissions_for(context).to_dict(),
    }
