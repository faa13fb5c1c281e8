# designz_loader/core/security.py
from typing import Optional
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

# The backend verifies the token; we only pass it along
security = HTTPBearer(auto_error=False)

async def get_bearer_token(credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)) -> Optional[str]:
    return credentials.credentials if credentials else None
