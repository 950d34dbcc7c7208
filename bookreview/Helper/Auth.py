from typing import Optional
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from bookreview.Helper.Exceptions import Unauthorized
from bookreview.Helper.SessionStore import Session, session_store

bearer = HTTPBearer(auto_error=False)

async def current_session(credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer)) -> Optional[Session]:
    """Session of the caller, or None for anonymous requests."""
    if credentials is None:
        return None
    return session_store.current_user(credentials.credentials)

async def require_session(session: Optional[Session] = Depends(current_session)) -> Session:
    """Gate for mutation routes and the profile view."""
    if session is None:
        raise Unauthorized()
    return session
