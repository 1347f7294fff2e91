from __future__ import annotations

from typing import Optional

from fastapi import HTTPException, Request, status

from .errors import Unauthorized
from .services.file_ops import FileOps
from .services.listing import DirectoryLister
from .services.sessions import Session, SessionStore
from .services.user_store import JsonUserStore


def get_file_ops(request: Request) -> FileOps:
    return request.app.state.file_ops


def get_lister(request: Request) -> DirectoryLister:
    return request.app.state.lister


def get_user_store(request: Request) -> JsonUserStore:
    return request.app.state.users


def get_sessions(request: Request) -> SessionStore:
    return request.app.state.sessions


def session_token(request: Request) -> Optional[str]:
    return request.cookies.get(request.app.state.settings.session_cookie)


def current_session(request: Request) -> Optional[Session]:
    return get_sessions(request).get(session_token(request))


def get_current_user(request: Request) -> str:
    session = current_session(request)
    if session is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=str(Unauthorized()))
    return session.username
