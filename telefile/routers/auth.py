from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Request, Response

from ..deps import current_session, get_sessions, get_user_store, session_token
from ..errors import InvalidCredentials
from ..schemas import LoginRequest
from ..services.sessions import SessionStore
from ..services.user_store import JsonUserStore

router = APIRouter(prefix='/api/auth', tags=['auth'])


@router.post('/login')
def login(
    payload: LoginRequest,
    request: Request,
    response: Response,
    users: JsonUserStore = Depends(get_user_store),
    sessions: SessionStore = Depends(get_sessions),
):
    try:
        user = users.authenticate(payload.username, payload.password)
    except InvalidCredentials as exc:
        raise HTTPException(status_code=exc.status_code, detail=str(exc))

    token = sessions.create(user.username)
    is_https = request.url.scheme == 'https'
    response.set_cookie(
        request.app.state.settings.session_cookie,
        token,
        httponly=True,
        secure=is_https,
        samesite='lax',
        max_age=sessions.ttl_seconds,
    )
    return {'ok': True, 'user': {'username': user.username}}


@router.post('/logout')
def logout(request: Request, response: Response, sessions: SessionStore = Depends(get_sessions)):
    sessions.destroy(session_token(request))
    response.delete_cookie(request.app.state.settings.session_cookie)
    return {'ok': True}


@router.get('/me')
def me(request: Request):
    session = current_session(request)
    return {'user': {'username': session.username} if session else None}
