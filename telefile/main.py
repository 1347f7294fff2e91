from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from .bot import build_bot, start_bot, stop_bot, telegram_webhook
from .config import DEFAULT_ADMIN_PASSWORD, Settings, settings
from .deps import current_session
from .errors import Unauthorized
from .routers import auth, files
from .services.file_ops import FileOps
from .services.ingest import TelegramIngest
from .services.listing import DirectoryLister
from .services.paths import PathResolver
from .services.sessions import SessionStore
from .services.user_store import JsonUserStore

logger = logging.getLogger(__name__)

_SECURITY_HEADERS = {
    'X-Frame-Options': 'SAMEORIGIN',
    'X-Content-Type-Options': 'nosniff',
    'Referrer-Policy': 'strict-origin-when-cross-origin',
}

_INTERNAL_ERROR = 'Internal server error. Please try again.'


class CachedStaticFiles(StaticFiles):
    def __init__(self, *args, max_age: int = 0, **kwargs):
        super().__init__(*args, **kwargs)
        self.max_age = max_age

    def file_response(self, *args, **kwargs):
        response = super().file_response(*args, **kwargs)
        response.headers['Cache-Control'] = f'public, max-age={self.max_age}'
        return response


class SinglePageApp(StaticFiles):
    """Serves the built web UI, answering unknown paths with index.html."""

    async def get_response(self, path: str, scope):
        try:
            return await super().get_response(path, scope)
        except StarletteHTTPException as exc:
            if exc.status_code != 404:
                raise
            return await super().get_response('index.html', scope)


def _parse_cors_origins(value: str) -> list[str]:
    return [origin.strip() for origin in value.split(',') if origin.strip()]


def _apply_security_headers(response):
    for key, value in _SECURITY_HEADERS.items():
        response.headers[key] = value
    return response


def _is_public_api_path(path: str, app_settings: Settings) -> bool:
    return path.startswith('/api/auth/') or path == '/api/health' or path == app_settings.webhook_path


async def auth_gate(request: Request, call_next):
    path = request.url.path
    if path.startswith('/api/') and not _is_public_api_path(path, request.app.state.settings):
        if current_session(request) is None:
            exc = Unauthorized()
            return _apply_security_headers(JSONResponse({'detail': str(exc)}, status_code=exc.status_code))

    response = await call_next(request)
    return _apply_security_headers(response)


async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.error('Unhandled error on %s %s', request.method, request.url.path, exc_info=exc)
    return JSONResponse({'detail': _INTERNAL_ERROR}, status_code=500)


@asynccontextmanager
async def lifespan(app: FastAPI):
    app_settings: Settings = app.state.settings
    resolver: PathResolver = app.state.resolver

    resolver.root.mkdir(parents=True, exist_ok=True)
    if app.state.users.ensure_default(app_settings.admin_user, app_settings.admin_password):
        if app_settings.admin_password == DEFAULT_ADMIN_PASSWORD:
            logger.warning('Seeded %s with the default password. Set ADMIN_PASSWORD in .env', app_settings.admin_user)

    bot = None
    if app_settings.bot_token:
        webhook = not app_settings.webhook_disabled
        bot = build_bot(app_settings.bot_token, app.state.ingest, webhook=webhook)
        webhook_url = app_settings.public_base_url.rstrip('/') + app_settings.webhook_path if webhook else None
        await start_bot(bot, webhook_url)
    else:
        logger.warning('BOT_TOKEN not set. Telegram bot disabled.')
    app.state.bot = bot

    try:
        yield
    finally:
        if bot is not None:
            await stop_bot(bot)
        app.state.bot = None


def create_app(app_settings: Optional[Settings] = None) -> FastAPI:
    app_settings = app_settings or settings
    logging.basicConfig(
        level=app_settings.log_level.upper(),
        format='%(asctime)s %(levelname)s %(name)s: %(message)s',
    )

    app = FastAPI(title=app_settings.app_name, lifespan=lifespan)

    resolver = PathResolver(app_settings.data_dir, app_settings.public_mount)
    app.state.settings = app_settings
    app.state.resolver = resolver
    app.state.lister = DirectoryLister(resolver)
    app.state.file_ops = FileOps(resolver, app_settings.max_upload_bytes, app_settings.default_upload_dir)
    app.state.ingest = TelegramIngest(resolver, app_settings.public_base_url)
    app.state.users = JsonUserStore(app_settings.users_file)
    app.state.sessions = SessionStore(app_settings.session_expire_minutes * 60)
    app.state.bot = None

    app.middleware('http')(auth_gate)
    cors_origins = _parse_cors_origins(app_settings.cors_origins)
    if cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=cors_origins,
            allow_credentials=True,
            allow_methods=['GET', 'POST', 'PUT', 'PATCH', 'DELETE', 'OPTIONS'],
            allow_headers=['Authorization', 'Content-Type'],
        )
    app.add_exception_handler(Exception, unhandled_exception_handler)

    @app.get('/api/health')
    def health():
        return {'ok': True}

    app.include_router(auth.router)
    app.include_router(files.router)
    app.add_api_route(app_settings.webhook_path, telegram_webhook, methods=['POST'], include_in_schema=False)

    app.mount(
        resolver.public_mount,
        CachedStaticFiles(directory=str(resolver.root), check_dir=False, max_age=app_settings.static_max_age),
        name='data',
    )

    web_dist = Path(app_settings.web_dist)
    if (web_dist / 'index.html').exists():
        app.mount('/', SinglePageApp(directory=str(web_dist), html=True), name='web')

    return app


app = create_app()


def run() -> None:
    uvicorn.run('telefile.main:app', host=settings.app_host, port=settings.app_port, log_level=settings.log_level)
