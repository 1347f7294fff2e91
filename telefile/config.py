from __future__ import annotations

from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_ADMIN_PASSWORD = 'admin12345'


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file='.env', env_file_encoding='utf-8')

    app_name: str = 'TeleFile'
    app_host: str = '0.0.0.0'
    app_port: int = 3000
    data_dir: str = 'data'
    users_file: str = 'users.json'
    public_mount: str = '/data'
    public_base_url: str = 'http://localhost:3000'
    static_max_age: int = Field(default=3600, ge=0)
    max_upload_bytes: int = Field(default=2 * 1024 ** 3, ge=1)
    max_upload_files: int = Field(default=50, ge=1)
    default_upload_dir: str = 'uploads'
    admin_user: str = 'admin'
    admin_password: str = DEFAULT_ADMIN_PASSWORD
    session_cookie: str = 'session_id'
    session_expire_minutes: int = Field(default=720, ge=1)
    bot_token: Optional[str] = None
    webhook_disabled: bool = True
    webhook_path: str = '/api/telegram'
    web_dist: str = 'web/dist'
    log_level: str = 'info'
    cors_origins: str = ''


settings = Settings()
