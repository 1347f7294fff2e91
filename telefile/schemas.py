from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class LoginRequest(BaseModel):
    username: str = ''
    password: str = ''


class FolderRequest(BaseModel):
    path: str = '/'
    name: Optional[str] = None


class RenameRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    from_path: Optional[str] = Field(default=None, alias='from')
    to_path: Optional[str] = Field(default=None, alias='to')


class MoveRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    path: Optional[str] = None
    target_dir: Optional[str] = Field(default=None, alias='targetDir')
