from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, File, HTTPException, Query, Request, UploadFile

from ..deps import get_current_user, get_file_ops, get_lister
from ..errors import FileManagerError
from ..schemas import FolderRequest, MoveRequest, RenameRequest
from ..services.file_ops import FileOps
from ..services.listing import DirectoryLister

router = APIRouter(prefix='/api', tags=['files'])


def _http_error(exc: Exception) -> HTTPException:
    if isinstance(exc, FileManagerError):
        return HTTPException(status_code=exc.status_code, detail=str(exc))
    # OSError text carries absolute paths; strerror does not
    return HTTPException(status_code=400, detail=getattr(exc, 'strerror', None) or 'Filesystem error')


@router.get('/files')
def list_files(
    path: str = Query(default='/'),
    sort: str = Query(default='name'),
    direction: str = Query(default='asc', alias='dir'),
    lister: DirectoryLister = Depends(get_lister),
    _=Depends(get_current_user),
):
    try:
        items = lister.list_dir(path, sort, direction)
        breadcrumb = lister.resolver.breadcrumb(path)
    except (FileManagerError, OSError) as exc:
        raise _http_error(exc)
    return {'path': path, 'breadcrumb': breadcrumb, 'items': [item.as_dict() for item in items]}


@router.post('/folder')
def create_folder(payload: FolderRequest, ops: FileOps = Depends(get_file_ops), _=Depends(get_current_user)):
    try:
        ops.create_folder(payload.path, payload.name)
    except (FileManagerError, OSError) as exc:
        raise _http_error(exc)
    return {'ok': True}


@router.post('/upload')
def upload(
    request: Request,
    path: str = Query(default=''),
    files: Optional[list[UploadFile]] = File(default=None),
    ops: FileOps = Depends(get_file_ops),
    _=Depends(get_current_user),
):
    files = files or []
    if len(files) > request.app.state.settings.max_upload_files:
        raise HTTPException(status_code=400, detail='Too many files')

    try:
        stored = ops.upload(path, [(f.filename, f.file) for f in files])
    except (FileManagerError, OSError) as exc:
        raise _http_error(exc)
    return {'ok': True, 'files': [s.as_dict() for s in stored]}


@router.delete('/files')
def delete_file(path: Optional[str] = Query(default=None), ops: FileOps = Depends(get_file_ops), _=Depends(get_current_user)):
    try:
        ops.delete(path)
    except (FileManagerError, OSError) as exc:
        raise _http_error(exc)
    return {'ok': True}


@router.post('/rename')
def rename(payload: RenameRequest, ops: FileOps = Depends(get_file_ops), _=Depends(get_current_user)):
    try:
        ops.rename(payload.from_path, payload.to_path)
    except (FileManagerError, OSError) as exc:
        raise _http_error(exc)
    return {'ok': True}


@router.post('/move')
def move(payload: MoveRequest, ops: FileOps = Depends(get_file_ops), _=Depends(get_current_user)):
    try:
        ops.move(payload.path, payload.target_dir)
    except (FileManagerError, OSError) as exc:
        raise _http_error(exc)
    return {'ok': True}
