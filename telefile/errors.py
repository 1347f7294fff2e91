from __future__ import annotations


class FileManagerError(Exception):
    status_code = 400


class InvalidPath(FileManagerError):
    status_code = 400

    def __init__(self, message: str = 'Invalid path'):
        super().__init__(message)


class MissingField(FileManagerError):
    status_code = 400


class NotFound(FileManagerError):
    status_code = 404

    def __init__(self, message: str = 'Not found'):
        super().__init__(message)


class TooLarge(FileManagerError):
    status_code = 413


class Unauthorized(FileManagerError):
    status_code = 401

    def __init__(self, message: str = 'Unauthorized'):
        super().__init__(message)


class InvalidCredentials(FileManagerError):
    status_code = 401

    def __init__(self, message: str = 'Invalid credentials'):
        super().__init__(message)
