import enum
from typing import Dict


class ErrorKind(enum.Enum):
    VALIDATION = 'validation'
    INVALID_ID = 'invalid_id'
    NOT_FOUND = 'not_found'
    STORE = 'store'


class PostError(Exception):
    '''Base for every error the post service and store raise.'''
    kind : ErrorKind = ErrorKind.STORE

    def __init__(self, message:str) -> None:
        super().__init__(message)
        self.message : str = message


class ValidationError(PostError):
    kind = ErrorKind.VALIDATION


class InvalidIDError(PostError):
    kind = ErrorKind.INVALID_ID

    def __init__(self, message:str='invalid post id') -> None:
        super().__init__(message)


class NotFoundError(PostError):
    kind = ErrorKind.NOT_FOUND

    def __init__(self, message:str='post not found') -> None:
        super().__init__(message)


class StoreError(PostError):
    kind = ErrorKind.STORE

    def __init__(self, operation:str, message:str='store operation failed') -> None:
        super().__init__(f'{operation}: {message}')
        self.operation : str = operation


STATUS_BY_KIND : Dict[ErrorKind, int] = {
    ErrorKind.VALIDATION: 400,
    ErrorKind.INVALID_ID: 400,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.STORE: 500,
}
