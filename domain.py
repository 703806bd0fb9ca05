import re, secrets, datetime
from dataclasses import dataclass, field
from typing import Optional

from errors import ValidationError

TITLE_MAX_LENGTH : int = 200
CONTENT_MAX_LENGTH : int = 10000
ID_LENGTH : int = 24

_ID_PATTERN = re.compile(r'[0-9a-fA-F]{24}')


def utcnow() -> datetime.datetime:
    '''Naive UTC timestamp, the form every SQL backend hands back unchanged.'''
    return datetime.datetime.now(datetime.timezone.utc).replace(tzinfo=None)


def new_id() -> str:
    return secrets.token_hex(ID_LENGTH // 2)


def is_valid_id(value:Optional[str]) -> bool:
    return bool(value) and _ID_PATTERN.fullmatch(value) is not None


@dataclass
class Post:
    title : str
    content : str
    id : Optional[str] = None
    created_at : datetime.datetime = field(default_factory=utcnow)
    updated_at : datetime.datetime = field(default_factory=utcnow)

    @classmethod
    def create(cls, title:str, content:str) -> 'Post':
        '''Build a post with trimmed fields and equal timestamps. Never fails; call validate().'''
        now : datetime.datetime = utcnow()
        return cls(title=title.strip(), content=content.strip(), created_at=now, updated_at=now)

    def validate(self) -> None:
        # Emptiness is checked on the trimmed value, length on the stored one.
        if not self.title.strip():
            raise ValidationError('title is required')
        if len(self.title) > TITLE_MAX_LENGTH:
            raise ValidationError(f'title must be less than {TITLE_MAX_LENGTH} characters')
        if not self.content.strip():
            raise ValidationError('content is required')
        if len(self.content) > CONTENT_MAX_LENGTH:
            raise ValidationError(f'content must be less than {CONTENT_MAX_LENGTH} characters')

    def update(self, title:str, content:str) -> None:
        self.title = title.strip()
        self.content = content.strip()
        self.updated_at = utcnow()
