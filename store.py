import abc, logging
from contextlib import contextmanager
from typing import Iterator, List, Optional

from flask import Flask
from flask_sqlalchemy import SQLAlchemy
from sqlalchemy import delete, event, func, or_, select, text, update
from sqlalchemy.exc import SQLAlchemyError

from domain import Post, is_valid_id, new_id, utcnow
from errors import InvalidIDError, NotFoundError, StoreError
from models import PostRecord, db

logger = logging.getLogger(__name__)


class PostStore(abc.ABC):
    '''Persistence contract the post service depends on.'''

    @abc.abstractmethod
    def create(self, post:Post) -> None:
        '''Assign a fresh id and timestamps to ``post`` and persist it.'''

    @abc.abstractmethod
    def find_by_id(self, post_id:str) -> Post:
        ...

    @abc.abstractmethod
    def find_all(self, limit:int, offset:int) -> List[Post]:
        '''Newest first.'''

    @abc.abstractmethod
    def search(self, query:str, limit:int, offset:int) -> List[Post]:
        '''Case-insensitive substring match on title or content, newest first.'''

    @abc.abstractmethod
    def update(self, post:Post) -> None:
        ...

    @abc.abstractmethod
    def delete(self, post_id:str) -> None:
        ...

    @abc.abstractmethod
    def count(self) -> int:
        ...

    @abc.abstractmethod
    def count_search(self, query:str) -> int:
        ...

    @abc.abstractmethod
    def ping(self) -> None:
        ...


def _like_pattern(query:str) -> str:
    escaped : str = query.replace('\\', '\\\\').replace('%', '\\%').replace('_', '\\_')
    return f'%{escaped}%'


def _casefold(value:Optional[str]) -> Optional[str]:
    return value.casefold() if value is not None else None


def _register_casefold(dbapi_connection, connection_record) -> None:
    dbapi_connection.create_function('casefold', 1, _casefold, deterministic=True)


class SQLAlchemyPostStore(PostStore):
    def __init__(self, database:SQLAlchemy) -> None:
        self.db : SQLAlchemy = database

    @contextmanager
    def _guard(self, operation:str) -> Iterator[None]:
        try:
            yield
        except SQLAlchemyError as exc:
            self.db.session.rollback()
            logger.error('Store operation %s failed: %s', operation, exc)
            raise StoreError(operation, str(exc)) from exc

    def _search_filter(self, query:str):
        if self.db.engine.dialect.name == 'sqlite':
            # SQLite's lower() only folds ASCII.
            folded : str = _like_pattern(query.casefold())
            return or_(
                func.casefold(PostRecord.title).like(folded, escape='\\'),
                func.casefold(PostRecord.content).like(folded, escape='\\'),
            )
        pattern : str = _like_pattern(query)
        return or_(
            PostRecord.title.ilike(pattern, escape='\\'),
            PostRecord.content.ilike(pattern, escape='\\'),
        )

    def _page(self, statement, limit:int, offset:int) -> List[Post]:
        statement = (
            statement.order_by(PostRecord.created_at.desc(), PostRecord.id.desc())
            .limit(limit)
            .offset(offset)
        )
        return [record.to_post() for record in self.db.session.scalars(statement)]

    def _generate_unique_id(self) -> str:
        candidate : str = new_id()
        while self.db.session.get(PostRecord, candidate) is not None:
            candidate = new_id()
        return candidate

    def create(self, post:Post) -> None:
        with self._guard('create'):
            post.id = self._generate_unique_id()
            post.created_at = utcnow()
            post.updated_at = post.created_at
            self.db.session.add(PostRecord(
                id=post.id,
                title=post.title,
                content=post.content,
                created_at=post.created_at,
                updated_at=post.updated_at,
            ))
            self.db.session.commit()

    def find_by_id(self, post_id:str) -> Post:
        if not is_valid_id(post_id):
            raise InvalidIDError()
        with self._guard('find_by_id'):
            record = self.db.session.get(PostRecord, post_id.lower())
        if record is None:
            raise NotFoundError()
        return record.to_post()

    def find_all(self, limit:int, offset:int) -> List[Post]:
        with self._guard('find_all'):
            return self._page(select(PostRecord), limit, offset)

    def search(self, query:str, limit:int, offset:int) -> List[Post]:
        with self._guard('search'):
            return self._page(select(PostRecord).where(self._search_filter(query)), limit, offset)

    def update(self, post:Post) -> None:
        if not is_valid_id(post.id):
            raise InvalidIDError()
        with self._guard('update'):
            post.updated_at = utcnow()
            result = self.db.session.execute(
                update(PostRecord)
                .where(PostRecord.id == post.id.lower())
                .values(title=post.title, content=post.content, updated_at=post.updated_at)
            )
            affected : int = result.rowcount
            self.db.session.commit()
        if affected == 0:
            raise NotFoundError()

    def delete(self, post_id:str) -> None:
        if not is_valid_id(post_id):
            raise InvalidIDError()
        with self._guard('delete'):
            result = self.db.session.execute(
                delete(PostRecord).where(PostRecord.id == post_id.lower())
            )
            affected : int = result.rowcount
            self.db.session.commit()
        if affected == 0:
            raise NotFoundError()

    def count(self) -> int:
        with self._guard('count'):
            return self.db.session.scalar(select(func.count()).select_from(PostRecord))

    def count_search(self, query:str) -> int:
        with self._guard('count_search'):
            return self.db.session.scalar(
                select(func.count()).select_from(PostRecord).where(self._search_filter(query))
            )

    def ping(self) -> None:
        with self._guard('ping'):
            self.db.session.execute(text('SELECT 1'))


def init_store(app:Flask) -> SQLAlchemyPostStore:
    '''Bind the database to ``app`` and make sure the posts table and its indexes exist.'''
    db.init_app(app)
    with app.app_context():
        if db.engine.dialect.name == 'sqlite':
            event.listen(db.engine, 'connect', _register_casefold)
        logger.info('Starting database migration')
        try:
            if db.engine.dialect.name == 'postgresql':
                with db.engine.begin() as connection:
                    connection.execute(text('CREATE EXTENSION IF NOT EXISTS pg_trgm'))
            db.create_all()
            # create_all skips indexes of a table that already exists
            for index in PostRecord.__table__.indexes:
                index.create(bind=db.engine, checkfirst=True)
                logger.info('Ensured index %s on %s', index.name, PostRecord.__tablename__)
        except SQLAlchemyError as exc:
            logger.error('Database migration failed: %s', exc)
            raise StoreError('migrate', str(exc)) from exc
        logger.info('Database migration completed successfully')
    return SQLAlchemyPostStore(db)
