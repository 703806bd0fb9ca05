from flask_sqlalchemy import SQLAlchemy

from domain import Post, utcnow, ID_LENGTH, TITLE_MAX_LENGTH

db = SQLAlchemy()


class PostRecord(db.Model):
    __tablename__ = 'posts'

    id = db.Column(db.String(ID_LENGTH), primary_key=True)
    title = db.Column(db.String(TITLE_MAX_LENGTH), nullable=False)
    content = db.Column(db.Text, nullable=False)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    __table_args__ = (
        db.Index('ix_posts_created_at_desc', created_at.desc()),
        db.Index(
            'ix_posts_title_content', 'title', 'content',
            postgresql_using='gin',
            postgresql_ops={'title': 'gin_trgm_ops', 'content': 'gin_trgm_ops'},
            mysql_prefix='FULLTEXT',
        ),
    )

    def to_post(self) -> Post:
        return Post(
            id=self.id,
            title=self.title,
            content=self.content,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )
