"""
Shared test fixtures.
"""

from datetime import datetime

import pytest
from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, Table, create_engine
from sqlalchemy.orm import DeclarativeBase, Mapped, Session, mapped_column, relationship
from sqlalchemy.pool import StaticPool

from softscope.adapters.sqlalchemy import SessionManager, SQLAlchemyExecutor
from softscope.client import DataClient
from softscope.core.types import FieldKind, FieldMetadata, ModelMetadata, SchemaMetadata
from softscope.scoping import extend_with_soft_delete

# === Test Models ===


class Base(DeclarativeBase):
    pass


post_tags = Table(
    "post_tags",
    Base.metadata,
    Column("post_id", ForeignKey("posts.id"), primary_key=True),
    Column("tag_id", ForeignKey("tags.id"), primary_key=True),
)


class User(Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(primary_key=True)
    email: Mapped[str] = mapped_column(String(255), unique=True)
    name: Mapped[str] = mapped_column(String(255))
    deleted_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)

    posts: Mapped[list["Post"]] = relationship("Post", back_populates="author")
    comments: Mapped[list["Comment"]] = relationship("Comment", back_populates="author")
    profile: Mapped["Profile | None"] = relationship("Profile", back_populates="user", uselist=False)


class Post(Base):
    __tablename__ = "posts"

    id: Mapped[int] = mapped_column(primary_key=True)
    title: Mapped[str] = mapped_column(String(255))
    author_id: Mapped[int] = mapped_column(ForeignKey("users.id"))
    published: Mapped[bool] = mapped_column(Boolean, default=True)
    views: Mapped[int] = mapped_column(Integer, default=0)
    deleted_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)

    author: Mapped["User"] = relationship("User", back_populates="posts")
    comments: Mapped[list["Comment"]] = relationship("Comment", back_populates="post")
    tags: Mapped[list["Tag"]] = relationship("Tag", secondary=post_tags, back_populates="posts")


class Comment(Base):
    __tablename__ = "comments"

    id: Mapped[int] = mapped_column(primary_key=True)
    body: Mapped[str] = mapped_column(String(500))
    post_id: Mapped[int] = mapped_column(ForeignKey("posts.id"))
    author_id: Mapped[int] = mapped_column(ForeignKey("users.id"))
    deleted_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)

    post: Mapped["Post"] = relationship("Post", back_populates="comments")
    author: Mapped["User"] = relationship("User", back_populates="comments")


class Profile(Base):
    __tablename__ = "profiles"

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), unique=True)
    bio: Mapped[str] = mapped_column(String(500))

    user: Mapped["User"] = relationship("User", back_populates="profile")


class Tag(Base):
    __tablename__ = "tags"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(100), unique=True)

    posts: Mapped[list["Post"]] = relationship("Post", secondary=post_tags, back_populates="tags")


TEST_MODELS = [User, Post, Comment, Profile, Tag]

# === Scenario Data ===

ACTIVE_USER_EMAIL = "active@example.com"
ACTIVE_USER_2_EMAIL = "active2@example.com"
DELETED_USER_EMAIL = "deleted@example.com"
ACTIVE_POST_TITLE = "Active post"
DELETED_POST_TITLE = "Deleted post"
ORPHANED_POST_TITLE = "Post by deleted user"
DELETED_AT = datetime(2024, 1, 1, 12, 0, 0)


# === Fixtures ===


@pytest.fixture
def engine():
    """Create an in-memory SQLite engine."""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session(engine):
    """Create a database session."""
    with Session(engine) as session:
        yield session


@pytest.fixture
def executor(session):
    """Executor bound to the test session."""
    return SQLAlchemyExecutor(TEST_MODELS, session=session)


@pytest.fixture
def base_client(executor):
    """Client without any hooks."""
    return DataClient(executor)


@pytest.fixture
def client(base_client):
    """Client with soft-delete scoping."""
    return extend_with_soft_delete(base_client)


@pytest.fixture
def session_manager(engine):
    """Session manager over the test engine."""
    return SessionManager(engine)


@pytest.fixture
def seeded_session(session):
    """
    Session with the soft-delete scenario.

    Users: two active, one deleted. Posts: the first active user has an
    active and a deleted post; the deleted user has one active post.
    Comments on the active post: one active, one deleted.
    """
    active = User(id=1, email=ACTIVE_USER_EMAIL, name="Active User")
    active_2 = User(id=2, email=ACTIVE_USER_2_EMAIL, name="Active User 2")
    deleted = User(id=3, email=DELETED_USER_EMAIL, name="Deleted User", deleted_at=DELETED_AT)
    session.add_all([active, active_2, deleted])

    session.add_all(
        [
            Post(id=1, title=ACTIVE_POST_TITLE, author_id=1, views=10),
            Post(id=2, title=DELETED_POST_TITLE, author_id=1, views=5, deleted_at=DELETED_AT),
            Post(id=3, title=ORPHANED_POST_TITLE, author_id=3, views=1),
        ]
    )
    session.add_all(
        [
            Comment(id=1, body="Visible comment", post_id=1, author_id=2),
            Comment(id=2, body="Removed comment", post_id=1, author_id=2, deleted_at=DELETED_AT),
        ]
    )
    session.add(Profile(id=1, user_id=1, bio="Writes things"))
    session.add_all([Tag(id=1, name="python"), Tag(id=2, name="sql")])
    session.flush()
    post = session.get(Post, 1)
    post.tags.extend([session.get(Tag, 1), session.get(Tag, 2)])

    session.commit()
    session.expunge_all()
    return session


@pytest.fixture
def sample_schema():
    """Hand-built schema mirroring the test models."""

    def scalar(name: str) -> FieldMetadata:
        return FieldMetadata(name=name, kind=FieldKind.SCALAR)

    def relation(name: str, target: str, is_list: bool) -> FieldMetadata:
        return FieldMetadata(name=name, kind=FieldKind.RELATION, target_model=target, is_list=is_list)

    def model(name: str, *fields: FieldMetadata) -> ModelMetadata:
        return ModelMetadata(name=name, fields={f.name: f for f in fields}, primary_keys=["id"])

    return SchemaMetadata(
        models={
            "User": model(
                "User",
                scalar("id"),
                scalar("email"),
                scalar("deleted_at"),
                relation("posts", "Post", True),
                relation("comments", "Comment", True),
                relation("profile", "Profile", False),
            ),
            "Post": model(
                "Post",
                scalar("id"),
                scalar("title"),
                scalar("deleted_at"),
                relation("author", "User", False),
                relation("comments", "Comment", True),
                relation("tags", "Tag", True),
            ),
            "Comment": model(
                "Comment",
                scalar("id"),
                scalar("body"),
                scalar("deleted_at"),
                relation("post", "Post", False),
                relation("author", "User", False),
            ),
            "Profile": model(
                "Profile",
                scalar("id"),
                scalar("bio"),
                relation("user", "User", False),
            ),
            "Tag": model(
                "Tag",
                scalar("id"),
                scalar("name"),
                relation("posts", "Post", True),
            ),
        }
    )
