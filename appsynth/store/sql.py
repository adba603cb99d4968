from __future__ import annotations

from contextlib import contextmanager
from typing import Dict, Iterator, Optional

from sqlalchemy import create_engine, select
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from appsynth.errors import PersistenceError
from appsynth.models import (
    STATUS_PENDING,
    Architecture,
    ChatMessage,
    Component,
    Entity,
    Page,
    Project,
)
from appsynth.utils.time import utc_now

from .tables import Base, ChatMessageRow, ComponentRow, EntityRow, PageRow, ProjectRow


def build_engine(database_url: str) -> Engine:
    if database_url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        if database_url in {"sqlite://", "sqlite:///:memory:"}:
            # one shared connection, otherwise every session gets a fresh empty database
            kwargs["poolclass"] = StaticPool
        return create_engine(database_url, echo=False, **kwargs)
    return create_engine(
        database_url,
        echo=False,
        pool_pre_ping=True,
        pool_size=5,
        max_overflow=10,
    )


def _project(row: ProjectRow) -> Project:
    return Project(
        id=row.id,
        prompt=row.prompt,
        name=row.name,
        status=row.status,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def _entity(row: EntityRow) -> Entity:
    return Entity(id=row.id, project_id=row.project_id, name=row.name, fields=dict(row.fields))


def _component(row: ComponentRow) -> Component:
    return Component(id=row.id, project_id=row.project_id, name=row.name, code=row.code)


def _page(row: PageRow) -> Page:
    return Page(id=row.id, project_id=row.project_id, name=row.name, route=row.route, code=row.code)


def _message(row: ChatMessageRow) -> ChatMessage:
    return ChatMessage(
        id=str(row.id),
        project_id=row.project_id,
        role=row.role,
        content=row.content,
        created_at=row.created_at,
    )


class SqlArtifactStore:
    """ArtifactStore on SQLAlchemy. One session and one commit per call."""

    def __init__(self, engine: Engine) -> None:
        self.engine = engine
        self.SessionLocal = sessionmaker(
            autocommit=False, autoflush=False, expire_on_commit=False, bind=engine
        )

    @classmethod
    def from_url(cls, database_url: str) -> "SqlArtifactStore":
        store = cls(build_engine(database_url))
        store.init_db()
        return store

    def init_db(self) -> None:
        Base.metadata.create_all(bind=self.engine)

    @contextmanager
    def _session(self) -> Iterator[Session]:
        session = self.SessionLocal()
        try:
            yield session
            session.commit()
        except SQLAlchemyError as exc:
            session.rollback()
            raise PersistenceError(f"Database write failed: {exc}") from exc
        finally:
            session.close()

    def _require_project(self, session: Session, project_id: str) -> ProjectRow:
        row = session.get(ProjectRow, project_id)
        if row is None:
            raise PersistenceError(f"Project not found: {project_id}")
        return row

    def create_project(self, prompt: str, name: str) -> Project:
        now = utc_now()
        with self._session() as session:
            row = ProjectRow(
                prompt=prompt, name=name, status=STATUS_PENDING, created_at=now, updated_at=now
            )
            session.add(row)
            session.flush()
            return _project(row)

    def get_project(self, project_id: str) -> Optional[Project]:
        with self._session() as session:
            row = session.get(ProjectRow, project_id)
            return _project(row) if row else None

    def set_project_status(self, project_id: str, status: str) -> Project:
        with self._session() as session:
            row = self._require_project(session, project_id)
            row.status = status
            row.updated_at = utc_now()
            session.flush()
            return _project(row)

    def create_entity(self, project_id: str, name: str, fields: Dict[str, str]) -> Entity:
        with self._session() as session:
            self._require_project(session, project_id)
            row = EntityRow(
                project_id=project_id, name=name, fields=dict(fields), created_at=utc_now()
            )
            session.add(row)
            session.flush()
            return _entity(row)

    def upsert_component(self, project_id: str, name: str, code: str) -> Component:
        with self._session() as session:
            self._require_project(session, project_id)
            row = session.scalars(
                select(ComponentRow).where(
                    ComponentRow.project_id == project_id, ComponentRow.name == name
                )
            ).first()
            if row is None:
                row = ComponentRow(
                    project_id=project_id, name=name, code=code, created_at=utc_now()
                )
                session.add(row)
            else:
                row.code = code
            session.flush()
            return _component(row)

    def upsert_page(self, project_id: str, name: str, route: str, code: str) -> Page:
        with self._session() as session:
            self._require_project(session, project_id)
            row = session.scalars(
                select(PageRow).where(PageRow.project_id == project_id, PageRow.name == name)
            ).first()
            if row is None:
                row = PageRow(
                    project_id=project_id, name=name, route=route, code=code, created_at=utc_now()
                )
                session.add(row)
            else:
                row.route = route
                row.code = code
            session.flush()
            return _page(row)

    def append_chat_message(self, project_id: str, role: str, content: str) -> ChatMessage:
        with self._session() as session:
            self._require_project(session, project_id)
            row = ChatMessageRow(
                project_id=project_id, role=role, content=content, created_at=utc_now()
            )
            session.add(row)
            session.flush()
            return _message(row)

    def load_project_architecture(self, project_id: str) -> Architecture:
        with self._session() as session:
            project = self._require_project(session, project_id)
            entities = session.scalars(
                select(EntityRow)
                .where(EntityRow.project_id == project_id)
                .order_by(EntityRow.created_at, EntityRow.id)
            ).all()
            components = session.scalars(
                select(ComponentRow)
                .where(ComponentRow.project_id == project_id)
                .order_by(ComponentRow.created_at, ComponentRow.id)
            ).all()
            pages = session.scalars(
                select(PageRow)
                .where(PageRow.project_id == project_id)
                .order_by(PageRow.created_at, PageRow.id)
            ).all()
            messages = session.scalars(
                select(ChatMessageRow)
                .where(ChatMessageRow.project_id == project_id)
                .order_by(ChatMessageRow.id)
            ).all()
            return Architecture(
                project=_project(project),
                entities=[_entity(row) for row in entities],
                components=[_component(row) for row in components],
                pages=[_page(row) for row in pages],
                messages=[_message(row) for row in messages],
            )
