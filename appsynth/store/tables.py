"""
Database models (SQLAlchemy ORM models)

Tables backing SqlArtifactStore:
- ProjectRow: one synthesis request and its status
- EntityRow: generated data-schema records (append-only, no unique name)
- ComponentRow / PageRow: generated source files, unique per (project_id, name)
- ChatMessageRow: conversation ledger, ordered by its autoincrement id
"""
import uuid

from sqlalchemy import JSON, Column, DateTime, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import declarative_base, relationship
from sqlalchemy.sql import func

Base = declarative_base()


def generate_uuid():
    """Generate a new UUID4 string"""
    return str(uuid.uuid4())


class ProjectRow(Base):
    __tablename__ = "projects"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    name = Column(String(255), nullable=False)
    prompt = Column(Text, nullable=False)
    status = Column(String(32), nullable=False, default="pending")
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Relationships
    entities = relationship("EntityRow", back_populates="project", cascade="all, delete-orphan")
    components = relationship("ComponentRow", back_populates="project", cascade="all, delete-orphan")
    pages = relationship("PageRow", back_populates="project", cascade="all, delete-orphan")
    messages = relationship("ChatMessageRow", back_populates="project", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<ProjectRow(id={self.id}, name='{self.name}', status='{self.status}')>"


class EntityRow(Base):
    """
    Schema record. No unique constraint on name: re-running synthesis on a
    project appends a second copy.
    """
    __tablename__ = "entities"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    project_id = Column(String(36), ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    fields = Column(JSON, nullable=False)  # {"title": "String", ...}, key order preserved
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    project = relationship("ProjectRow", back_populates="entities")


class ComponentRow(Base):
    __tablename__ = "components"
    __table_args__ = (UniqueConstraint("project_id", "name", name="uq_components_project_name"),)

    id = Column(String(36), primary_key=True, default=generate_uuid)
    project_id = Column(String(36), ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    code = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    project = relationship("ProjectRow", back_populates="components")


class PageRow(Base):
    __tablename__ = "pages"
    __table_args__ = (UniqueConstraint("project_id", "name", name="uq_pages_project_name"),)

    id = Column(String(36), primary_key=True, default=generate_uuid)
    project_id = Column(String(36), ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    route = Column(String(500), nullable=False)  # may be an API route, e.g. /api/tasks
    code = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    project = relationship("ProjectRow", back_populates="pages")


class ChatMessageRow(Base):
    __tablename__ = "chat_messages"

    id = Column(Integer, primary_key=True, autoincrement=True)
    project_id = Column(String(36), ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, index=True)
    role = Column(String(16), nullable=False)  # 'user' or 'assistant'
    content = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    project = relationship("ProjectRow", back_populates="messages")
