"""
SQLAlchemy models for the database.
Maps domain entities to tables of the Supabase Postgres database.
"""

import uuid

from sqlalchemy import (
    Column, Integer, String, DateTime, Text, Numeric, Date, ForeignKey,
    Index, CheckConstraint, UniqueConstraint,
)
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from .database import Base


def _new_id() -> str:
    return str(uuid.uuid4())


class UserProfileModel(Base):
    """User profile table - extends Supabase auth.users"""
    __tablename__ = 'profiles'

    id = Column(UUID(as_uuid=False), primary_key=True)
    email = Column(String(255), nullable=False, unique=True)
    full_name = Column(String(255))

    # Timestamps
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # Relationships
    roles = relationship("UserRoleModel", back_populates="user", cascade="all, delete-orphan", lazy="selectin")
    time_entries = relationship("TimeEntryModel", back_populates="user", foreign_keys="TimeEntryModel.user_id")


class UserRoleModel(Base):
    """Role assignments. A user without a row here has the plain user role."""
    __tablename__ = 'user_roles'

    id = Column(UUID(as_uuid=False), primary_key=True, default=_new_id)
    user_id = Column(UUID(as_uuid=False), ForeignKey('profiles.id', ondelete='CASCADE'), nullable=False)
    role = Column(String(20), nullable=False, default='user')

    user = relationship("UserProfileModel", back_populates="roles")

    __table_args__ = (
        UniqueConstraint('user_id', 'role', name='unique_user_role'),
        CheckConstraint("role IN ('user', 'admin')", name='user_role_valid'),
    )


class ClientModel(Base):
    """Client table"""
    __tablename__ = 'clients'

    id = Column(UUID(as_uuid=False), primary_key=True, default=_new_id)
    name = Column(String(255), nullable=False)

    # Timestamps
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # Relationships
    projects = relationship("ProjectModel", back_populates="client")


class ProjectModel(Base):
    """Project table"""
    __tablename__ = 'projects'

    id = Column(UUID(as_uuid=False), primary_key=True, default=_new_id)
    name = Column(String(255), nullable=False)
    client_id = Column(UUID(as_uuid=False), ForeignKey('clients.id'), nullable=False)

    # Timestamps
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # Relationships
    client = relationship("ClientModel", back_populates="projects", lazy="joined")
    time_entries = relationship("TimeEntryModel", back_populates="project")

    __table_args__ = (
        Index('idx_projects_client', 'client_id'),
    )


class TimeEntryModel(Base):
    """Time entry table"""
    __tablename__ = 'time_entries'

    id = Column(UUID(as_uuid=False), primary_key=True, default=_new_id)
    user_id = Column(UUID(as_uuid=False), ForeignKey('profiles.id'), nullable=False)
    project_id = Column(UUID(as_uuid=False), ForeignKey('projects.id'), nullable=False)

    date = Column(Date, nullable=False)
    hours = Column(Numeric(5, 2), nullable=False)
    description = Column(Text)

    # Approval workflow
    status = Column(String(20), nullable=False, default='draft')
    approved_at = Column(DateTime(timezone=True))
    approved_by = Column(UUID(as_uuid=False), ForeignKey('profiles.id'))
    rejection_comment = Column(Text)

    # Optimistic concurrency
    version = Column(Integer, nullable=False, default=1)

    # Timestamps
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # Relationships
    user = relationship("UserProfileModel", back_populates="time_entries", foreign_keys=[user_id], lazy="joined")
    project = relationship("ProjectModel", back_populates="time_entries", lazy="joined")

    # Constraints and indexes
    __table_args__ = (
        Index('idx_time_entries_user_date', 'user_id', 'date'),
        Index('idx_time_entries_project', 'project_id'),
        Index('idx_time_entries_status', 'status'),
        CheckConstraint('hours > 0 AND hours <= 24', name='time_entry_hours_range'),
        CheckConstraint("status IN ('draft', 'pending', 'approved')", name='time_entry_status_valid'),
        CheckConstraint(
            "(status = 'approved') = (approved_by IS NOT NULL AND approved_at IS NOT NULL)",
            name='time_entry_approval_fields',
        ),
    )


async def create_all_tables(engine):
    """Create all tables in the database"""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def drop_all_tables(engine):
    """Drop all tables in the database"""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
