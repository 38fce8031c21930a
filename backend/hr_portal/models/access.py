from __future__ import annotations
from sqlalchemy.orm import declarative_base, relationship, Mapped, mapped_column
from sqlalchemy import String, Integer, Boolean, ForeignKey, JSON, UniqueConstraint, DateTime, text
from typing import Optional, List

Base = declarative_base()


# --- Section catalog ---
class AppSection(Base):
    __tablename__ = 'app_sections'
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    key: Mapped[str] = mapped_column(String(64), unique=True, nullable=False, index=True)
    label: Mapped[str] = mapped_column(String(128), nullable=False)
    path: Mapped[str] = mapped_column(String(255), nullable=False)
    group: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    sort_order: Mapped[int] = mapped_column(Integer, default=0)
    actions: Mapped[List[str]] = mapped_column(JSON, default=lambda: ['VIEW'])
    is_enabled: Mapped[bool] = mapped_column(Boolean, default=True)
    updated_at: Mapped[str] = mapped_column(DateTime(timezone=True), server_default=text('CURRENT_TIMESTAMP'), server_onupdate=text('CURRENT_TIMESTAMP'))

    grants = relationship('RoleSectionAccess', back_populates='section', cascade='all, delete-orphan')


class Role(Base):
    __tablename__ = 'roles'
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    key: Mapped[str] = mapped_column(String(64), unique=True, nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(128), nullable=False)
    short_name: Mapped[Optional[str]] = mapped_column(String(32))
    description: Mapped[Optional[str]] = mapped_column(String(255))
    is_director: Mapped[bool] = mapped_column(Boolean, default=False)
    updated_at: Mapped[str] = mapped_column(DateTime(timezone=True), server_default=text('CURRENT_TIMESTAMP'), server_onupdate=text('CURRENT_TIMESTAMP'))

    section_access = relationship('RoleSectionAccess', back_populates='role', cascade='all, delete-orphan')


class RoleSectionAccess(Base):
    __tablename__ = 'role_section_access'
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    role_id: Mapped[int] = mapped_column(ForeignKey('roles.id', ondelete='CASCADE'), nullable=False)
    section_id: Mapped[int] = mapped_column(ForeignKey('app_sections.id', ondelete='CASCADE'), nullable=False)
    allowed_actions: Mapped[List[str]] = mapped_column(JSON, default=lambda: ['VIEW'])

    role = relationship('Role', back_populates='section_access')
    section = relationship('AppSection', back_populates='grants')

    __table_args__ = (UniqueConstraint('role_id', 'section_id', name='uq_role_section'),)


# --- Accounts ---
class Account(Base):
    __tablename__ = 'accounts'
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    employee_code: Mapped[Optional[str]] = mapped_column(String(32), index=True)
    full_name: Mapped[str] = mapped_column(String(128), nullable=False)
    email: Mapped[str] = mapped_column(String(128), unique=True, index=True, nullable=False)
    phone: Mapped[Optional[str]] = mapped_column(String(32))
    role_key: Mapped[str] = mapped_column(String(64), nullable=False, default='EMPLOYEE')
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    login_type: Mapped[str] = mapped_column(String(16), default='PASSWORD')
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    # Optional per-account section list; may hold old alias spellings
    allowed_sections: Mapped[Optional[List[str]]] = mapped_column(JSON, nullable=True)
    created_at: Mapped[str] = mapped_column(DateTime(timezone=True), server_default=text('CURRENT_TIMESTAMP'))

    def set_password(self, raw: str):
        from werkzeug.security import generate_password_hash
        self.password_hash = generate_password_hash(raw)

    def verify_password(self, raw: str) -> bool:
        from werkzeug.security import check_password_hash
        if not self.password_hash:
            return False
        return check_password_hash(self.password_hash, raw)
