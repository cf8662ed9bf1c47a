"""
Tenant Entity

An organization/customer account. A user may belong to several.
"""

from datetime import datetime
from uuid import UUID, uuid4

from sqlmodel import Column, DateTime, Field, SQLModel

from src.domain.base import utcnow


class Tenant(SQLModel, table=True):
    """
    Tenant entity - organization that owns memberships.

    Business Rules:
    - Slug is unique and used in portal URLs
    - Never physically deleted
    """

    __tablename__ = "tenants"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    legal_name: str = Field(max_length=255)
    slug: str = Field(max_length=100, unique=True, index=True)

    created_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))
