"""
TokenRecord Entity

Spent magic links and signed-out access tokens.
"""

from datetime import datetime
from uuid import UUID, uuid4

from sqlmodel import Column, DateTime, Field, Index, SQLModel

from src.domain.base import utcnow
from .enums import TokenKind


class TokenRecord(SQLModel, table=True):
    """
    TokenRecord entity - one redeemed magic-link nonce or one revoked
    access token.

    Business Rules:
    - Only the SHA-256 digest is stored, never the token itself
    - A digest is recorded at most once (redeeming twice fails)
    - expires_at is the token's own expiry; past it the JWT check already
      rejects the token, so the row can be pruned
    """

    __tablename__ = "token_records"

    id: UUID = Field(default_factory=uuid4, primary_key=True)

    digest: str = Field(max_length=64, unique=True)
    kind: TokenKind

    created_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))
    expires_at: datetime = Field(sa_column=Column(DateTime, nullable=False))

    __table_args__ = (Index("idx_token_record_expires_at", "expires_at"),)
