from datetime import datetime

from sqlalchemy import delete
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from src.app.repositories.token_record_repository import ITokenRecordRepository
from src.domain.entities import TokenKind, TokenRecord


class TokenRecordRepository(ITokenRecordRepository):
    """TokenRecord repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def exists(self, digest: str, kind: TokenKind) -> bool:
        stmt = select(TokenRecord.id).where(
            TokenRecord.digest == digest, TokenRecord.kind == kind
        )
        result = await self.session.execute(stmt)
        return result.first() is not None

    async def create(self, record: TokenRecord) -> TokenRecord:
        self.session.add(record)
        await self.session.flush()
        return record

    async def delete_expired(self, now: datetime) -> int:
        stmt = delete(TokenRecord).where(TokenRecord.expires_at <= now)
        result = await self.session.execute(stmt)
        return result.rowcount or 0
