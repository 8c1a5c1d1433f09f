from __future__ import annotations

from collections.abc import AsyncIterator
from datetime import datetime
from uuid import UUID, uuid4

import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from chatlist.db import Base, Message, UserProfile
from chatlist.db.session import build_async_engine


class MessageStoreBuilder:
    def __init__(self, session: AsyncSession):
        self.session = session
        self.messages: list[Message] = []

    async def profile(
        self,
        display_name: str | None = None,
        *,
        avatar_url: str | None = None,
        profile_id: UUID | None = None,
    ) -> UserProfile:
        profile = UserProfile(
            id=profile_id or uuid4(),
            display_name=display_name,
            avatar_url=avatar_url,
        )
        self.session.add(profile)
        await self.session.commit()
        return profile

    def message(
        self,
        sender: UserProfile | UUID,
        recipient: UserProfile | UUID,
        content: str,
        created_at: datetime,
        *,
        message_id: UUID | None = None,
    ) -> Message:
        message = Message(
            id=message_id or uuid4(),
            sender_id=sender if isinstance(sender, UUID) else sender.id,
            recipient_id=recipient if isinstance(recipient, UUID) else recipient.id,
            content=content,
            created_at=created_at,
        )
        self.messages.append(message)
        return message

    async def flush(self, order: list[Message] | None = None) -> None:
        for message in order if order is not None else self.messages:
            self.session.add(message)
            await self.session.flush()
        await self.session.commit()


@pytest_asyncio.fixture
async def db_session() -> AsyncIterator[AsyncSession]:
    engine = build_async_engine("sqlite://")
    async with engine.begin() as connection:
        await connection.run_sync(Base.metadata.create_all)
    session_factory = async_sessionmaker(bind=engine, expire_on_commit=False)
    async with session_factory() as session:
        yield session
    await engine.dispose()


@pytest_asyncio.fixture
async def store(db_session: AsyncSession) -> MessageStoreBuilder:
    return MessageStoreBuilder(db_session)
