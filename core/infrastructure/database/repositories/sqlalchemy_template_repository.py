"""SQLAlchemy Content Template Repository."""
from typing import Optional

from sqlalchemy import and_, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from core.application.interfaces import ITemplateRepository
from core.domain.entities import ContentTemplate
from core.infrastructure.database.models import ContentTemplateModel


class SQLAlchemyTemplateRepository(ITemplateRepository):
    """Content templates stored in the content_templates table."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory

    async def get_template(self, content_key: str, channel: Optional[str]) -> Optional[ContentTemplate]:
        channel_clause = (
            ContentTemplateModel.channel.is_(None) if channel is None else ContentTemplateModel.channel == channel
        )
        async with self.session_factory() as session:
            result = await session.execute(
                select(ContentTemplateModel)
                .where(and_(ContentTemplateModel.content_key == content_key, channel_clause))
                .limit(1)
            )
            model = result.scalar_one_or_none()
        if model is None:
            return None
        return ContentTemplate(
            content_key=model.content_key,
            channel=model.channel,
            primary_text=model.primary_text,
            secondary_text=model.secondary_text,
            tertiary_text=model.tertiary_text,
            default_variables=dict(model.default_variables or {}),
        )
