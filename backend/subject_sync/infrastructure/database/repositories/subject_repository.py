"""Concrete repository implementation for Subject backed by SQLAlchemy."""

from datetime import datetime, timezone

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from subject_sync.application.interfaces import SubjectRepository
from subject_sync.domain.entities import Subject
from subject_sync.infrastructure.database.models import SubjectModel


def _parse_iso(value: str) -> datetime:
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def _format_iso(value: datetime) -> str:
    # SQLite hands back naive datetimes; everything is stored in UTC
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    value = value.astimezone(timezone.utc)
    return value.strftime("%Y-%m-%dT%H:%M:%S.") + f"{value.microsecond // 1000:03d}Z"


class SQLAlchemySubjectRepository(SubjectRepository):
    """Implements the SubjectRepository port using SQLAlchemy async sessions."""

    def __init__(self, session: AsyncSession):
        self._session = session

    def _to_entity(self, model: SubjectModel) -> Subject:
        """Map ORM model → domain entity."""
        return Subject(
            id=model.id,
            name=model.name,
            birth_datetime=_format_iso(model.birth_datetime),
            city=model.city,
            nation=model.nation,
            latitude=model.latitude,
            longitude=model.longitude,
            timezone=model.timezone,
            rodens_rating=model.rodens_rating,
            tags=tuple(model.tags) if model.tags is not None else None,
            notes=model.notes,
            created_at=model.created_at,
            updated_at=model.updated_at,
        )

    def _to_model(self, entity: Subject, owner_id: str) -> SubjectModel:
        """Map domain entity → ORM model (for creation)."""
        now = datetime.now(timezone.utc)
        return SubjectModel(
            id=entity.id,
            owner_id=owner_id,
            name=entity.name,
            birth_datetime=_parse_iso(entity.birth_datetime),
            city=entity.city,
            nation=entity.nation,
            latitude=entity.latitude,
            longitude=entity.longitude,
            timezone=entity.timezone,
            rodens_rating=entity.rodens_rating,
            tags=list(entity.tags) if entity.tags is not None else None,
            notes=entity.notes,
            created_at=entity.created_at or now,
            updated_at=entity.updated_at or now,
        )

    async def _get_owned(self, subject_id: str, owner_id: str) -> SubjectModel | None:
        stmt = select(SubjectModel).where(
            SubjectModel.id == subject_id, SubjectModel.owner_id == owner_id
        )
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_id(self, subject_id: str, owner_id: str) -> Subject | None:
        model = await self._get_owned(subject_id, owner_id)
        return self._to_entity(model) if model else None

    async def get_all(self, owner_id: str, *, limit: int | None = None) -> list[Subject]:
        stmt = (
            select(SubjectModel)
            .where(SubjectModel.owner_id == owner_id)
            .order_by(SubjectModel.created_at.desc())
        )
        if limit is not None:
            stmt = stmt.limit(limit)
        result = await self._session.execute(stmt)
        return [self._to_entity(row) for row in result.scalars().all()]

    async def count(self, owner_id: str) -> int:
        stmt = select(func.count()).select_from(SubjectModel).where(
            SubjectModel.owner_id == owner_id
        )
        result = await self._session.execute(stmt)
        return int(result.scalar_one())

    async def create(self, subject: Subject, owner_id: str) -> Subject:
        model = self._to_model(subject, owner_id)
        self._session.add(model)
        await self._session.flush()
        return self._to_entity(model)

    async def update(self, subject: Subject, owner_id: str) -> Subject:
        model = await self._get_owned(subject.id, owner_id)
        if model is None:
            raise ValueError(f"Subject {subject.id} not found in database")
        model.name = subject.name
        model.birth_datetime = _parse_iso(subject.birth_datetime)
        model.city = subject.city
        model.nation = subject.nation
        model.latitude = subject.latitude
        model.longitude = subject.longitude
        model.timezone = subject.timezone
        model.rodens_rating = subject.rodens_rating
        model.tags = list(subject.tags) if subject.tags is not None else None
        model.notes = subject.notes
        model.updated_at = datetime.now(timezone.utc)
        await self._session.flush()
        return self._to_entity(model)

    async def delete(self, subject_id: str, owner_id: str) -> bool:
        model = await self._get_owned(subject_id, owner_id)
        if model is None:
            return False
        await self._session.delete(model)
        await self._session.flush()
        return True

    async def delete_many(self, subject_ids: list[str], owner_id: str) -> int:
        stmt = delete(SubjectModel).where(
            SubjectModel.id.in_(subject_ids), SubjectModel.owner_id == owner_id
        )
        result = await self._session.execute(stmt)
        await self._session.flush()
        return int(result.rowcount or 0)
