# src/storage/store_repository.py
from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import update
from sqlalchemy.orm import Session

from src.core.models import OfferStatus, StoreSettingsUpdate
from src.storage.orm_models import SETTINGS_ID, ConcernORM, OfferORM, StoreSettingsORM
from src.storage.upsert import insert_ignore


class SettingsRepository:
    """Store-wide settings kept in a single row under a well-known id."""

    def __init__(self, session: Session):
        self._session = session

    def _ensure(self) -> StoreSettingsORM:
        insert_ignore(self._session, StoreSettingsORM, {"id": SETTINGS_ID}, ["id"])
        return self._session.get(StoreSettingsORM, SETTINGS_ID)

    def get(self) -> StoreSettingsORM:
        return self._ensure()

    def update(self, changes: StoreSettingsUpdate) -> StoreSettingsORM:
        settings = self._ensure()
        for field, value in changes.model_dump(exclude_unset=True).items():
            setattr(settings, field, value)
        settings.updated_at = datetime.now(timezone.utc)
        self._session.flush()
        return settings


class ConcernRepository:
    def __init__(self, session: Session):
        self._session = session

    def seed(self, concerns: list[dict[str, str]]) -> int:
        """Insert missing concerns by slug. Existing rows are never modified."""
        created = 0
        for concern in concerns:
            if insert_ignore(self._session, ConcernORM, dict(concern), ["slug"]):
                created += 1
        return created


class OfferRepository:
    def __init__(self, session: Session):
        self._session = session

    def get_by_code(self, code: str) -> OfferORM | None:
        return (
            self._session.query(OfferORM)
            .filter(OfferORM.code == code.strip().upper())
            .first()
        )

    def active_homepage_offers(self, now: datetime | None = None) -> list[OfferORM]:
        now = now or datetime.now(timezone.utc)
        # Offer dates are stored as naive UTC
        if now.tzinfo is not None:
            now = now.astimezone(timezone.utc).replace(tzinfo=None)
        return (
            self._session.query(OfferORM)
            .filter(
                OfferORM.status == OfferStatus.ACTIVE.value,
                OfferORM.display_on_homepage.is_(True),
                OfferORM.start_date <= now,
                OfferORM.end_date >= now,
            )
            .order_by(OfferORM.priority.desc(), OfferORM.created_at.desc())
            .all()
        )

    def increment_usage(self, offer_id: str) -> bool:
        result = self._session.execute(
            update(OfferORM)
            .where(OfferORM.id == offer_id)
            .values(usage_count=OfferORM.usage_count + 1)
        )
        return result.rowcount == 1
