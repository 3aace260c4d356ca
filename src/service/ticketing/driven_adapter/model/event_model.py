from datetime import datetime
from typing import TYPE_CHECKING, List

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Integer, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.platform.database.orm_db_setting import Base


if TYPE_CHECKING:
    from src.service.ticketing.driven_adapter.model.promo_code_model import PromoCodeModel
    from src.service.ticketing.driven_adapter.model.ticket_tier_model import TicketTierModel


class EventModel(Base):
    __tablename__ = 'event'

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    organizer_id: Mapped[int] = mapped_column(
        Integer, ForeignKey('user.id'), nullable=False, index=True
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default='')
    venue: Mapped[str] = mapped_column(String(255), nullable=False)
    address: Mapped[str] = mapped_column(String(500), nullable=False, default='')
    city: Mapped[str] = mapped_column(String(100), nullable=False, default='', index=True)
    category: Mapped[str] = mapped_column(String(50), nullable=False, default='', index=True)
    start_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    end_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    timezone: Mapped[str] = mapped_column(String(64), nullable=False, default='UTC')
    status: Mapped[str] = mapped_column(String(20), nullable=False, default='draft', index=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )

    tiers: Mapped[List['TicketTierModel']] = relationship(
        'TicketTierModel', cascade='all, delete-orphan', lazy='raise', viewonly=False
    )
    promo_codes: Mapped[List['PromoCodeModel']] = relationship(
        'PromoCodeModel', cascade='all, delete-orphan', lazy='raise'
    )

    __table_args__ = (CheckConstraint('end_at >= start_at', name='ck_event_end_after_start'),)
