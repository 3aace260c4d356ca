from datetime import datetime
from typing import Optional

from sqlalchemy import Boolean, CheckConstraint, DateTime, ForeignKey, Integer, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from src.platform.database.orm_db_setting import Base


class TicketTierModel(Base):
    __tablename__ = 'ticket_tier'

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    event_id: Mapped[int] = mapped_column(
        Integer, ForeignKey('event.id', ondelete='CASCADE'), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default='')
    base_price: Mapped[int] = mapped_column(Integer, nullable=False)
    # limited | unlimited | unset; total_quantity is set only for limited
    capacity_mode: Mapped[str] = mapped_column(String(20), nullable=False, default='unset')
    total_quantity: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    sold_quantity: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    sale_start_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))
    sale_end_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )

    __table_args__ = (
        CheckConstraint('base_price >= 0', name='ck_tier_price_non_negative'),
        CheckConstraint('sold_quantity >= 0', name='ck_tier_sold_non_negative'),
        CheckConstraint(
            "(capacity_mode = 'limited' AND total_quantity >= 1 AND sold_quantity <= total_quantity)"
            " OR (capacity_mode IN ('unlimited', 'unset') AND total_quantity IS NULL)",
            name='ck_tier_capacity',
        ),
    )
