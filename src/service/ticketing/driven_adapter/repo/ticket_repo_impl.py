from datetime import datetime
from typing import List, Optional, Sequence
from uuid import UUID

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from src.platform.logging.loguru_io import Logger
from src.service.ticketing.app.interface.i_ticket_repo import ITicketRepo
from src.service.ticketing.domain.entity.ticket_entity import TicketEntity
from src.service.ticketing.domain.enum.ticket_status import TicketStatus
from src.service.ticketing.driven_adapter.model.ticket_model import TicketModel


class TicketRepoImpl(ITicketRepo):
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    @staticmethod
    def _model_to_entity(model: TicketModel) -> TicketEntity:
        return TicketEntity(
            id=model.id,
            order_id=model.order_id,
            event_id=model.event_id,
            tier_id=model.tier_id,
            holder_id=model.holder_id,
            price=model.price,
            attendee_name=model.attendee_name,
            attendee_email=model.attendee_email,
            attendee_phone=model.attendee_phone,
            status=TicketStatus(model.status),
            credential=model.credential,
            checked_in_at=model.checked_in_at,
            created_at=model.created_at,
            updated_at=model.updated_at,
        )

    @Logger.io
    async def create_many(self, *, tickets: Sequence[TicketEntity]) -> List[TicketEntity]:
        self.session.add_all(
            [
                TicketModel(
                    id=ticket.id,
                    order_id=ticket.order_id,
                    event_id=ticket.event_id,
                    tier_id=ticket.tier_id,
                    holder_id=ticket.holder_id,
                    price=ticket.price,
                    attendee_name=ticket.attendee_name,
                    attendee_email=ticket.attendee_email,
                    attendee_phone=ticket.attendee_phone,
                    status=ticket.status.value,
                    credential=ticket.credential,
                )
                for ticket in tickets
            ]
        )
        await self.session.flush()
        return list(tickets)

    @Logger.io
    async def get_by_id(self, *, ticket_id: UUID) -> Optional[TicketEntity]:
        result = await self.session.execute(
            select(TicketModel)
            .where(TicketModel.id == ticket_id)
            .execution_options(populate_existing=True)
        )
        model = result.scalar_one_or_none()
        return self._model_to_entity(model) if model else None

    @Logger.io
    async def get_by_id_for_update(self, *, ticket_id: UUID) -> Optional[TicketEntity]:
        result = await self.session.execute(
            select(TicketModel)
            .where(TicketModel.id == ticket_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        model = result.scalar_one_or_none()
        return self._model_to_entity(model) if model else None

    @Logger.io
    async def list_by_order(self, *, order_id: UUID) -> List[TicketEntity]:
        result = await self.session.execute(
            select(TicketModel)
            .where(TicketModel.order_id == order_id)
            .order_by(TicketModel.id)
            .execution_options(populate_existing=True)
        )
        return [self._model_to_entity(model) for model in result.scalars().all()]

    @Logger.io
    async def list_by_order_for_update(self, *, order_id: UUID) -> List[TicketEntity]:
        result = await self.session.execute(
            select(TicketModel)
            .where(TicketModel.order_id == order_id)
            .order_by(TicketModel.id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        return [self._model_to_entity(model) for model in result.scalars().all()]

    @Logger.io
    async def list_by_holder(self, *, holder_id: int) -> List[TicketEntity]:
        result = await self.session.execute(
            select(TicketModel)
            .where(TicketModel.holder_id == holder_id)
            .order_by(TicketModel.created_at.desc())
        )
        return [self._model_to_entity(model) for model in result.scalars().all()]

    @Logger.io
    async def update(self, *, ticket: TicketEntity) -> TicketEntity:
        await self.session.execute(
            update(TicketModel)
            .where(TicketModel.id == ticket.id)
            .values(self._mutable_values(ticket))
            .execution_options(synchronize_session=False)
        )
        return ticket

    @Logger.io
    async def update_many(self, *, tickets: Sequence[TicketEntity]) -> None:
        for ticket in tickets:
            await self.session.execute(
                update(TicketModel)
                .where(TicketModel.id == ticket.id)
                .values(self._mutable_values(ticket))
                .execution_options(synchronize_session=False)
            )

    @Logger.io
    async def check_in_if_not_scanned(
        self, *, ticket_id: UUID, credential: str, checked_in_at: datetime
    ) -> Optional[datetime]:
        result = await self.session.execute(
            update(TicketModel)
            .where(
                TicketModel.id == ticket_id,
                TicketModel.credential == credential,
                TicketModel.status == TicketStatus.CONFIRMED.value,
                TicketModel.checked_in_at.is_(None),
            )
            .values(
                status=TicketStatus.CHECKED_IN.value,
                checked_in_at=checked_in_at,
                updated_at=checked_in_at,
            )
            .returning(TicketModel.checked_in_at)
            .execution_options(synchronize_session=False)
        )
        return result.scalar_one_or_none()

    @Logger.io
    async def count_by_orders(self, *, order_ids: Sequence[UUID]) -> dict[UUID, int]:
        if not order_ids:
            return {}
        result = await self.session.execute(
            select(TicketModel.order_id, func.count())
            .where(TicketModel.order_id.in_(list(order_ids)))
            .group_by(TicketModel.order_id)
        )
        return {order_id: count for order_id, count in result.all()}

    @staticmethod
    def _mutable_values(ticket: TicketEntity) -> dict:
        return {
            'price': ticket.price,
            'attendee_name': ticket.attendee_name,
            'attendee_email': ticket.attendee_email,
            'attendee_phone': ticket.attendee_phone,
            'status': ticket.status.value,
            'credential': ticket.credential,
            'checked_in_at': ticket.checked_in_at,
            'updated_at': ticket.updated_at,
        }
