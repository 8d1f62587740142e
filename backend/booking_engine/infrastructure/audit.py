from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ..domain.events import AuditEvent
from ..domain.repositories import AuditSink
from ..models import ReservationLog
from ..utils.audit_log import emit_audit_log


class LoggingAuditSink(AuditSink):
    """Writes the JSON audit line only."""

    async def emit(self, event: AuditEvent) -> None:
        emit_audit_log(
            action=f"booking.{event.kind.value}",  # type: ignore[arg-type]
            initiator="guest" if event.actor.is_guest else "staff",
            booking_id=event.booking_id,
            unit_id=event.unit_id,
            actor_id=event.actor.user_id,
            actor_name=event.actor.name,
            status_from=event.status_from,
            status_to=event.status_to,
            summary=event.summary,
        )


class SqlAlchemyAuditSink(LoggingAuditSink):
    """Also persists a reservation_logs row, in a session of its own."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self.session_factory = session_factory

    async def emit(self, event: AuditEvent) -> None:
        await super().emit(event)
        async with self.session_factory() as session, session.begin():
            session.add(
                ReservationLog(
                    booking_id=event.booking_id,
                    unit_id=event.unit_id,
                    type=event.kind,
                    source=event.actor.source,
                    performed_by_user_id=event.actor.user_id,
                    performed_by_name=event.actor.name,
                    details=event.summary,
                    timestamp=event.occurred_at,
                )
            )
