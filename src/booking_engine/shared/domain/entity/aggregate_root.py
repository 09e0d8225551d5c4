from typing import Generic

from booking_engine.shared.domain.entity.domain_event import DomainEvent
from booking_engine.shared.domain.entity.entity import ID, Entity


class AggregateRoot(Entity[ID], Generic[ID]):
    """集約ルート

    状態遷移で発生したドメインイベントを保持し、
    永続化後にアプリケーション層が取り出して処理する。
    """

    def __init__(self, id: ID) -> None:
        super().__init__(id)
        self._events: list[DomainEvent] = []

    def _record(self, event: DomainEvent) -> None:
        self._events.append(event)

    def pull_events(self) -> list[DomainEvent]:
        """蓄積されたイベントを取り出してクリアする"""
        events, self._events = self._events, []
        return events
