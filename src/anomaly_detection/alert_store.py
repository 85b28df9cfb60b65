"""Alert persistence for detected anomalies.

The detector never deduplicates; stores decide whether an event for a
``(symbol, kind, observed_date)`` already on record becomes a new alert.
"""

import logging
import uuid
from abc import ABC, abstractmethod
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Dict, List, Optional, Tuple

from sqlalchemy import select
from sqlalchemy.orm import sessionmaker

from src.db.models import AlertRow, StockRow

from .config import AnomalyKind, AnomalySeverity
from .detector import AnomalyEvent

logger = logging.getLogger(__name__)

DedupKey = Tuple[str, str, date]


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _new_id() -> str:
    return uuid.uuid4().hex[:16]


def _dedup_key(event: AnomalyEvent) -> DedupKey:
    return (event.symbol, event.kind.value, event.observed_date)


@dataclass
class Alert:
    """Stored alert derived from an AnomalyEvent."""

    symbol: str
    kind: AnomalyKind
    severity: AnomalySeverity
    z_score: Decimal
    message: str
    observed_date: date
    alert_id: str = field(default_factory=_new_id)
    is_read: bool = False
    created_at: datetime = field(default_factory=_utc_now)

    @classmethod
    def from_event(cls, event: AnomalyEvent) -> "Alert":
        return cls(
            symbol=event.symbol,
            kind=event.kind,
            severity=event.severity,
            z_score=event.z_score,
            message=event.message,
            observed_date=event.observed_date,
        )


class AlertStore(ABC):
    """Sink for anomaly events."""

    @abstractmethod
    def create_alert(self, event: AnomalyEvent) -> Alert:
        """Persist an event, or return the existing alert it duplicates."""


class InMemoryAlertStore(AlertStore):
    """Process-local alert store."""

    def __init__(self, dedup: bool = True):
        self.dedup = dedup
        self._alerts: Dict[str, Alert] = {}
        self._by_key: Dict[DedupKey, str] = {}

    def create_alert(self, event: AnomalyEvent) -> Alert:
        key = _dedup_key(event)
        if self.dedup and key in self._by_key:
            logger.debug("Duplicate %s alert for %s on %s", event.kind.value, event.symbol, event.observed_date)
            return self._alerts[self._by_key[key]]

        alert = Alert.from_event(event)
        self._alerts[alert.alert_id] = alert
        self._by_key.setdefault(key, alert.alert_id)
        return alert

    def list_alerts(self, symbol: Optional[str] = None, unread_only: bool = False) -> List[Alert]:
        """Alerts newest first, optionally filtered."""
        alerts = [
            a for a in self._alerts.values()
            if (symbol is None or a.symbol == symbol) and not (unread_only and a.is_read)
        ]
        return sorted(alerts, key=lambda a: a.created_at, reverse=True)

    def mark_read(self, alert_id: str) -> Alert:
        alert = self._alerts.get(alert_id)
        if alert is None:
            raise KeyError(f"Alert not found: {alert_id}")
        alert.is_read = True
        return alert

    def severity_distribution(self) -> Dict[str, int]:
        dist: Dict[str, int] = defaultdict(int)
        for alert in self._alerts.values():
            dist[alert.severity.value] += 1
        return dict(dist)

    def __len__(self) -> int:
        return len(self._alerts)


class SqlAlertStore(AlertStore):
    """Alert store writing to the ``alerts`` table."""

    def __init__(self, session_factory: sessionmaker, dedup: bool = True):
        self._session_factory = session_factory
        self.dedup = dedup

    def create_alert(self, event: AnomalyEvent) -> Alert:
        with self._session_factory() as session:
            stock = session.scalars(select(StockRow).where(StockRow.symbol == event.symbol)).first()
            if stock is None:
                stock = StockRow(symbol=event.symbol, name="")
                session.add(stock)
                session.flush()

            if self.dedup:
                existing = session.scalars(
                    select(AlertRow).where(
                        AlertRow.stock_id == stock.id,
                        AlertRow.type == event.kind.value,
                        AlertRow.observed_date == event.observed_date,
                    )
                ).first()
                if existing is not None:
                    return self._to_alert(existing, event.symbol)

            alert = Alert.from_event(event)
            session.add(
                AlertRow(
                    alert_id=alert.alert_id,
                    stock_id=stock.id,
                    type=alert.kind.value,
                    severity=alert.severity.value,
                    z_score=str(alert.z_score),
                    message=alert.message,
                    observed_date=alert.observed_date,
                    is_read=False,
                    created_at=alert.created_at,
                )
            )
            session.commit()
            return alert

    def list_alerts(self, symbol: Optional[str] = None) -> List[Alert]:
        stmt = select(AlertRow, StockRow.symbol).join(StockRow, AlertRow.stock_id == StockRow.id)
        if symbol is not None:
            stmt = stmt.where(StockRow.symbol == symbol)
        stmt = stmt.order_by(AlertRow.id.desc())
        with self._session_factory() as session:
            return [self._to_alert(row, sym) for row, sym in session.execute(stmt)]

    @staticmethod
    def _to_alert(row: AlertRow, symbol: str) -> Alert:
        return Alert(
            symbol=symbol,
            kind=AnomalyKind(row.type),
            severity=AnomalySeverity(row.severity),
            z_score=Decimal(row.z_score),
            message=row.message,
            observed_date=row.observed_date,
            alert_id=row.alert_id,
            is_read=row.is_read,
            created_at=row.created_at,
        )
