"""Persistence layer for saved mortgage scenarios.

Saved scenarios are what the comparison view aggregates. Each one is kept
as an opaque JSON record next to the session token of its owner. The store
defaults to SQLite for local development, but accepts any
SQLAlchemy-compatible URL (e.g. PostgreSQL/MySQL).
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy import Column, DateTime, Integer, String, Text, create_engine, select
from sqlalchemy.orm import declarative_base, sessionmaker

from mortgage_calc.comparison import scenario_from_dict
from mortgage_calc.data_models import MortgageScenario
from mortgage_calc.utils import to_jsonable

Base = declarative_base()


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ScenarioModel(Base):
    __tablename__ = "mortgage_scenarios"

    seq = Column(Integer, primary_key=True, autoincrement=True)
    id = Column(String(64), unique=True, nullable=False)
    user_token = Column(String(64), index=True, nullable=False)
    name = Column(String(255), nullable=False)
    scenario_json = Column(Text, nullable=False)
    created_at = Column(DateTime, default=_utcnow, nullable=False)


class ScenarioStore:
    """Database-backed scenario store."""

    def __init__(self, url: str, *, max_per_user: int = 10) -> None:
        self._engine = create_engine(url, future=True)
        Base.metadata.create_all(self._engine)
        self._session_factory = sessionmaker(self._engine, expire_on_commit=False, future=True)
        self._max_per_user = max_per_user

    def list_scenarios(self, user_token: Optional[str]) -> List[MortgageScenario]:
        if not user_token:
            return []
        with self._session_factory() as session:
            rows: Iterable[ScenarioModel] = session.execute(
                select(ScenarioModel)
                .where(ScenarioModel.user_token == user_token)
                .order_by(ScenarioModel.seq.asc())
            ).scalars()
            return [self._to_scenario(row) for row in rows]

    def add_scenario(self, user_token: Optional[str], scenario: MortgageScenario) -> None:
        if not user_token:
            return
        payload = ScenarioModel(
            id=scenario.id,
            user_token=user_token,
            name=scenario.name,
            scenario_json=json.dumps(to_jsonable(scenario)),
        )
        with self._session_factory() as session:
            session.add(payload)
            session.commit()
        self._trim_user(user_token)

    def remove_scenario(self, user_token: Optional[str], scenario_id: str) -> bool:
        """Delete one scenario; returns False when the user does not own it."""
        if not user_token:
            return False
        with self._session_factory() as session:
            row = session.execute(
                select(ScenarioModel).where(ScenarioModel.id == scenario_id)
            ).scalar_one_or_none()
            if row is None or row.user_token != user_token:
                return False
            session.delete(row)
            session.commit()
            return True

    def clear_scenarios(self, user_token: Optional[str]) -> None:
        if not user_token:
            return
        with self._session_factory() as session:
            session.execute(
                ScenarioModel.__table__.delete().where(ScenarioModel.user_token == user_token)
            )
            session.commit()

    def _trim_user(self, user_token: str) -> None:
        if not self._max_per_user or self._max_per_user < 0:
            return
        with self._session_factory() as session:
            rows = session.execute(
                select(ScenarioModel)
                .where(ScenarioModel.user_token == user_token)
                .order_by(ScenarioModel.seq.desc())
            ).scalars().all()
            if len(rows) <= self._max_per_user:
                return
            for row in rows[self._max_per_user :]:
                session.delete(row)
            session.commit()

    @staticmethod
    def _to_scenario(row: ScenarioModel) -> MortgageScenario:
        return scenario_from_dict(json.loads(row.scenario_json))


def create_store(url: Optional[str], max_per_user: int = 10) -> ScenarioStore:
    return ScenarioStore(url or "sqlite:///scenario_data.sqlite3", max_per_user=max_per_user)
