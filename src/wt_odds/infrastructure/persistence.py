"""OddsRepository: concrete implementation of OddsRepositoryProtocol.

Lines are append-only: there is an INSERT for them and no UPDATE or DELETE.
Events, markets and leagues are find-or-create from ingestion; only an
event's status and final score ever change.

All queries use raw text() SQL (no ORM). Timestamps are bound with an explicit
DateTime type and normalized on the way out with as_utc().
"""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import DateTime, bindparam, text
from sqlalchemy.ext.asyncio import AsyncSession

from src.wt_common.datetime_utils import as_utc
from src.wt_odds.domain.models import Event, League, Line, LineContext, Market

_TS = DateTime(timezone=True)

# ---------------------------------------------------------------------------
# SQL: leagues / events / markets
# ---------------------------------------------------------------------------

_GET_LEAGUE_BY_NAME_SQL = text("SELECT id, name FROM leagues WHERE name = :name")

_INSERT_LEAGUE_SQL = text("INSERT INTO leagues (id, name) VALUES (:id, :name)")

_EVENT_COLUMNS = (
    "id, league_id, home_team, away_team, starts_at, status, home_score, away_score"
)

_GET_EVENT_SQL = text(f"SELECT {_EVENT_COLUMNS} FROM events WHERE id = :event_id")

_FIND_EVENT_SQL = text(f"""
    SELECT {_EVENT_COLUMNS}
    FROM events
    WHERE league_id = :league_id
      AND home_team = :home_team
      AND away_team = :away_team
      AND starts_at = :starts_at
""").bindparams(bindparam("starts_at", type_=_TS))

_INSERT_EVENT_SQL = text("""
    INSERT INTO events (id, league_id, home_team, away_team, starts_at, status)
    VALUES (:id, :league_id, :home_team, :away_team, :starts_at, :status)
""").bindparams(bindparam("starts_at", type_=_TS))

_UPDATE_EVENT_STATUS_SQL = text("""
    UPDATE events
    SET status = :status
    WHERE id = :event_id AND status = :expected_status
    RETURNING id
""")

_SET_FINAL_SCORE_SQL = text("""
    UPDATE events
    SET status = 'FINAL', home_score = :home_score, away_score = :away_score
    WHERE id = :event_id
    RETURNING id
""")

_LIST_EVENTS_SQL = text(f"""
    SELECT e.id, e.league_id, e.home_team, e.away_team, e.starts_at, e.status,
           e.home_score, e.away_score, lg.name AS league_name
    FROM events e
    JOIN leagues lg ON lg.id = e.league_id
    WHERE (CAST(:status AS TEXT) IS NULL OR e.status = CAST(:status AS TEXT))
      AND (CAST(:league_id AS TEXT) IS NULL OR e.league_id = CAST(:league_id AS TEXT))
    ORDER BY e.starts_at ASC, e.id ASC
""")

_GET_MARKET_SQL = text("SELECT id, event_id, market_type FROM markets WHERE id = :market_id")

_FIND_MARKET_SQL = text("""
    SELECT id, event_id, market_type
    FROM markets
    WHERE event_id = :event_id AND market_type = :market_type
""")

_INSERT_MARKET_SQL = text("""
    INSERT INTO markets (id, event_id, market_type)
    VALUES (:id, :event_id, :market_type)
""")

_LIST_MARKETS_FOR_EVENTS_SQL = text("""
    SELECT id, event_id, market_type
    FROM markets
    WHERE event_id IN :event_ids
    ORDER BY market_type
""").bindparams(bindparam("event_ids", expanding=True))

# ---------------------------------------------------------------------------
# SQL: lines
# ---------------------------------------------------------------------------

_INSERT_LINE_SQL = text("""
    INSERT INTO lines (id, market_id, selection, point, price, source, captured_at)
    VALUES (:id, :market_id, :selection, :point, :price, :source, :captured_at)
""").bindparams(bindparam("captured_at", type_=_TS))

_LINE_CONTEXT_SELECT = """
    SELECT l.id, l.market_id, l.selection, l.point, l.price, l.source, l.captured_at,
           m.market_type,
           e.id AS event_id, e.status AS event_status, e.starts_at,
           e.home_team, e.away_team
    FROM lines l
    JOIN markets m ON m.id = l.market_id
    JOIN events e ON e.id = m.event_id
"""

_GET_LINE_CONTEXT_SQL = text(_LINE_CONTEXT_SELECT + "WHERE l.id = :line_id")

_LINE_CONTEXTS_SQL = text(_LINE_CONTEXT_SELECT + "WHERE l.id IN :line_ids").bindparams(
    bindparam("line_ids", expanding=True)
)

_GET_LATEST_LINE_SQL = text("""
    SELECT id, market_id, selection, point, price, source, captured_at
    FROM lines
    WHERE market_id = :market_id AND selection = :selection
    ORDER BY captured_at DESC, id DESC
    LIMIT 1
""")

_LATEST_LINES_FOR_MARKETS_SQL = text("""
    SELECT l.id, l.market_id, l.selection, l.point, l.price, l.source, l.captured_at
    FROM lines l
    WHERE l.market_id IN :market_ids
      AND NOT EXISTS (
          SELECT 1 FROM lines newer
          WHERE newer.market_id = l.market_id
            AND newer.selection = l.selection
            AND (newer.captured_at > l.captured_at
                 OR (newer.captured_at = l.captured_at AND newer.id > l.id))
      )
    ORDER BY l.market_id, l.selection
""").bindparams(bindparam("market_ids", expanding=True))


# ---------------------------------------------------------------------------
# Row mappers
# ---------------------------------------------------------------------------


def point_to_str(point: Decimal | None) -> str | None:
    return None if point is None else format(point.normalize(), "f")


def _str_to_point(raw: object) -> Decimal | None:
    return None if raw is None else Decimal(str(raw))


def _row_to_event(row: object) -> Event:
    return Event(
        id=row.id,  # type: ignore[attr-defined]
        league_id=row.league_id,  # type: ignore[attr-defined]
        home_team=row.home_team,  # type: ignore[attr-defined]
        away_team=row.away_team,  # type: ignore[attr-defined]
        starts_at=as_utc(row.starts_at),  # type: ignore[attr-defined]
        status=row.status,  # type: ignore[attr-defined]
        home_score=row.home_score,  # type: ignore[attr-defined]
        away_score=row.away_score,  # type: ignore[attr-defined]
    )


def _row_to_market(row: object) -> Market:
    return Market(
        id=row.id,  # type: ignore[attr-defined]
        event_id=row.event_id,  # type: ignore[attr-defined]
        market_type=row.market_type,  # type: ignore[attr-defined]
    )


def _row_to_line(row: object) -> Line:
    return Line(
        id=row.id,  # type: ignore[attr-defined]
        market_id=row.market_id,  # type: ignore[attr-defined]
        selection=row.selection,  # type: ignore[attr-defined]
        point=_str_to_point(row.point),  # type: ignore[attr-defined]
        price=row.price,  # type: ignore[attr-defined]
        source=row.source,  # type: ignore[attr-defined]
        captured_at=as_utc(row.captured_at),  # type: ignore[attr-defined]
    )


def _row_to_line_context(row: object) -> LineContext:
    return LineContext(
        line=_row_to_line(row),
        market_type=row.market_type,  # type: ignore[attr-defined]
        event_id=row.event_id,  # type: ignore[attr-defined]
        event_status=row.event_status,  # type: ignore[attr-defined]
        starts_at=as_utc(row.starts_at),  # type: ignore[attr-defined]
        home_team=row.home_team,  # type: ignore[attr-defined]
        away_team=row.away_team,  # type: ignore[attr-defined]
    )


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class OddsRepository:
    async def get_league_by_name(self, db: AsyncSession, name: str) -> League | None:
        row = (await db.execute(_GET_LEAGUE_BY_NAME_SQL, {"name": name})).fetchone()
        return League(id=row.id, name=row.name) if row else None

    async def insert_league(self, db: AsyncSession, league: League) -> League:
        await db.execute(_INSERT_LEAGUE_SQL, {"id": league.id, "name": league.name})
        return league

    async def get_event(self, db: AsyncSession, event_id: str) -> Event | None:
        row = (await db.execute(_GET_EVENT_SQL, {"event_id": event_id})).fetchone()
        return _row_to_event(row) if row else None

    async def find_event(
        self, db: AsyncSession, league_id: str, home_team: str, away_team: str, starts_at: datetime
    ) -> Event | None:
        row = (
            await db.execute(
                _FIND_EVENT_SQL,
                {
                    "league_id": league_id,
                    "home_team": home_team,
                    "away_team": away_team,
                    "starts_at": starts_at,
                },
            )
        ).fetchone()
        return _row_to_event(row) if row else None

    async def insert_event(self, db: AsyncSession, event: Event) -> Event:
        await db.execute(
            _INSERT_EVENT_SQL,
            {
                "id": event.id,
                "league_id": event.league_id,
                "home_team": event.home_team,
                "away_team": event.away_team,
                "starts_at": event.starts_at,
                "status": event.status,
            },
        )
        return event

    async def update_event_status(
        self, db: AsyncSession, event_id: str, expected_status: str, status: str
    ) -> bool:
        """Compare-and-set on status; False when the event moved underneath us."""
        row = (
            await db.execute(
                _UPDATE_EVENT_STATUS_SQL,
                {"event_id": event_id, "expected_status": expected_status, "status": status},
            )
        ).fetchone()
        return row is not None

    async def set_final_score(
        self, db: AsyncSession, event_id: str, home_score: int, away_score: int
    ) -> bool:
        row = (
            await db.execute(
                _SET_FINAL_SCORE_SQL,
                {"event_id": event_id, "home_score": home_score, "away_score": away_score},
            )
        ).fetchone()
        return row is not None

    async def list_events(
        self, db: AsyncSession, status: str | None, league_id: str | None
    ) -> list[tuple[Event, str]]:
        rows = (
            await db.execute(_LIST_EVENTS_SQL, {"status": status, "league_id": league_id})
        ).fetchall()
        return [(_row_to_event(row), row.league_name) for row in rows]

    async def get_market(self, db: AsyncSession, market_id: str) -> Market | None:
        row = (await db.execute(_GET_MARKET_SQL, {"market_id": market_id})).fetchone()
        return _row_to_market(row) if row else None

    async def find_market(
        self, db: AsyncSession, event_id: str, market_type: str
    ) -> Market | None:
        row = (
            await db.execute(
                _FIND_MARKET_SQL, {"event_id": event_id, "market_type": market_type}
            )
        ).fetchone()
        return _row_to_market(row) if row else None

    async def insert_market(self, db: AsyncSession, market: Market) -> Market:
        await db.execute(
            _INSERT_MARKET_SQL,
            {"id": market.id, "event_id": market.event_id, "market_type": market.market_type},
        )
        return market

    async def list_markets_for_events(
        self, db: AsyncSession, event_ids: list[str]
    ) -> list[Market]:
        if not event_ids:
            return []
        rows = (
            await db.execute(_LIST_MARKETS_FOR_EVENTS_SQL, {"event_ids": event_ids})
        ).fetchall()
        return [_row_to_market(row) for row in rows]

    async def insert_line(self, db: AsyncSession, line: Line) -> Line:
        await db.execute(
            _INSERT_LINE_SQL,
            {
                "id": line.id,
                "market_id": line.market_id,
                "selection": line.selection,
                "point": point_to_str(line.point),
                "price": line.price,
                "source": line.source,
                "captured_at": line.captured_at,
            },
        )
        return line

    async def get_line_context(self, db: AsyncSession, line_id: str) -> LineContext | None:
        row = (await db.execute(_GET_LINE_CONTEXT_SQL, {"line_id": line_id})).fetchone()
        return _row_to_line_context(row) if row else None

    async def get_line_contexts(
        self, db: AsyncSession, line_ids: list[str]
    ) -> dict[str, LineContext]:
        if not line_ids:
            return {}
        result = await db.execute(_LINE_CONTEXTS_SQL, {"line_ids": sorted(set(line_ids))})
        contexts = [_row_to_line_context(row) for row in result.fetchall()]
        return {ctx.line.id: ctx for ctx in contexts}

    async def get_latest_line(
        self, db: AsyncSession, market_id: str, selection: str
    ) -> Line | None:
        row = (
            await db.execute(
                _GET_LATEST_LINE_SQL, {"market_id": market_id, "selection": selection}
            )
        ).fetchone()
        return _row_to_line(row) if row else None

    async def latest_lines_for_markets(
        self, db: AsyncSession, market_ids: list[str]
    ) -> list[Line]:
        if not market_ids:
            return []
        rows = (
            await db.execute(_LATEST_LINES_FOR_MARKETS_SQL, {"market_ids": market_ids})
        ).fetchall()
        return [_row_to_line(row) for row in rows]
