"""SQL usage store adapter.

Persists one row per used edge, holding the usage count and a two-point
LINESTRING geometry, through SQLAlchemy. Every write runs inside a
single transaction: on any failure nothing is committed.

With PostGIS the geometry goes through ``ST_GeomFromText`` (SRID 4326
by default). Setting ``geometry_function`` to None stores the WKT text
as is, which lets plain databases such as SQLite hold the rows.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from ...config import StoreConfig, get_config
from ...domain.errors import ConfigurationError, PersistenceError
from ...domain.models import UsageSegment
from ...ports.progress import ProgressPort
from ..progress import NullProgress

IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*(\.[A-Za-z_][A-Za-z0-9_]*)?$")
LINESTRING = re.compile(
    r"^\s*LINESTRING\s*\(\s*(\S+)\s+(\S+)\s*,\s*(\S+)\s+(\S+)\s*\)\s*$",
    re.IGNORECASE,
)
INSERT_BATCH = 1000


def segment_wkt(segment: UsageSegment) -> str:
    return (
        f"LINESTRING({segment.lon1} {segment.lat1}, {segment.lon2} {segment.lat2})"
    )


def parse_segment(count: int, wkt: str) -> UsageSegment:
    """Rebuild a segment from its count and two-point LINESTRING."""
    match = LINESTRING.match(wkt)
    if match is None:
        raise ValueError(f"Not a two-point LINESTRING: {wkt!r}")
    lon1, lat1, lon2, lat2 = (float(value) for value in match.groups())
    return UsageSegment(lon1=lon1, lat1=lat1, lon2=lon2, lat2=lat2, count=int(count))


@dataclass
class SQLUsageStore:
    """Usage store backed by a relational/spatial database.

    This adapter implements UsageStorePort.

    Attributes:
        config: Store configuration (URI, table, SRID, geometry function)
        progress: Side-channel progress reporter
        engine: Optional pre-built SQLAlchemy engine
    """

    config: StoreConfig = field(default_factory=lambda: get_config().store)
    progress: ProgressPort = field(default_factory=NullProgress)
    engine: Optional[Engine] = None
    _logger: logging.Logger = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(__name__)
        if not IDENTIFIER.match(self.config.table):
            raise ConfigurationError(
                f"Invalid table name: {self.config.table!r}",
                setting_name="table",
                expected_type="SQL identifier",
            )

    @property
    def spatial(self) -> bool:
        return self.config.geometry_function is not None

    def _get_engine(self) -> Engine:
        if self.engine is None:
            if not self.config.uri:
                raise ConfigurationError(
                    "No database URI configured",
                    setting_name="uri",
                    expected_type="SQLAlchemy URL",
                )
            self.engine = create_engine(self.config.uri, echo=self.config.echo)
        return self.engine

    def _create_table_sql(self) -> str:
        if self.spatial:
            geometry_type = f"geometry(LINESTRING, {self.config.srid})"
        else:
            geometry_type = "TEXT"
        return (
            f"CREATE TABLE IF NOT EXISTS {self.config.table} "
            f"(count INTEGER NOT NULL, geom {geometry_type} NOT NULL)"
        )

    def _insert_sql(self) -> str:
        if self.spatial:
            geometry = f"{self.config.geometry_function}(:wkt, :srid)"
        else:
            geometry = ":wkt"
        return f"INSERT INTO {self.config.table} (count, geom) VALUES (:count, {geometry})"

    def _select_sql(self) -> str:
        geometry = "ST_AsText(geom)" if self.spatial else "geom"
        return f"SELECT count, {geometry} FROM {self.config.table} ORDER BY count"

    def save(self, segments: Sequence[UsageSegment]) -> int:
        """Write every segment in one transaction.

        Args:
            segments: Usage rows to persist.

        Returns:
            Number of rows written.

        Raises:
            PersistenceError: If the store is unreachable or a write
                fails; the transaction is rolled back.
        """
        rows: List[Dict[str, Any]] = [
            {"count": segment.count, "wkt": segment_wkt(segment)} for segment in segments
        ]
        if self.spatial:
            for row in rows:
                row["srid"] = self.config.srid

        self._logger.info(
            "Saving edge usage",
            extra={"table": self.config.table, "rows": len(rows)},
        )

        insert = text(self._insert_sql())
        try:
            engine = self._get_engine()
            with engine.begin() as connection:
                connection.execute(text(self._create_table_sql()))
                self.progress.start(len(rows), "Inserting into DB")
                try:
                    for start in range(0, len(rows), INSERT_BATCH):
                        batch = rows[start : start + INSERT_BATCH]
                        connection.execute(insert, batch)
                        self.progress.advance(len(batch))
                finally:
                    self.progress.close()
        except (SQLAlchemyError, ImportError) as e:
            self._logger.error(
                "Edge usage insert failed, transaction rolled back",
                extra={"table": self.config.table, "error": str(e)},
            )
            raise PersistenceError(
                f"Failed to save edge usage into {self.config.table}",
                table=self.config.table,
                cause=e,
            )

        self._logger.info(
            "Edge usage saved",
            extra={"table": self.config.table, "rows": len(rows)},
        )
        return len(rows)

    def load(self) -> List[UsageSegment]:
        """Read every stored row back, ascending by count.

        Raises:
            PersistenceError: If the query fails or a geometry cannot be
                parsed.
        """
        try:
            engine = self._get_engine()
            with engine.connect() as connection:
                result = connection.execute(text(self._select_sql()))
                segments = [parse_segment(count, wkt) for count, wkt in result]
        except (SQLAlchemyError, ImportError, ValueError) as e:
            raise PersistenceError(
                f"Failed to read edge usage from {self.config.table}",
                table=self.config.table,
                cause=e,
            )

        self._logger.info(
            "Edge usage loaded",
            extra={"table": self.config.table, "rows": len(segments)},
        )
        return segments
