"""SQLite store for run metadata and per-generation fitness statistics."""

from __future__ import annotations

import hashlib
import json
import platform
import sqlite3
import time
from pathlib import Path
from typing import Any, Mapping


METRIC_COLUMNS: tuple[str, ...] = ("best_fitness", "average_fitness", "step_time", "processing_time", "elapsed")

_SCHEMA = """
CREATE TABLE IF NOT EXISTS experiments (
    experiment_id TEXT PRIMARY KEY,
    seed INTEGER NOT NULL,
    config_hash TEXT NOT NULL,
    config_json TEXT NOT NULL,
    runtime_json TEXT NOT NULL,
    created_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP
);

CREATE TABLE IF NOT EXISTS generation_stats (
    experiment_id TEXT NOT NULL REFERENCES experiments (experiment_id) ON DELETE CASCADE,
    generation_index INTEGER NOT NULL,
    best_fitness REAL,
    average_fitness REAL,
    step_time REAL,
    processing_time REAL,
    elapsed REAL,
    PRIMARY KEY (experiment_id, generation_index)
);
"""


def _dumps(payload: Mapping[str, Any]) -> str:
    return json.dumps(dict(payload), sort_keys=True, default=str)


class SimulationLogger:
    """Record every run and one statistics row per completed generation.

    Populations themselves are never written; a run can be plotted or
    compared afterwards but not resumed from the store.
    """

    def __init__(self, db_path: str | Path) -> None:
        self.db_path = Path(db_path)
        self.connection = sqlite3.connect(self.db_path)
        self.connection.row_factory = sqlite3.Row
        with self.connection:
            self.connection.executescript(_SCHEMA)

    def __enter__(self) -> "SimulationLogger":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def close(self) -> None:
        self.connection.close()

    def start_experiment(self, config: Mapping[str, Any], seed: int, metadata: Mapping[str, Any] | None = None) -> str:
        """Register a new run and return its id.

        Two runs of the same config and seed get distinct ids; the shared
        ``config_hash`` column groups them.
        """
        config_json = _dumps(config)
        config_hash = hashlib.sha256(config_json.encode("utf-8")).hexdigest()
        runtime = {"python_version": platform.python_version(), "platform": platform.platform()}
        runtime.update(metadata or {})
        experiment_id = hashlib.sha256(f"{config_hash}:{seed}:{time.time_ns()}".encode("utf-8")).hexdigest()[:16]

        with self.connection:
            self.connection.execute(
                "INSERT INTO experiments (experiment_id, seed, config_hash, config_json, runtime_json) "
                "VALUES (?, ?, ?, ?, ?)",
                (experiment_id, int(seed), config_hash, config_json, _dumps(runtime)),
            )
        return experiment_id

    def log_metrics(self, experiment_id: str, generation_index: int, metrics: Mapping[str, float]) -> None:
        """Upsert the statistics row of one generation; missing metrics are stored as NULL."""
        values = [None if metrics.get(column) is None else float(metrics[column]) for column in METRIC_COLUMNS]
        placeholders = ", ".join("?" for _ in METRIC_COLUMNS)
        with self.connection:
            self.connection.execute(
                f"INSERT OR REPLACE INTO generation_stats (experiment_id, generation_index, {', '.join(METRIC_COLUMNS)}) "
                f"VALUES (?, ?, {placeholders})",
                (experiment_id, int(generation_index), *values),
            )

    def fetch_metrics(self, experiment_id: str) -> list[dict[str, float | None]]:
        """Return the statistics rows of a run ordered by generation."""
        rows = self.connection.execute(
            f"SELECT generation_index, {', '.join(METRIC_COLUMNS)} FROM generation_stats "
            "WHERE experiment_id = ? ORDER BY generation_index",
            (experiment_id,),
        ).fetchall()
        return [dict(row) for row in rows]

    def fetch_experiment(self, experiment_id: str) -> dict[str, Any] | None:
        """Return seed, decoded config and runtime metadata of a run."""
        row = self.connection.execute(
            "SELECT seed, config_json, runtime_json FROM experiments WHERE experiment_id = ?",
            (experiment_id,),
        ).fetchone()
        if row is None:
            return None
        return {
            "seed": row["seed"],
            "config": json.loads(row["config_json"]),
            "runtime": json.loads(row["runtime_json"]),
        }

    def latest_experiment_id(self) -> str | None:
        row = self.connection.execute(
            "SELECT experiment_id FROM experiments ORDER BY created_at DESC, rowid DESC LIMIT 1"
        ).fetchone()
        return None if row is None else str(row["experiment_id"])
