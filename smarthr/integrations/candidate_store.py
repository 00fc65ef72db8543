from __future__ import annotations

import asyncio
import json
import logging
import os
import sqlite3
import threading
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Protocol

from botocore.exceptions import BotoCoreError, ClientError

from smarthr.integrations.errors import UpstreamServiceError

logger = logging.getLogger(__name__)


class CandidateNotFoundError(RuntimeError):
    status_code = 404

    def __init__(self, email: str):
        super().__init__(f"Candidate not found: {email}")
        self.email = email


class StaleCandidateError(RuntimeError):
    status_code = 409

    def __init__(self, email: str, expected_version: int, current_version: int | None):
        super().__init__(
            f"Candidate {email} was modified concurrently "
            f"(expected version {expected_version}, current {current_version})."
        )
        self.email = email
        self.expected_version = expected_version
        self.current_version = current_version


class CandidateStore(Protocol):
    async def get(self, email: str) -> dict[str, Any] | None: ...

    async def put(self, email: str, record: dict[str, Any]) -> dict[str, Any]: ...

    async def update(
        self, email: str, fields: dict[str, Any], expected_version: int | None = None
    ) -> dict[str, Any]: ...

    async def scan_all(self) -> list[dict[str, Any]]: ...


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class SqliteCandidateStore:
    def __init__(self, db_path: str):
        self._db_path = db_path
        self._conn: sqlite3.Connection | None = None
        self._lock = threading.Lock()

    def _get_connection(self) -> sqlite3.Connection:
        if self._conn is not None:
            return self._conn

        directory = os.path.dirname(self._db_path)
        if directory:
            os.makedirs(directory, exist_ok=True)

        conn = sqlite3.connect(
            self._db_path,
            check_same_thread=False,
            timeout=5,
            isolation_level=None,
        )
        conn.execute("PRAGMA journal_mode=WAL;")
        conn.execute("PRAGMA synchronous=NORMAL;")
        conn.execute("PRAGMA busy_timeout=5000;")
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS candidates (
                email TEXT PRIMARY KEY,
                record_json TEXT NOT NULL,
                version INTEGER NOT NULL,
                updated_at TEXT NOT NULL
            );
            """
        )
        self._conn = conn
        return conn

    def _select(self, conn: sqlite3.Connection, email: str) -> dict[str, Any] | None:
        row = conn.execute(
            "SELECT record_json, version FROM candidates WHERE email = ?", (email,)
        ).fetchone()
        if not row:
            return None
        record = json.loads(row[0]) if row[0] else {}
        record["version"] = int(row[1])
        return record

    def _get_sync(self, email: str) -> dict[str, Any] | None:
        with self._lock:
            return self._select(self._get_connection(), email)

    def _put_sync(self, email: str, record: dict[str, Any]) -> dict[str, Any]:
        with self._lock:
            conn = self._get_connection()
            existing = self._select(conn, email)
            version = (existing["version"] + 1) if existing else 1
            stored = {**record, "email": email, "version": version}
            conn.execute(
                """
                INSERT INTO candidates (email, record_json, version, updated_at)
                VALUES (?, ?, ?, ?)
                ON CONFLICT(email) DO UPDATE SET
                    record_json = excluded.record_json,
                    version = excluded.version,
                    updated_at = excluded.updated_at
                """,
                (email, json.dumps(stored, ensure_ascii=False), version, _utc_now_iso()),
            )
            return stored

    def _update_sync(self, email: str, fields: dict[str, Any], expected_version: int | None) -> dict[str, Any]:
        with self._lock:
            conn = self._get_connection()
            existing = self._select(conn, email)
            if existing is None:
                raise CandidateNotFoundError(email)
            if expected_version is not None and existing["version"] != expected_version:
                raise StaleCandidateError(email, expected_version, existing["version"])
            version = existing["version"] + 1
            stored = {**existing, **fields, "email": email, "version": version}
            cur = conn.execute(
                """
                UPDATE candidates SET record_json = ?, version = ?, updated_at = ?
                WHERE email = ? AND version = ?
                """,
                (json.dumps(stored, ensure_ascii=False), version, _utc_now_iso(), email, existing["version"]),
            )
            if cur.rowcount != 1:
                raise StaleCandidateError(email, existing["version"], None)
            return stored

    def _scan_sync(self) -> list[dict[str, Any]]:
        with self._lock:
            rows = self._get_connection().execute(
                "SELECT record_json, version FROM candidates ORDER BY updated_at DESC"
            ).fetchall()
        records = []
        for record_json, version in rows:
            record = json.loads(record_json) if record_json else {}
            record["version"] = int(version)
            records.append(record)
        return records

    async def get(self, email: str) -> dict[str, Any] | None:
        return await asyncio.to_thread(self._get_sync, email)

    async def put(self, email: str, record: dict[str, Any]) -> dict[str, Any]:
        return await asyncio.to_thread(self._put_sync, email, record)

    async def update(
        self, email: str, fields: dict[str, Any], expected_version: int | None = None
    ) -> dict[str, Any]:
        return await asyncio.to_thread(self._update_sync, email, fields, expected_version)

    async def scan_all(self) -> list[dict[str, Any]]:
        return await asyncio.to_thread(self._scan_sync)

    def close(self) -> None:
        with self._lock:
            if self._conn is not None:
                self._conn.close()
                self._conn = None


def _from_dynamo(item: dict[str, Any]) -> dict[str, Any]:
    out: dict[str, Any] = {}
    for key, value in item.items():
        if isinstance(value, Decimal):
            value = int(value) if value == value.to_integral_value() else float(value)
        out[key] = value
    return out


class DynamoCandidateStore:
    """DynamoDB table keyed by ``email``; writes are conditional on ``version``."""

    def __init__(self, table_name: str, region: str, table: Any | None = None):
        if table is None:
            import boto3

            table = boto3.resource("dynamodb", region_name=region).Table(table_name)
        self._table = table

    async def get(self, email: str) -> dict[str, Any] | None:
        try:
            response = await asyncio.to_thread(self._table.get_item, Key={"email": email})
        except (BotoCoreError, ClientError) as exc:
            raise UpstreamServiceError("dynamodb", str(exc)) from exc
        item = response.get("Item")
        return _from_dynamo(item) if item else None

    async def put(self, email: str, record: dict[str, Any]) -> dict[str, Any]:
        existing = await self.get(email)
        version = (int(existing.get("version", 0)) + 1) if existing else 1
        stored = {**record, "email": email, "version": version}
        try:
            await asyncio.to_thread(self._table.put_item, Item=stored)
        except (BotoCoreError, ClientError) as exc:
            raise UpstreamServiceError("dynamodb", str(exc)) from exc
        return stored

    async def update(
        self, email: str, fields: dict[str, Any], expected_version: int | None = None
    ) -> dict[str, Any]:
        existing = await self.get(email)
        if existing is None:
            raise CandidateNotFoundError(email)
        current = int(existing.get("version", 0))
        if expected_version is not None and current != expected_version:
            raise StaleCandidateError(email, expected_version, current)

        names: dict[str, str] = {"#version": "version"}
        values: dict[str, Any] = {":next": current + 1, ":current": current}
        assignments = ["#version = :next"]
        for index, (key, value) in enumerate(fields.items()):
            if key in {"email", "version"}:
                continue
            names[f"#f{index}"] = key
            values[f":v{index}"] = value
            assignments.append(f"#f{index} = :v{index}")

        try:
            response = await asyncio.to_thread(
                self._table.update_item,
                Key={"email": email},
                UpdateExpression="SET " + ", ".join(assignments),
                ConditionExpression="#version = :current",
                ExpressionAttributeNames=names,
                ExpressionAttributeValues=values,
                ReturnValues="ALL_NEW",
            )
        except ClientError as exc:
            if exc.response.get("Error", {}).get("Code") == "ConditionalCheckFailedException":
                raise StaleCandidateError(email, current, None) from exc
            raise UpstreamServiceError("dynamodb", str(exc)) from exc
        except BotoCoreError as exc:
            raise UpstreamServiceError("dynamodb", str(exc)) from exc
        return _from_dynamo(response.get("Attributes", {}))

    async def scan_all(self) -> list[dict[str, Any]]:
        items: list[dict[str, Any]] = []
        kwargs: dict[str, Any] = {}
        while True:
            try:
                response = await asyncio.to_thread(self._table.scan, **kwargs)
            except (BotoCoreError, ClientError) as exc:
                raise UpstreamServiceError("dynamodb", str(exc)) from exc
            items.extend(_from_dynamo(item) for item in response.get("Items", []))
            last_key = response.get("LastEvaluatedKey")
            if not last_key:
                break
            kwargs["ExclusiveStartKey"] = last_key
        items.sort(key=lambda item: str(item.get("updated_at") or item.get("uploaded_at") or ""), reverse=True)
        return items
