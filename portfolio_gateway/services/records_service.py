"""Service for profile-owned record tables (projects, certificates, assessments)."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from .errors import RecordNotFoundError


@dataclass(frozen=True)
class RecordTable:
    """A child table keyed by ``profile_id`` and listed newest-first by ``order_column``."""

    name: str
    order_column: str = "created_at"


PROJECTS = RecordTable("projects", "created_at")
CERTIFICATES = RecordTable("certificates", "issued_date")
ASSESSMENTS = RecordTable("assessments", "created_at")


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class RecordsService:
    """CRUD over one child table of ``profiles``.

    ``update`` and ``delete`` match on the row id alone unless a
    ``profile_id`` is passed, in which case the row must also belong to that
    profile.
    """

    def __init__(self, client: Any, table: RecordTable) -> None:
        self.client = client
        self.table = table

    def add(self, profile_id: Any, fields: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        record = {"profile_id": profile_id, **fields, "created_at": utc_now_iso()}
        response = self.client.table(self.table.name).insert([record]).execute()
        data = response.data or []
        return data[0] if data else None

    def list_for_profile(self, profile_id: Any) -> List[Dict[str, Any]]:
        response = (
            self.client.table(self.table.name)
            .select("*")
            .eq("profile_id", profile_id)
            .order(self.table.order_column, desc=True)
            .execute()
        )
        return response.data or []

    def update(self, record_id: Any, fields: Dict[str, Any], *, profile_id: Any = None) -> None:
        query = self.client.table(self.table.name).update(fields).eq("id", record_id)
        if profile_id is not None:
            query = query.eq("profile_id", profile_id)
        response = query.execute()
        if profile_id is not None and not response.data:
            raise RecordNotFoundError()

    def delete(self, record_id: Any, *, profile_id: Any = None) -> None:
        query = self.client.table(self.table.name).delete().eq("id", record_id)
        if profile_id is not None:
            query = query.eq("profile_id", profile_id)
        response = query.execute()
        if profile_id is not None and not response.data:
            raise RecordNotFoundError()
