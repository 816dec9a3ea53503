"""
Admin dashboard client for the Campus Grievance Desk API.

Holds the filter state, fetches the grievance list and the faculty roster
together on every filter change, and applies faculty assignments. All state
changes go through this object; responses from superseded refreshes are
dropped so a slow request never overwrites newer results.
"""

import asyncio
import logging
from typing import Any, Dict, List, Optional

import httpx
from pydantic import BaseModel, ConfigDict

logger = logging.getLogger(__name__)

FILTER_FIELDS = ("department", "status", "month", "year")


class Filters(BaseModel):
    model_config = ConfigDict(frozen=True)

    department: str = ""
    status: str = ""
    month: str = ""
    year: str = ""

    def updated(self, name: str, value) -> "Filters":
        if name not in FILTER_FIELDS:
            raise KeyError(f"Unknown filter: {name}")
        return self.model_copy(update={name: "" if value is None else str(value)})

    @classmethod
    def cleared(cls) -> "Filters":
        return cls()

    def to_params(self) -> Dict[str, str]:
        return {k: v for k, v in self.model_dump().items() if v}


def _error_message(exc: httpx.HTTPError, fallback: str) -> str:
    if isinstance(exc, httpx.HTTPStatusError):
        try:
            body = exc.response.json()
        except ValueError:
            return fallback
        if isinstance(body, dict):
            if body.get("detail"):
                return str(body["detail"])
            if body.get("errors"):
                return "; ".join(str(e.get("msg", e)) for e in body["errors"])
    return fallback


class AdminDashboard:
    def __init__(self, http: httpx.AsyncClient, token: Optional[str] = None):
        self._http = http
        self._headers = {"Authorization": f"Bearer {token}"} if token else {}
        self._seq = 0
        self.filters = Filters()
        self.grievances: List[Dict[str, Any]] = []
        self.faculty: List[Dict[str, Any]] = []
        self.loading = False
        self.error: Optional[str] = None

    async def _get(self, path: str, params: Optional[Dict[str, str]] = None):
        resp = await self._http.get(path, params=params, headers=self._headers)
        resp.raise_for_status()
        return resp.json()

    async def refresh(self) -> bool:
        """Reload grievances and faculty. Returns False if the result was not applied."""
        self._seq += 1
        seq = self._seq
        self.loading = True
        try:
            grievances, faculty = await asyncio.gather(
                self._get("/api/admin/grievances", params=self.filters.to_params()),
                self._get("/api/admin/faculty"))
        except httpx.HTTPError as e:
            logger.error("Error fetching dashboard data: %s", e)
            if seq == self._seq:
                self.error = _error_message(e, "Error fetching data")
                self.loading = False
            return False
        if seq != self._seq:
            logger.debug("Discarding stale dashboard response %d (latest %d)", seq, self._seq)
            return False
        self.grievances = grievances
        self.faculty = faculty
        self.error = None
        self.loading = False
        return True

    async def set_filter(self, name: str, value) -> bool:
        self.filters = self.filters.updated(name, value)
        return await self.refresh()

    async def clear_filters(self) -> bool:
        self.filters = Filters.cleared()
        return await self.refresh()

    async def assign(self, grievance_id: str, faculty_id: str) -> Optional[Dict[str, Any]]:
        try:
            resp = await self._http.put(f"/api/admin/grievances/{grievance_id}/assign",
                                        json={"facultyId": faculty_id}, headers=self._headers)
            resp.raise_for_status()
        except httpx.HTTPError as e:
            logger.error("Error assigning grievance %s: %s", grievance_id, e)
            self.error = _error_message(e, "Error assigning faculty")
            return None
        updated = resp.json()
        self._merge(updated)
        self.error = None
        if self.loading:
            # An in-flight refresh may carry the pre-assignment row
            await self.refresh()
        return updated

    def _merge(self, updated: Dict[str, Any]):
        # The server echo is authoritative; drop rows the active status filter now excludes
        keep = not self.filters.status or updated.get("status") == self.filters.status
        merged = []
        for g in self.grievances:
            if g.get("id") != updated.get("id"):
                merged.append(g)
            elif keep:
                merged.append(updated)
        self.grievances = merged
