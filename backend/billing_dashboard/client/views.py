# billing_dashboard/client/views.py
"""
View state for the dashboard screens.

Each view owns a generation counter. `load()` bumps it before issuing its
requests and applies the responses only if no newer `load()` started in the
meantime, so switching project or filter quickly never lets an older
response overwrite a newer one. A failed request is logged and its slot is
left empty; there is no retry.
"""
import asyncio
import logging
from datetime import datetime
from typing import Any, Awaitable, Callable, Optional

from pydantic import TypeAdapter

from billing_dashboard.client.api import BillingApiClient, ReportingError
from billing_dashboard.client.formatting import customer_label, format_amount, type_label

log = logging.getLogger(__name__)

EMPTY_SUMMARY = {
    "total_revenue": 0,
    "total_fees": 0,
    "net_revenue": 0,
    "refunded_amount": 0,
    "total_transactions": 0,
    "total_customers": 0,
    "active_subscriptions": 0,
    "mrr": 0,
}


_DATETIME = TypeAdapter(datetime)


def _short_date(value: Optional[str]) -> Optional[str]:
    # API timestamps may end in "Z", which datetime.fromisoformat rejects before 3.11
    if not value:
        return None
    dt = _DATETIME.validate_python(value)
    return f"{dt:%b} {dt.day}, {dt.year}"


def _fee(t: dict) -> int:
    return t.get("fee_amount") or 0


def _net(t: dict) -> int:
    # same NULL-fee rule the server aggregates use
    net = t.get("net_amount")
    return net if net is not None else t["amount"] - _fee(t)


class _View:
    def __init__(self, api: BillingApiClient):
        self.api = api
        self.loading = False
        self.generation = 0

    def _begin(self) -> int:
        self.generation += 1
        self.loading = True
        return self.generation

    async def _fetch(self, what: str, call: Awaitable[Any], empty: Callable[[], Any]):
        try:
            return await call
        except ReportingError as e:
            log.error("Error fetching %s: %s", what, e)
            return empty()

    def _commit(self, generation: int, apply: Callable[[], None]) -> bool:
        if generation != self.generation:
            log.debug("Discarding stale %s response (generation %d, current %d)",
                      type(self).__name__, generation, self.generation)
            return False
        apply()
        self.loading = False
        return True


# =========================
# PROJECT SELECTOR
# =========================
class ProjectListView(_View):
    def __init__(self, api: BillingApiClient):
        super().__init__(api)
        self.projects: list[dict] = []
        self.selected: Optional[dict] = None

    async def load(self) -> bool:
        generation = self._begin()
        projects = await self._fetch("projects", self.api.list_projects(), list)

        def apply():
            self.projects = projects
            self.selected = projects[0] if projects else None

        return self._commit(generation, apply)

    def select(self, project_id: str) -> Optional[dict]:
        for project in self.projects:
            if str(project["id"]) == str(project_id):
                self.selected = project
                break
        return self.selected

    @property
    def is_empty(self) -> bool:
        return not self.loading and not self.projects


# =========================
# OVERVIEW
# =========================
class DashboardView(_View):
    def __init__(self, api: BillingApiClient, currency: str = "USD", tz: Optional[str] = None):
        super().__init__(api)
        self.currency = currency
        self.tz = tz
        self.summary: dict = dict(EMPTY_SUMMARY)
        self.trend: list[dict] = []
        self.recent: list[dict] = []

    async def load(self, project_id: str, end: Optional[datetime] = None) -> bool:
        generation = self._begin()
        summary, trend, recent = await asyncio.gather(
            self._fetch("summary", self.api.get_summary(project_id), lambda: dict(EMPTY_SUMMARY)),
            self._fetch("trend", self.api.get_trend(project_id, end=end, tz=self.tz), list),
            self._fetch("recent transactions", self.api.recent_transactions(project_id), list),
        )

        def apply():
            self.summary, self.trend, self.recent = summary, trend, recent

        return self._commit(generation, apply)

    def cards(self) -> list[dict]:
        s = self.summary
        return [
            {"label": "Total Revenue", "value": format_amount(s["total_revenue"], self.currency),
             "note": "Gross earnings"},
            {"label": "Net Revenue", "value": format_amount(s["net_revenue"], self.currency),
             "note": "After fees"},
            {"label": "MRR", "value": format_amount(s["mrr"], self.currency),
             "note": f"{s['active_subscriptions']} active"},
            {"label": "Transactions", "value": str(s["total_transactions"]),
             "note": f"{s['total_customers']} customers"},
        ]

    def chart_series(self) -> list[dict]:
        # chart axis is in major units
        return [{"date": p["date"], "revenue": p["revenue"] / 100} for p in self.trend]

    def recent_rows(self) -> list[dict]:
        return [
            {
                "customer": customer_label(t.get("customer")),
                "type": t["type"],
                "status": t["status"],
                "amount": format_amount(t["amount"], t.get("currency") or self.currency),
            }
            for t in self.recent
        ]


# =========================
# LISTS
# =========================
class TransactionListView(_View):
    FILTERS = ("all", "succeeded", "pending", "failed")

    def __init__(self, api: BillingApiClient):
        super().__init__(api)
        self.status = "all"
        self.transactions: list[dict] = []

    async def load(self, project_id: str, status: Optional[str] = None) -> bool:
        if status is not None:
            self.status = status
        generation = self._begin()
        rows = await self._fetch(
            "transactions", self.api.list_transactions(project_id, self.status), list
        )

        def apply():
            self.transactions = rows

        return self._commit(generation, apply)

    def rows(self) -> list[dict]:
        return [
            {
                "date": _short_date(t.get("created_at")),
                "customer": (t.get("customer") or {}).get("name") or "Unknown",
                "email": (t.get("customer") or {}).get("email"),
                "type": type_label(t["type"]),
                "status": t["status"],
                "amount": format_amount(t["amount"], t["currency"]),
                "fee": format_amount(_fee(t), t["currency"]),
                "net": format_amount(_net(t), t["currency"]),
            }
            for t in self.transactions
        ]


class SubscriptionListView(_View):
    FILTERS = ("all", "active", "past_due", "canceled")

    def __init__(self, api: BillingApiClient):
        super().__init__(api)
        self.status = "all"
        self.subscriptions: list[dict] = []

    async def load(self, project_id: str, status: Optional[str] = None) -> bool:
        if status is not None:
            self.status = status
        generation = self._begin()
        rows = await self._fetch(
            "subscriptions", self.api.list_subscriptions(project_id, self.status), list
        )

        def apply():
            self.subscriptions = rows

        return self._commit(generation, apply)

    def rows(self) -> list[dict]:
        return [
            {
                "customer": (s.get("customer") or {}).get("name") or "Unknown",
                "email": (s.get("customer") or {}).get("email"),
                "plan": s.get("plan_name") or s.get("plan_id") or "",
                "status": s["status"],
                "amount": format_amount(s["amount"], s["currency"]),
                "renews": _short_date(s.get("current_period_end")),
                "cancelling": bool(s.get("cancel_at_period_end")),
            }
            for s in self.subscriptions
        ]
