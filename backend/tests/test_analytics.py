from datetime import date

import pytest

from billing_dashboard.models.transaction import Transaction
from billing_dashboard.services import analytics
from conftest import NOW, days_ago


@pytest.fixture
def project(seed):
    return seed.project(name="Acme")


@pytest.fixture
def gateway(seed, project):
    return seed.gateway(project)


# =========================
# SUMMARY
# =========================
def test_summary_example(db, seed, project, gateway):
    seed.transaction(project, gateway, 1000, fee=50, status="succeeded")
    seed.transaction(project, gateway, 500, fee=0, status="failed")

    stats = analytics.summary_stats(db, project.id)

    assert stats["total_revenue"] == 1000
    assert stats["total_fees"] == 50
    assert stats["net_revenue"] == 950
    assert stats["total_transactions"] == 2


def test_summary_counts_and_mrr(db, seed, project, gateway):
    ada = seed.customer(project, name="Ada")
    bob = seed.customer(project, name="Bob")
    seed.customer(project, name="Cy")
    seed.subscription(project, ada, gateway, 2000)
    seed.subscription(project, bob, gateway, 1500, cancel_at_period_end=True)
    seed.subscription(project, bob, gateway, 9999, status="canceled")

    stats = analytics.summary_stats(db, project.id)

    assert stats["total_customers"] == 3
    assert stats["active_subscriptions"] == 2
    assert stats["mrr"] == 3500


def test_summary_of_empty_project_is_all_zero(db, project):
    stats = analytics.summary_stats(db, project.id)
    assert set(stats.values()) == {0}


def test_refunds_are_reported_but_not_netted(db, seed, project, gateway):
    seed.transaction(project, gateway, 1000, fee=30)
    seed.transaction(project, gateway, 200, type="refund")
    seed.transaction(project, gateway, 700, type="refund", status="failed")

    stats = analytics.summary_stats(db, project.id)

    # status drives revenue, type only feeds the separate refund figure
    assert stats["total_revenue"] == 1200
    assert stats["net_revenue"] == 1170
    assert stats["refunded_amount"] == 200


def test_summary_is_scoped_to_project(db, seed, project, gateway):
    other = seed.project(name="Other")
    other_gw = seed.gateway(other)
    seed.transaction(project, gateway, 1000)
    seed.transaction(other, other_gw, 5000)

    assert analytics.summary_stats(db, project.id)["total_revenue"] == 1000
    assert analytics.summary_stats(db, other.id)["total_revenue"] == 5000


# =========================
# TREND
# =========================
def test_trend_is_sparse_and_keeps_failed_only_days(db, seed, project, gateway):
    seed.transaction(project, gateway, 1000, created_at=days_ago(1))
    seed.transaction(project, gateway, 500, status="failed", created_at=days_ago(2))
    seed.transaction(project, gateway, 200, created_at=days_ago(3))
    seed.transaction(project, gateway, 300, created_at=days_ago(3, hours=1))
    seed.transaction(project, gateway, 9000, created_at=days_ago(40))

    trend = analytics.revenue_trend(db, project.id, end=NOW)

    assert trend == [
        {"date": date(2026, 10, 15), "revenue": 500},
        {"date": date(2026, 10, 16), "revenue": 0},
        {"date": date(2026, 10, 17), "revenue": 1000},
    ]


def test_trend_keeps_latest_fourteen_days(db, seed, project, gateway):
    for n in range(1, 21):
        seed.transaction(project, gateway, 100 * n, created_at=days_ago(n))

    trend = analytics.revenue_trend(db, project.id, end=NOW)

    assert len(trend) == 14
    assert trend[0]["date"] == date(2026, 10, 4)
    assert trend[-1]["date"] == date(2026, 10, 17)
    assert [p["date"] for p in trend] == sorted(p["date"] for p in trend)


def test_trend_never_leaves_the_window(db, seed, project, gateway):
    seed.transaction(project, gateway, 100, created_at=days_ago(30, hours=1))
    seed.transaction(project, gateway, 200, created_at=days_ago(29))
    seed.transaction(project, gateway, 300, created_at=NOW)

    trend = analytics.revenue_trend(db, project.id, end=NOW, window_days=30)

    assert [p["revenue"] for p in trend] == [200, 300]
    start = days_ago(30).date()
    assert all(start <= p["date"] <= NOW.date() for p in trend)


def test_trend_buckets_by_viewer_timezone(db, seed, project, gateway):
    # 02:00 UTC on the 18th is still the 17th in New York
    seed.transaction(project, gateway, 400, created_at=days_ago(0, hours=10))

    utc = analytics.revenue_trend(db, project.id, end=NOW, tz="UTC")
    ny = analytics.revenue_trend(db, project.id, end=NOW, tz="America/New_York")

    assert utc == [{"date": date(2026, 10, 18), "revenue": 400}]
    assert ny == [{"date": date(2026, 10, 17), "revenue": 400}]


def test_trend_respects_bucket_limit_argument(db, seed, project, gateway):
    for n in range(1, 6):
        seed.transaction(project, gateway, 100, created_at=days_ago(n))

    trend = analytics.revenue_trend(db, project.id, end=NOW, max_buckets=2)

    assert [p["date"] for p in trend] == [date(2026, 10, 16), date(2026, 10, 17)]


# =========================
# MONTHLY REVENUE
# =========================
def test_monthly_revenue_groups_by_month(db, seed, project, gateway):
    ada = seed.customer(project, name="Ada")
    bob = seed.customer(project, name="Bob")
    sept = NOW.replace(month=9, day=10)
    seed.transaction(project, gateway, 1000, fee=50, customer=ada, created_at=sept)
    seed.transaction(project, gateway, 500, status="failed", customer=bob, created_at=sept)
    seed.transaction(project, gateway, 2000, fee=100, customer=ada, created_at=days_ago(5))
    seed.transaction(project, gateway, 300, customer=ada, created_at=days_ago(4))
    seed.transaction(project, gateway, 400, customer=bob, type="subscription_renewal",
                     created_at=days_ago(3))

    rows = analytics.monthly_revenue(db, project.id)

    assert [r["month"] for r in rows] == [date(2026, 10, 1), date(2026, 9, 1)]
    october, september = rows
    assert october["total_revenue"] == 2700
    assert october["total_fees"] == 100
    assert october["net_revenue"] == 2600
    assert october["paying_customers"] == 1  # renewals are not "payment" rows
    assert september["total_revenue"] == 1000
    assert september["paying_customers"] == 1
    assert september["project_name"] == "Acme"


def test_monthly_totals_match_succeeded_amounts(db, seed, project, gateway):
    for n, status in enumerate(["succeeded", "failed", "succeeded", "pending", "succeeded"]):
        seed.transaction(project, gateway, 1000 + n, fee=n, status=status,
                         created_at=days_ago(20 * n))

    rows = analytics.monthly_revenue(db, project.id)
    expected = sum(
        t.amount for t in db.query(Transaction)
        .filter(Transaction.project_id == project.id, Transaction.status == "succeeded")
    )

    assert sum(r["total_revenue"] for r in rows) == expected


def test_monthly_revenue_row_exists_for_failed_only_month(db, seed, project, gateway):
    seed.transaction(project, gateway, 800, status="failed", created_at=days_ago(1))

    rows = analytics.monthly_revenue(db, project.id)

    assert len(rows) == 1
    assert rows[0]["total_revenue"] == 0
    assert rows[0]["net_revenue"] == 0


def test_monthly_revenue_skips_projects_without_transactions(db, seed, project, gateway):
    seed.project(name="Empty")
    seed.transaction(project, gateway, 100)

    rows = analytics.monthly_revenue(db)

    assert {r["project_name"] for r in rows} == {"Acme"}


# =========================
# ACTIVE SUBSCRIPTIONS
# =========================
def test_active_subscriptions_mrr_and_cancellations(db, seed, project, gateway):
    ada = seed.customer(project, name="Ada")
    seed.subscription(project, ada, gateway, 1000, cancel_at_period_end=True)
    seed.subscription(project, ada, gateway, 2500)
    seed.subscription(project, ada, gateway, 900, status="canceled", cancel_at_period_end=True)
    seed.subscription(project, ada, gateway, 300, status="past_due")
    seed.project(name="No subs")

    rows = analytics.active_subscriptions(db)

    assert rows == [{
        "project_id": project.id,
        "project_name": "Acme",
        "total_active": 2,
        "mrr": 3500,
        "scheduled_cancellations": 1,
    }]


# =========================
# CUSTOMER STATS
# =========================
def test_customer_stats_with_explicit_as_of(db, seed, project, gateway):
    old_sub = seed.customer(project, name="Old", created_at=days_ago(60))
    recent_canceled = seed.customer(project, name="Recent", created_at=days_ago(10))
    two_subs = seed.customer(project, name="Two", created_at=days_ago(5))
    seed.customer(project, name="Lurker", created_at=days_ago(100))
    seed.subscription(project, old_sub, gateway, 1000)
    seed.subscription(project, recent_canceled, gateway, 1000, status="canceled")
    seed.subscription(project, two_subs, gateway, 1000)
    seed.subscription(project, two_subs, gateway, 2000)

    [stats] = analytics.customer_stats(db, NOW, project_id=project.id)

    assert stats["total_customers"] == 4
    assert stats["new_customers"] == 2
    assert stats["customers_with_subscriptions"] == 2
    assert stats["window_start"] == days_ago(30)

    # moving as_of changes only the relative window
    [earlier] = analytics.customer_stats(db, days_ago(50), project_id=project.id)
    assert earlier["new_customers"] == 1
    assert earlier["total_customers"] == 4
