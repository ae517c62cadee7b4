# billing_dashboard/models/views.py
"""
Persisted analytics views. Created on PostgreSQL only, right after the tables.

The service layer (billing_dashboard.services.analytics) computes the same
figures with parameterized queries; these views are kept so external readers
of the database see the same columns they always did.

NOTE: customer_stats_by_project.new_last_30_days is evaluated against NOW()
every time the view is read, so repeated reads are not reproducible.
"""
from sqlalchemy import DDL, event
from billing_dashboard.database import Base

VIEWS = {
    "monthly_revenue_by_project": """
        SELECT
            DATE_TRUNC('month', t.created_at)::DATE AS month,
            p.id AS project_id,
            p.name AS project_name,
            SUM(CASE WHEN t.status = 'succeeded' THEN t.amount ELSE 0 END) AS total_revenue,
            SUM(CASE WHEN t.status = 'succeeded' THEN t.fee_amount ELSE 0 END) AS total_fees,
            SUM(CASE WHEN t.status = 'succeeded' THEN (t.amount - t.fee_amount) ELSE 0 END) AS net_revenue,
            COUNT(DISTINCT CASE WHEN t.status = 'succeeded' AND t.type = 'payment' THEN t.customer_id END) AS paying_customers
        FROM transactions t
        JOIN projects p ON t.project_id = p.id
        GROUP BY month, p.id, p.name
        ORDER BY month DESC, p.name
    """,
    "active_subscriptions_by_project": """
        SELECT
            p.id AS project_id,
            p.name AS project_name,
            COUNT(*) AS total_active,
            SUM(s.amount) AS mrr,
            COUNT(CASE WHEN s.cancel_at_period_end THEN 1 END) AS scheduled_cancellations
        FROM subscriptions s
        JOIN projects p ON s.project_id = p.id
        WHERE s.status = 'active'
        GROUP BY p.id, p.name
    """,
    "customer_stats_by_project": """
        SELECT
            p.id AS project_id,
            p.name AS project_name,
            COUNT(DISTINCT c.id) AS total_customers,
            COUNT(DISTINCT CASE WHEN c.created_at > NOW() - INTERVAL '30 days' THEN c.id END) AS new_last_30_days,
            COUNT(DISTINCT s.customer_id) AS customers_with_subscriptions
        FROM customers c
        LEFT JOIN subscriptions s ON c.id = s.customer_id AND s.status = 'active'
        JOIN projects p ON c.project_id = p.id
        GROUP BY p.id, p.name
    """,
}

for _name, _body in VIEWS.items():
    event.listen(
        Base.metadata,
        "after_create",
        DDL(f"CREATE OR REPLACE VIEW {_name} AS {_body}").execute_if(dialect="postgresql"),
    )
    event.listen(
        Base.metadata,
        "before_drop",
        DDL(f"DROP VIEW IF EXISTS {_name}").execute_if(dialect="postgresql"),
    )
