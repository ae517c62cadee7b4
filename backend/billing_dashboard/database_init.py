# billing_dashboard/database_init.py
import logging

from sqlalchemy_utils import database_exists, create_database
from billing_dashboard.database import DATABASE_URL, Base, engine

log = logging.getLogger(__name__)


def ensure_database():
    if not database_exists(DATABASE_URL):
        create_database(DATABASE_URL)
        log.info("Database created: %s", engine.url.render_as_string(hide_password=True))
    else:
        log.info("Database already exists: %s", engine.url.render_as_string(hide_password=True))


def ensure_schema():
    # models must be imported so their tables and views are registered on Base.metadata
    from billing_dashboard.models import project, gateway, customer, transaction, subscription, snapshot, logs, views  # noqa: F401

    Base.metadata.create_all(bind=engine)
