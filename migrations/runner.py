"""
Versioned migration runner

Each module in ``migrations/versions`` exposes VERSION, NAME, upgrade(session)
and downgrade(session). Applied versions are logged in ``schema_migrations``;
every migration runs in its own transaction together with its log entry.
"""

import importlib
import logging
import pkgutil
from types import ModuleType
from typing import Optional

from sqlalchemy.orm import Session

from housnkuh.models import SchemaMigration

from . import versions

logger = logging.getLogger(__name__)


class MigrationError(Exception):
    pass


def discover_migrations() -> list[ModuleType]:
    """Load migration modules ordered by VERSION"""
    modules = []
    for info in pkgutil.iter_modules(versions.__path__):
        module = importlib.import_module(f"{versions.__name__}.{info.name}")
        if hasattr(module, "VERSION") and hasattr(module, "upgrade"):
            modules.append(module)

    modules.sort(key=lambda m: m.VERSION)
    seen = set()
    for module in modules:
        if module.VERSION in seen:
            raise MigrationError(f"Duplicate migration version {module.VERSION}")
        seen.add(module.VERSION)
    return modules


def ensure_log_table(session: Session) -> None:
    SchemaMigration.__table__.create(bind=session.connection(), checkfirst=True)
    session.commit()


def applied_versions(session: Session) -> set[int]:
    ensure_log_table(session)
    return {row.version for row in session.query(SchemaMigration.version).all()}


def status(session: Session) -> list[dict]:
    ensure_log_table(session)
    applied = {m.version: m for m in session.query(SchemaMigration).all()}
    return [
        {
            "version": module.VERSION,
            "name": module.NAME,
            "applied": module.VERSION in applied,
            "applied_at": applied[module.VERSION].applied_at if module.VERSION in applied else None,
        }
        for module in discover_migrations()
    ]


def upgrade(session: Session, target: Optional[int] = None) -> list[int]:
    """Apply pending migrations up to ``target`` (all when None)"""
    applied = applied_versions(session)
    ran = []
    for module in discover_migrations():
        if module.VERSION in applied or (target is not None and module.VERSION > target):
            continue
        logger.info(f"⬆️ Applying migration {module.VERSION:03d} {module.NAME}")
        try:
            module.upgrade(session)
            session.add(SchemaMigration(version=module.VERSION, name=module.NAME))
            session.commit()
        except Exception as e:
            session.rollback()
            logger.error(f"❌ Migration {module.VERSION:03d} {module.NAME} failed: {e}")
            raise
        ran.append(module.VERSION)

    if not ran:
        logger.info("ℹ️ Database is up to date")
    return ran


def downgrade(session: Session, steps: int = 1) -> list[int]:
    """Revert the ``steps`` most recently applied migrations"""
    applied = applied_versions(session)
    modules = [m for m in reversed(discover_migrations()) if m.VERSION in applied][:steps]
    reverted = []
    for module in modules:
        logger.info(f"⬇️ Reverting migration {module.VERSION:03d} {module.NAME}")
        try:
            module.downgrade(session)
            session.query(SchemaMigration).filter(SchemaMigration.version == module.VERSION).delete()
            session.commit()
        except Exception as e:
            session.rollback()
            logger.error(f"❌ Downgrade of {module.VERSION:03d} {module.NAME} failed: {e}")
            raise
        reverted.append(module.VERSION)
    return reverted
