"""
Migration runner CLI
Usage:
    python run_migration.py up [--target N]
    python run_migration.py down [--steps N]
    python run_migration.py status
"""
import argparse
import logging
import sys

from housnkuh.database import SessionLocal
from migrations import runner

logging.basicConfig(level=logging.INFO, format='%(message)s')
logger = logging.getLogger(__name__)


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Apply or revert housnkuh database migrations")
    sub = parser.add_subparsers(dest="command", required=True)

    up = sub.add_parser("up", help="Apply pending migrations")
    up.add_argument("--target", type=int, default=None, help="Stop after this version")

    down = sub.add_parser("down", help="Revert applied migrations")
    down.add_argument("--steps", type=int, default=1, help="Number of migrations to revert")

    sub.add_parser("status", help="List migrations and whether they are applied")

    args = parser.parse_args(argv)

    db = SessionLocal()
    try:
        if args.command == "up":
            ran = runner.upgrade(db, target=args.target)
            logger.info(f"✅ Applied {len(ran)} migration(s): {ran}")
        elif args.command == "down":
            reverted = runner.downgrade(db, steps=args.steps)
            logger.info(f"✅ Reverted {len(reverted)} migration(s): {reverted}")
        else:
            for entry in runner.status(db):
                mark = "x" if entry["applied"] else " "
                logger.info(f"[{mark}] {entry['version']:03d} {entry['name']}  {entry['applied_at'] or ''}")
    except Exception as e:
        logger.error(f"❌ Migration failed: {e}")
        return 1
    finally:
        db.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
