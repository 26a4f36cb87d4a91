"""Maintenance commands for scheduled or one-off runs.

    python -m greenlife.scripts.maintenance migrate-therapists
    python -m greenlife.scripts.maintenance cleanup-orphans
    python -m greenlife.scripts.maintenance send-reminders
"""
import argparse
import sys

from sqlmodel import Session

from greenlife.core.logging import configure_logging
from greenlife.database import create_db_and_tables, engine
from greenlife.services.notifications import send_appointment_reminders
from greenlife.services.users import cleanup_orphaned_therapists, migrate_existing_therapists


def _report(result, label: str) -> int:
    if not result.ok:
        print(f"{label}: {result.message}", file=sys.stderr)
        return 1
    print(f"{label}: {result.value}")
    return 0


def run(command: str, session: Session) -> int:
    if command == "migrate-therapists":
        return _report(migrate_existing_therapists(session), "Therapist records created")
    if command == "cleanup-orphans":
        return _report(cleanup_orphaned_therapists(session), "Orphaned therapist records removed")

    print(f"Reminders sent: {send_appointment_reminders(session)}")
    return 0


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(prog="greenlife-maintenance")
    parser.add_argument("command", choices=["migrate-therapists", "cleanup-orphans", "send-reminders"])
    args = parser.parse_args(argv)

    configure_logging()
    create_db_and_tables()

    with Session(engine) as session:
        return run(args.command, session)


if __name__ == "__main__":
    sys.exit(main())
