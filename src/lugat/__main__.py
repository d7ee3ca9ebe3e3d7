"""Command-line entry point: print progress for the configured database."""
import json
import logging
import sys
from typing import List, Optional

from lugat.config import settings
from lugat.logging_config import setup_logging
from lugat.models.base import SessionLocal, init_db
from lugat.monitoring import start_monitoring
from lugat.services.learning_service import LearningService
from lugat.services.storage import SqlStorage

logger = logging.getLogger(__name__)

COMMANDS = ("stats", "due", "new", "reset")


def main(argv: Optional[List[str]] = None) -> int:
    """Run one command against the database and print the result as JSON."""
    argv = sys.argv[1:] if argv is None else argv
    command = argv[0] if argv else "stats"
    if command not in COMMANDS:
        print(f"Usage: python -m lugat [{'|'.join(COMMANDS)}]", file=sys.stderr)
        return 2

    init_db()
    if settings.monitoring.enabled:
        start_monitoring(settings.monitoring.port)
        logger.info(f"Metrics served on port {settings.monitoring.port}")

    db = SessionLocal()
    try:
        service = LearningService(SqlStorage(db))
        if command == "stats":
            result = service.compute_stats().to_dict()
        elif command == "due":
            result = [word.to_dict() for word in service.select_due()]
        elif command == "new":
            result = [word.to_dict() for word in service.select_new()]
        else:
            result = {"deleted": service.reset_progress()}
    finally:
        db.close()

    print(json.dumps(result, ensure_ascii=False, indent=2))
    return 0


def run() -> None:
    """Console script entry point."""
    setup_logging("Starting lugat ...")
    sys.exit(main())


if __name__ == "__main__":
    run()
