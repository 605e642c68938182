from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

# Ensure repository root is importable when running as a script.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from pymongo.errors import ConfigurationError

from core.config import ConfigError, settings
from db.session import create_client, match_collection
from scripts.correct_match_result import (
    EXIT_BAD_DOCUMENT,
    EXIT_CONFIG_ERROR,
    EXIT_CONNECTION_ERROR,
    EXIT_OK,
    configure_logging,
)
from services.match_summary import consistency_problems, summarize_match
from services.record_corrector import (
    MatchDocumentError,
    RecordCorrector,
    RecordNotFoundError,
    ResultValidationError,
    StoreConnectionError,
)

LOGGER = logging.getLogger("match_status")


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Show the stored status of one cricket match. Read-only.")
    parser.add_argument("--id", required=True, dest="record_id", help="matchId to inspect.")
    parser.add_argument("--log-level", default=None, choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    args = parser.parse_args(argv)
    configure_logging(args.log_level)

    try:
        settings.require_database_url()
        client = create_client(settings)
    except (ConfigError, ConfigurationError) as exc:
        LOGGER.error("Configuration error: %s", exc)
        return EXIT_CONFIG_ERROR

    try:
        record = RecordCorrector(match_collection(client, settings)).fetch(args.record_id)
    except RecordNotFoundError as exc:
        print(str(exc))
        return EXIT_OK
    except ResultValidationError as exc:
        LOGGER.error("%s", exc)
        return EXIT_CONFIG_ERROR
    except MatchDocumentError as exc:
        LOGGER.error("%s", exc)
        return EXIT_BAD_DOCUMENT
    except StoreConnectionError:
        LOGGER.exception("Store unreachable while reading match %s", args.record_id)
        return EXIT_CONNECTION_ERROR
    finally:
        client.close()

    for line in summarize_match(record):
        print(line)

    problems = consistency_problems(record)
    if problems:
        print("Inconsistencies:")
        for problem in problems:
            print(f"  - {problem}")
    else:
        print("No inconsistencies found.")
    return EXIT_OK


if __name__ == "__main__":
    raise SystemExit(main())
