from __future__ import annotations

import argparse
import json
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
from services.record_corrector import (
    MatchDocumentError,
    RecordCorrector,
    RecordNotFoundError,
    ResultValidationError,
    StoreConnectionError,
    WriteRaceAnomalyError,
    parse_override,
)

LOGGER = logging.getLogger("match_result_fix")

EXIT_OK = 0
EXIT_CONFIG_ERROR = 1
EXIT_CONNECTION_ERROR = 2
EXIT_WRITE_RACE = 3
EXIT_BAD_DOCUMENT = 4


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Mark one cricket match completed and overwrite its result with the given values."
    )
    parser.add_argument("--id", required=True, dest="record_id", help="matchId of the match to correct.")
    parser.add_argument("--winner-name", required=True, help="Name of the winning team, e.g. England.")
    parser.add_argument("--winner-id", default=None, help="Team id of the winner, matched exactly.")
    parser.add_argument("--margin", type=int, required=True, help="Winning margin.")
    parser.add_argument("--margin-type", default="runs", help="Margin unit (runs|wickets|...).")
    parser.add_argument("--result-text", default=None, help="Result summary; built from winner and margin when omitted.")
    parser.add_argument("--source", default="manual", help="Provenance tag stored as result.dataSource.")
    parser.add_argument(
        "--log-level",
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Defaults to LOG_LEVEL from settings.",
    )
    return parser.parse_args(argv)


def configure_logging(log_level: Optional[str]) -> None:
    level_name = (log_level or settings.log_level or "INFO").upper()
    logging.basicConfig(
        level=getattr(logging, level_name, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s - %(message)s",
    )
    if level_name != "DEBUG":
        logging.getLogger("pymongo").setLevel(logging.WARNING)


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = parse_args(argv)
    configure_logging(args.log_level)

    try:
        settings.require_database_url()
    except ConfigError as exc:
        LOGGER.error("Configuration error: %s", exc)
        return EXIT_CONFIG_ERROR

    try:
        override = parse_override(
            {
                "winner_name": args.winner_name,
                "winner_id": args.winner_id,
                "margin": args.margin,
                "margin_type": args.margin_type,
                "result_text": args.result_text,
                "source": args.source,
            }
        )
    except ResultValidationError as exc:
        LOGGER.error("%s", exc)
        return EXIT_CONFIG_ERROR

    try:
        client = create_client(settings)
    except ConfigurationError as exc:
        LOGGER.error("Invalid database configuration: %s", exc)
        return EXIT_CONFIG_ERROR

    try:
        LOGGER.info("Correcting match %s in %s", args.record_id, settings.match_collection)
        corrector = RecordCorrector(match_collection(client, settings))
        report = corrector.correct(args.record_id, override)
    except RecordNotFoundError as exc:
        LOGGER.warning("%s; nothing written.", exc)
        print(json.dumps({"record_id": args.record_id, "found": False, "modified_count": 0}, indent=2))
        return EXIT_OK
    except ResultValidationError as exc:
        LOGGER.error("%s", exc)
        return EXIT_CONFIG_ERROR
    except MatchDocumentError as exc:
        LOGGER.error("Match %s cannot be corrected: %s", args.record_id, exc)
        return EXIT_BAD_DOCUMENT
    except WriteRaceAnomalyError as exc:
        LOGGER.error("Write race: %s", exc)
        return EXIT_WRITE_RACE
    except StoreConnectionError:
        LOGGER.exception("Store unreachable while correcting match %s", args.record_id)
        return EXIT_CONNECTION_ERROR
    finally:
        client.close()

    if report.changed:
        LOGGER.info("Match %s updated: %s -> %s", report.record_id, report.previous_status, report.new_status)
    print(json.dumps(report.as_dict(), indent=2, default=str))
    return EXIT_OK


if __name__ == "__main__":
    raise SystemExit(main())
