from __future__ import annotations

import logging
import sys

from headline_digest import config
from headline_digest.orchestrator import run


def main() -> None:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s - %(message)s",
        stream=sys.stdout,
    )
    try:
        settings = config.Settings.from_env()
    except ValueError as exc:
        logging.error("Missing configuration: %s", exc)
        sys.exit(1)

    try:
        report = run(settings)
    except Exception as exc:  # noqa: BLE001
        logging.exception("Run failed: %s", exc)
        sys.exit(1)

    if report.failed_deliveries():
        logging.warning("%s message(s) could not be delivered.", len(report.failed_deliveries()))


if __name__ == "__main__":
    main()
