"""Validate JSON Schemas, or JSON instances against a schema, from the command line."""
from __future__ import annotations

import logging
import sys

from schema_check.runner import run

LOG_FORMAT = "%(levelname)s %(name)s: %(message)s"


def main() -> None:
    logging.basicConfig(level=logging.WARNING, format=LOG_FORMAT)
    raise SystemExit(run(sys.argv[1:]))


if __name__ == "__main__":
    main()
