"""Probe the configured inference endpoints and print one line per endpoint."""

from __future__ import annotations

import asyncio
import sys
from typing import Iterable

from wardrobe_vision.integrations import IntegrationCheckResult, run_all_checks
from wardrobe_vision.monitoring.logging import configure_logging


def _format_result(result: IntegrationCheckResult) -> str:
    status = "OK  " if result.success else "FAIL"
    return f"{status} {result.name}: {result.message}"


def print_results(results: Iterable[IntegrationCheckResult]) -> None:
    for result in results:
        print(_format_result(result))


def main() -> int:
    configure_logging()
    results = asyncio.run(run_all_checks())
    if not results:
        print("No inference endpoints configured.")
        return 1
    print_results(results)
    return 0 if all(result.success for result in results) else 1


if __name__ == "__main__":
    sys.exit(main())
