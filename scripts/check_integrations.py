"""Run connectivity checks against Replicate and ImgBB."""

from __future__ import annotations

import asyncio
from typing import Iterable

from gameart.integrations import IntegrationCheckResult, run_all_checks
from gameart.monitoring.logging import configure_logging


def _format_result(result: IntegrationCheckResult) -> str:
    status = "OK  " if result.success else "FAIL"
    return f"{status} {result.name}: {result.message}"


def print_results(results: Iterable[IntegrationCheckResult]) -> None:
    for result in results:
        print(_format_result(result))


def main() -> None:
    configure_logging()
    results = asyncio.run(run_all_checks())
    print_results(results)


if __name__ == "__main__":
    main()
