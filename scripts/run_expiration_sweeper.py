from __future__ import annotations

import argparse
import asyncio
import logging
import signal

from vagas_api.application import ExpirePendingBookingsUseCase
from vagas_api.shared.config import ApplicationContainer, settings

logger = logging.getLogger("vagas_api.sweeper")


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Expire stale pending bookings and free their spots.")
    parser.add_argument(
        "--interval-seconds",
        type=float,
        default=float(settings.sweep_interval_seconds),
        help="Seconds between sweeps.",
    )
    parser.add_argument(
        "--once",
        action="store_true",
        help="Run a single sweep and exit (for cron-style schedulers).",
    )
    return parser.parse_args()


async def _sweep(use_case: ExpirePendingBookingsUseCase) -> None:
    report = await use_case.execute()
    logger.info(
        "sweep_finished expired=%s failed=%s skipped=%s",
        report.expired,
        report.failed,
        report.skipped,
    )


async def _run_sweeper(args: argparse.Namespace) -> None:
    container = ApplicationContainer(settings)
    await container.startup()
    try:
        use_case = container.create_expire_pending_bookings_use_case()
        if args.once:
            await _sweep(use_case)
            return

        stop_event = asyncio.Event()
        loop = asyncio.get_running_loop()
        for sig in (signal.SIGINT, signal.SIGTERM):
            try:
                loop.add_signal_handler(sig, stop_event.set)
            except NotImplementedError:
                pass

        while not stop_event.is_set():
            try:
                await _sweep(use_case)
            except Exception:
                logger.exception("sweep_failed")
            try:
                await asyncio.wait_for(stop_event.wait(), timeout=args.interval_seconds)
            except TimeoutError:
                continue
    finally:
        await container.shutdown()


def main() -> int:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s %(message)s")
    args = parse_args()
    try:
        asyncio.run(_run_sweeper(args))
        return 0
    except KeyboardInterrupt:
        return 0


if __name__ == "__main__":
    raise SystemExit(main())
