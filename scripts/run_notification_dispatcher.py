from __future__ import annotations

import argparse
import asyncio
import logging
import signal

from vagas_api.shared.config import ApplicationContainer, settings


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Deliver pending notifications to the webhook.")
    parser.add_argument(
        "--poll-interval-seconds",
        type=float,
        default=2.0,
        help="Polling interval for pending notifications.",
    )
    parser.add_argument(
        "--batch-size",
        type=int,
        default=100,
        help="Maximum notifications delivered per poll cycle.",
    )
    parser.add_argument(
        "--once",
        action="store_true",
        help="Deliver one batch and exit.",
    )
    return parser.parse_args()


async def _run_dispatcher(args: argparse.Namespace) -> None:
    container = ApplicationContainer(settings)
    await container.startup()
    try:
        dispatcher = container.create_notification_dispatcher(
            poll_interval_seconds=args.poll_interval_seconds,
            batch_size=args.batch_size,
        )

        if args.once:
            delivered = await dispatcher.process_pending_once(limit=args.batch_size)
            print(f"Delivered notifications: {delivered}")
            return

        stop_event = asyncio.Event()

        def _request_stop() -> None:
            dispatcher.stop()
            stop_event.set()

        loop = asyncio.get_running_loop()
        for sig in (signal.SIGINT, signal.SIGTERM):
            try:
                loop.add_signal_handler(sig, _request_stop)
            except NotImplementedError:
                pass

        worker_task = asyncio.create_task(dispatcher.run_forever())
        await stop_event.wait()
        await worker_task
    finally:
        await container.shutdown()


def main() -> int:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s %(message)s")
    args = parse_args()
    try:
        asyncio.run(_run_dispatcher(args))
        return 0
    except KeyboardInterrupt:
        return 0


if __name__ == "__main__":
    raise SystemExit(main())
