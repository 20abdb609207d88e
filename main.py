"""Main entry point for the token bucket demo"""
import sys
import asyncio
import time
from pathlib import Path
from typing import List

# Add project root to path
project_root = Path(__file__).parent
sys.path.insert(0, str(project_root))

from limiter.utils.logger import logger
from limiter.utils.config import config
from limiter import TokenBucket, AsyncTokenBucket


def resolve_settings(args) -> dict:
    """Merge command line options over the configured bucket settings"""
    settings = config.bucket_settings()
    if args.rate is not None:
        settings["refill_rate"] = args.rate
    if args.capacity is not None:
        settings["capacity"] = args.capacity
    if args.tick_interval is not None:
        settings["tick_interval"] = args.tick_interval
    return settings


def report(index: int, allowed: bool):
    print(f"Request {index} {'allowed' if allowed else 'denied'}")


def run_demo(args) -> List[bool]:
    """Fire requests at a fixed pace and print whether each one got a token"""
    settings = resolve_settings(args)
    requests = args.requests if args.requests is not None else config.get("demo.requests", 15)
    pace = args.pace if args.pace is not None else config.get("demo.pace", 0.2)

    logger.info(
        f"Demo: {requests} requests every {pace}s against "
        f"rate={settings['refill_rate']}/tick, capacity={settings['capacity']}, "
        f"tick={settings['tick_interval']}s"
    )

    results = []
    with TokenBucket(settings["refill_rate"], settings["capacity"], settings["tick_interval"]) as bucket:
        for i in range(requests):
            allowed = bucket.try_acquire()
            results.append(allowed)
            report(i + 1, allowed)
            if i < requests - 1:
                time.sleep(pace)

    logger.info(f"Demo finished: {sum(results)}/{len(results)} allowed")
    return results


async def run_demo_async(args) -> List[bool]:
    """Same as run_demo, driving AsyncTokenBucket on an event loop"""
    settings = resolve_settings(args)
    requests = args.requests if args.requests is not None else config.get("demo.requests", 15)
    pace = args.pace if args.pace is not None else config.get("demo.pace", 0.2)

    results = []
    async with AsyncTokenBucket(settings["refill_rate"], settings["capacity"], settings["tick_interval"]) as bucket:
        for i in range(requests):
            allowed = await bucket.acquire()
            results.append(allowed)
            report(i + 1, allowed)
            if i < requests - 1:
                await asyncio.sleep(pace)

    logger.info(f"Async demo finished: {sum(results)}/{len(results)} allowed")
    return results


def show_settings(args):
    """Print the effective bucket settings"""
    settings = resolve_settings(args)
    print(f"Config file: {config.config_path}")
    for key, value in settings.items():
        print(f"  {key}: {value}")


def build_parser():
    import argparse

    parser = argparse.ArgumentParser(description="Token bucket rate limiter demo")
    parser.add_argument(
        "mode",
        choices=["demo", "settings"],
        help="Mode: demo (run requests through a bucket), settings (print effective configuration)",
    )
    parser.add_argument("--rate", type=int, help="Tokens added per tick")
    parser.add_argument("--capacity", type=int, help="Maximum tokens (burst size)")
    parser.add_argument("--tick-interval", type=float, help="Seconds between refills")
    parser.add_argument("--requests", type=int, help="Demo: number of requests to send")
    parser.add_argument("--pace", type=float, help="Demo: seconds between requests")
    parser.add_argument("--async", dest="use_async", action="store_true", help="Demo: use the asyncio bucket")
    return parser


def main(argv=None):
    """Main entry point"""
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        if args.mode == "settings":
            show_settings(args)
        elif args.use_async:
            asyncio.run(run_demo_async(args))
        else:
            run_demo(args)
    except ValueError as e:
        logger.error(f"Invalid bucket configuration: {e}")
        return 2
    except KeyboardInterrupt:
        logger.info("Demo stopped by user")
        return 130
    return 0


if __name__ == "__main__":
    sys.exit(main())
