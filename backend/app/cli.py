#!/usr/bin/env python3
"""
反馈服务命令行 (Feedback Service CLI)

Usage:
    python -m app.cli sweep                 # 立即执行一次月度清理 (run the monthly cleanup once)
    python -m app.cli serve [--host HOST] [--port PORT]
"""
import argparse
import asyncio
import logging
import sys

from app.core.config import settings


def setup_logging(verbose: bool = False):
    level = logging.DEBUG if verbose else settings.log_level.upper()
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


async def _run_sweep() -> list[int]:
    from app.core.database import Base, async_session, engine
    from app.services.effects import SideEffects
    from app.services.notification import Mailer
    from app.tasks.cleanup_sweep import sweep_low_rated_products

    try:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        effects = SideEffects(async_session, Mailer.from_settings(settings))
        deleted = await sweep_low_rated_products(async_session, effects)
        await effects.dispatch()
        return deleted
    finally:
        await engine.dispose()


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Feedback Service")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable verbose logging")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("sweep", help="Run the low-rating product cleanup once")

    serve = sub.add_parser("serve", help="Run the HTTP API")
    serve.add_argument("--host", default="127.0.0.1", help="Host to bind (default: 127.0.0.1)")
    serve.add_argument("--port", type=int, default=8000, help="Port to bind (default: 8000)")

    args = parser.parse_args(argv)
    setup_logging(args.verbose)
    logger = logging.getLogger(__name__)

    if args.command == "sweep":
        try:
            deleted = asyncio.run(_run_sweep())
        except Exception as e:
            logger.error(f"Cleanup failed: {e}")
            return 1
        print(f"Deleted {len(deleted)} products: {deleted}")
        return 0

    import uvicorn
    logger.info(f"Starting Feedback Service on {args.host}:{args.port}")
    uvicorn.run("app.main:app", host=args.host, port=args.port)
    return 0


if __name__ == "__main__":
    sys.exit(main())
