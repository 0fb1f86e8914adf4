"""
Main entry point for the fadein preview.

Opens a pygame window that plays the entrance animation on a few cards.
"""

import argparse
import asyncio
import logging
import sys

from fadein.config.settings import get_settings


def setup_logging(debug: bool = False) -> None:
    """Configure logging."""
    level = logging.DEBUG if debug else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S"
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Preview fade-in entrance animations")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    parser.add_argument("--duration", type=float, help="Animation duration in ms")
    parser.add_argument("--delay", type=float, help="Delay before the first play in ms")
    parser.add_argument("--skip", action="store_true", help="Skip the animation entirely")
    parser.add_argument("--exit", action="store_true", help="Start settled and play out")
    return parser


async def run_preview(args: argparse.Namespace) -> None:
    """Run the pygame preview."""
    from fadein.simulator.window import PreviewWindow, exit_config

    settings = get_settings()
    overrides = {}
    if args.duration is not None:
        overrides["duration_ms"] = args.duration
    if args.delay is not None:
        overrides["delay_ms"] = args.delay
    if args.skip:
        overrides["skip_animation"] = True

    config = settings.animation.to_config(**overrides)
    if args.exit:
        config = exit_config(config)

    window = PreviewWindow(config=config, settings=settings)
    await window.run()


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)
    setup_logging(args.debug or get_settings().debug)
    logger = logging.getLogger(__name__)

    try:
        asyncio.run(run_preview(args))
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
    return 0


if __name__ == "__main__":
    sys.exit(main())
