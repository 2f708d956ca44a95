#!/usr/bin/env python3
"""
CLI: Generate Scenes
====================

Command-line tool for generating an opening scene and, optionally, its
continuation.

Usage:
    veo-continuity "An eagle soaring over mountains"
    veo-continuity "An eagle soaring" --continue "The eagle lands on a peak" -o ./output
"""

import argparse
import asyncio
import getpass
import logging
import signal
import sys
from pathlib import Path
from typing import Optional

from .api import AspectRatio, GoogleVeoClient, ModelVariant, Resolution
from .core.config import Config
from .core.exceptions import GenerationCancelledError, StudioError
from .core.security import PathValidator, sanitize_filename
from .workflow import (
    ContinuitySession,
    CredentialGate,
    EnvCredentialProvider,
    GenerationOrchestrator,
    GenerationResult,
)
from .workflow.credentials import DEFAULT_ENV_NAMES

logger = logging.getLogger(__name__)


def parse_args(argv=None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog="veo-continuity",
        description="Generate a video scene and its continuation with Veo",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s "A red ball bouncing"
  %(prog)s "A red ball bouncing" --continue "The ball rolls off the table"
  %(prog)s "A city at night" --model standard --aspect-ratio 9:16
        """,
    )

    parser.add_argument("prompt", help="Prompt for scene 1")
    parser.add_argument(
        "--continue",
        dest="continuation",
        metavar="PROMPT",
        help="Prompt for scene 2, generated as a continuation of scene 1",
    )

    parser.add_argument(
        "--model",
        default=ModelVariant.FAST.value,
        choices=[m.value for m in ModelVariant],
        help="Scene 1 model variant (default: fast)",
    )
    parser.add_argument(
        "--resolution",
        default=Resolution.P720.value,
        choices=[r.value for r in Resolution],
        help="Scene 1 resolution (default: 720p)",
    )
    parser.add_argument(
        "--aspect-ratio",
        default=AspectRatio.LANDSCAPE.value,
        choices=[a.value for a in AspectRatio],
        help="Scene 1 aspect ratio; scene 2 inherits it (default: 16:9)",
    )

    parser.add_argument(
        "--poll-interval",
        type=float,
        help="Seconds between status checks (default: from config, 10)",
    )
    parser.add_argument(
        "--max-wait",
        type=float,
        help="Give up polling after this many seconds (default: wait indefinitely)",
    )

    parser.add_argument("-o", "--output", help="Output directory (default: from config)")
    parser.add_argument("--config", help="Path to config file")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")

    return parser.parse_args(argv)


def prompt_for_key() -> Optional[str]:
    """Interactive one-time key selection."""
    if not sys.stdin.isatty():
        return None
    return getpass.getpass("Gemini API key: ").strip() or None


async def save_scene(result: GenerationResult, scene: int, config: Config, output_dir: Path) -> Path:
    validator = PathValidator(output_dir)
    filename = sanitize_filename(config.output.naming_pattern.format(scene=scene))
    return await result.video.save(filename, validator=validator)


async def run(args) -> int:
    config = Config.load(args.config)
    output_dir = Path(args.output or config.output.base_path)
    output_dir.mkdir(parents=True, exist_ok=True)

    env_names = (config.api.api_key_env,) + tuple(n for n in DEFAULT_ENV_NAMES if n != config.api.api_key_env)
    gate = CredentialGate(prompt_for_key, fallback=EnvCredentialProvider(env_names))
    if not gate.get_credential():
        gate.select()

    client = GoogleVeoClient(
        models=config.models,
        base_url=config.api.base_url,
        timeout=config.api.timeout,
    )

    print("=" * 50)
    print("Veo Continuity")
    print("=" * 50)

    async with client:
        orchestrator = GenerationOrchestrator(
            client,
            gate,
            poll_interval=args.poll_interval if args.poll_interval is not None else config.polling.interval,
            max_wait=args.max_wait if args.max_wait is not None else config.polling.max_wait,
        )
        session = ContinuitySession(orchestrator, gate=gate)

        loop = asyncio.get_running_loop()
        try:
            loop.add_signal_handler(signal.SIGINT, session.cancel)
        except (NotImplementedError, RuntimeError):
            pass

        try:
            print(f"\nScene 1: {args.prompt}")
            print(f"Model: {args.model}  Resolution: {args.resolution}  Aspect ratio: {args.aspect_ratio}")
            scene1 = await session.generate_scene1(
                args.prompt,
                model=args.model,
                resolution=args.resolution,
                aspect_ratio=args.aspect_ratio,
            )
            path = await save_scene(scene1, 1, config, output_dir)
            print(f"Scene 1 saved: {path}")
            if session.hint:
                print(f"Hint: {session.hint}")

            if args.continuation:
                print(f"\nScene 2: {args.continuation}")
                print(f"Model: {ModelVariant.STANDARD.value}  Resolution: {Resolution.P720.value}  "
                      f"Aspect ratio: {scene1.resolved_aspect_ratio.value}")
                scene2 = await session.generate_scene2(args.continuation)
                path = await save_scene(scene2, 2, config, output_dir)
                print(f"Scene 2 saved: {path}")
        finally:
            session.close()
            try:
                loop.remove_signal_handler(signal.SIGINT)
            except (NotImplementedError, RuntimeError):
                pass

    print("=" * 50)
    return 0


def main(argv=None) -> int:
    """Main CLI entry point."""
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        return asyncio.run(run(args))
    except (GenerationCancelledError, KeyboardInterrupt):
        print("\nCancelled")
        return 130
    except StudioError as e:
        print(f"\nError: {e.message}")
        if e.invalidates_credential:
            print("The API key could not access the model. Select a different key and retry.")
        return 1


if __name__ == "__main__":
    sys.exit(main())
