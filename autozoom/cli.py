import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional, Tuple

from .asset import AssetGeometry, probe_asset
from .constraints import AutoZoomSettings
from .events import InputEventLog
from .mapping import CaptureMetadata
from .service import AutoZoomService

logger = logging.getLogger(__name__)


def _parse_size(text: str) -> Tuple[float, float]:
    try:
        width, height = (float(part) for part in text.lower().split("x"))
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected WIDTHxHEIGHT, got {text!r}")
    return width, height


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="autozoom",
        description="Plan virtual camera pan/zoom keyframes from recorded input events",
    )
    commands = parser.add_subparsers(dest="command", required=True)

    plan = commands.add_parser("plan", help="plan a camera path for one recording")
    plan.add_argument("events", type=Path, help="input event log (JSON)")
    source = plan.add_mutually_exclusive_group(required=True)
    source.add_argument("--video", type=Path, help="recording to read size and duration from")
    source.add_argument("--size", type=_parse_size, help="source pixel size, e.g. 1920x1080")
    plan.add_argument("--duration", type=float, help="duration in seconds (only with --size, where it is required)")
    plan.add_argument("--metadata", type=Path, help="capture metadata JSON for coordinate mapping")
    plan.add_argument("--intensity", type=float, default=1.0, help="auto-zoom intensity 0..1")
    plan.add_argument("--interval", type=float, default=1.0 / 30.0,
                      help="minimum keyframe interval in seconds")
    plan.add_argument("--output", type=Path, help="write plan JSON here instead of stdout")
    plan.add_argument("-v", "--verbose", action="store_true")
    return parser


async def run(args: argparse.Namespace) -> dict:
    log = InputEventLog.load(args.events)
    metadata = None
    if args.metadata is not None:
        metadata = CaptureMetadata.from_dict(json.loads(args.metadata.read_text(encoding="utf-8")))

    if args.video is not None:
        asset = probe_asset(args.video)
    else:
        width, height = args.size
        asset = AssetGeometry(width, height, args.duration)

    settings = AutoZoomSettings(
        is_enabled=True,
        intensity=args.intensity,
        minimum_keyframe_interval=args.interval,
    )
    service = AutoZoomService()
    plan = await service.make_camera_plan_async(log.events, asset, settings, metadata)
    logger.info(
        f"Planned {len(plan.keyframes)} keyframes over {plan.duration:.2f}s"
        + (" (idle framing only)" if plan.is_idle else "")
    )
    return plan.to_dict()


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.size is not None and args.duration is None:
        parser.error("--duration is required with --size")
    if args.video is not None and args.duration is not None:
        parser.error("--duration cannot be combined with --video; the recording sets it")

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        result = asyncio.run(run(args))
    except Exception as e:
        logger.error(f"Error planning camera path: {str(e)}")
        return 1

    text = json.dumps(result, indent=2)
    if args.output is not None:
        args.output.write_text(text + "\n", encoding="utf-8")
    else:
        sys.stdout.write(text + "\n")
    return 0


if __name__ == "__main__":
    sys.exit(main())
