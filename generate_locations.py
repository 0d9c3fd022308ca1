"""Generate synthetic location history for a Route widget item.

Produces a ``history.push`` JSON-RPC request that feeds a random walk of a
vehicle around a centre point: drives of 30-100 one-minute samples with a
jittering heading, separated by 10 stationary samples. A draining battery can
cut a drive short; it is recharged once it falls below 20%.
"""

from __future__ import annotations

import argparse
import json
import math
from collections.abc import Sequence
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

import numpy as np

CENTER = (51.5, -0.1)
OFFSET = 1.0
STEP_SECONDS = 60
STILL_SAMPLES = 10
DRIVE_RANGE = (30, 100)
RECHARGE_BELOW = 20.0


def _parse_time(value: str) -> int:
    parsed = datetime.strptime(value, "%Y-%m-%d %H:%M:%S")
    return int(parsed.replace(tzinfo=timezone.utc).timestamp())


def _heading_home(point: Tuple[float, float], center: Tuple[float, float]) -> float:
    """Heading that points roughly back towards ``center``."""

    angle = math.atan2(point[1] - center[1], point[0] - center[0])
    return (angle + math.pi) % (2 * math.pi)


def _sample(itemid: int, point: Tuple[float, float], clock: int) -> Dict[str, Any]:
    return {
        "itemid": itemid,
        "value": json.dumps({"lat": f"{point[0]:.6f}", "lng": f"{point[1]:.6f}"}),
        "clock": clock,
    }


def generate_history(
    itemid: int,
    time_from: int,
    time_to: int,
    *,
    center: Tuple[float, float] = CENTER,
    offset: float = OFFSET,
    seed: Optional[int] = None,
) -> List[Dict[str, Any]]:
    """Return ``history.push`` rows covering ``[time_from, time_to)``."""

    rng = np.random.default_rng(seed)
    step = offset / 100
    lat = center[0] + (rng.random() - 0.5) * step
    lng = center[1] + (rng.random() - 0.5) * step
    battery = 100.0
    values: List[Dict[str, Any]] = []

    time = time_from
    while time < time_to:
        heading = _heading_home((lat, lng), center)
        drive = int(rng.integers(DRIVE_RANGE[0], DRIVE_RANGE[1], endpoint=True))

        for i in range(drive):
            lat += math.cos(heading) * step
            lng += math.sin(heading) * step
            values.append(_sample(itemid, (lat, lng), time + i * STEP_SECONDS))

            battery -= int(rng.integers(1, 5, endpoint=True)) / 5
            if battery <= 0:
                battery = 0.0
                drive = i + 1
                break

            heading += (rng.random() - 0.5) * math.pi / 4

        for i in range(STILL_SAMPLES):
            values.append(_sample(itemid, (lat, lng), time + (drive + i) * STEP_SECONDS))

        time += (drive + STILL_SAMPLES) * STEP_SECONDS
        if battery < RECHARGE_BELOW:
            battery = 100.0

    return values


def build_push_request(values: List[Dict[str, Any]]) -> Dict[str, Any]:
    return {"jsonrpc": "2.0", "method": "history.push", "params": values}


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Generate location history for an item")
    parser.add_argument("--item", type=int, required=True, help="ID of the location item")
    parser.add_argument("--from", dest="time_from", default="2025-10-01 00:00:00")
    parser.add_argument("--to", dest="time_to", default="2025-10-09 23:59:59")
    parser.add_argument("--seed", type=int, default=None, help="Random seed")
    parser.add_argument("--out", default="-", help="Output file, '-' for stdout")
    return parser.parse_args(argv)


def main(argv: Sequence[str] | None = None) -> int:
    args = parse_args(argv)
    values = generate_history(
        args.item,
        _parse_time(args.time_from),
        _parse_time(args.time_to),
        seed=args.seed,
    )
    text = json.dumps(build_push_request(values), indent=4)
    if args.out == "-":
        print(text)
    else:
        with open(args.out, "w", encoding="utf-8") as handle:
            handle.write(text)
    return 0


if __name__ == "__main__":  # pragma: no cover - manual execution entry point
    raise SystemExit(main())
