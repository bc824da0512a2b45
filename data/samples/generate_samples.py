#!/usr/bin/env python3
"""
Generate sample ping payloads for manual and load testing.
Creates examples for:
- Minimal ping (vehicleId, lat, lng)
- Full ping (all optional telemetry, sentAt)
- A short route of consecutive pings for one vehicle
Each sample is written with the X-Signature value for the given secret.
"""

import argparse
import json
import os
import random
import time
from typing import Any, Dict, List

from tracker_ingest.service import sign_body

# Rough bounding box around Colombo, Sri Lanka
LAT_RANGE = (6.85, 7.00)
LNG_RANGE = (79.83, 79.95)

VEHICLE_PREFIXES = ['BUS', 'VAN', 'TRK', 'CAB']


def random_vehicle_id() -> str:
    return f"{random.choice(VEHICLE_PREFIXES)}-{random.randint(1, 999):03d}"


def minimal_ping(vehicle_id: str) -> Dict[str, Any]:
    return {
        "vehicleId": vehicle_id,
        "lat": round(random.uniform(*LAT_RANGE), 6),
        "lng": round(random.uniform(*LNG_RANGE), 6),
    }


def full_ping(vehicle_id: str, sent_at: int) -> Dict[str, Any]:
    ping = minimal_ping(vehicle_id)
    ping.update({
        "speedKph": round(random.uniform(0, 80), 1),
        "heading": random.randint(0, 359),
        "accuracyM": round(random.uniform(3, 25), 1),
        "batteryPct": random.randint(5, 100),
        "sentAt": sent_at,
    })
    return ping


def route_pings(vehicle_id: str, count: int, start_ms: int, interval_ms: int = 15000) -> List[Dict[str, Any]]:
    """Consecutive pings moving roughly north-east."""
    lat = random.uniform(*LAT_RANGE)
    lng = random.uniform(*LNG_RANGE)
    pings = []
    for i in range(count):
        lat += random.uniform(0, 0.0015)
        lng += random.uniform(0, 0.0015)
        pings.append({
            "vehicleId": vehicle_id,
            "lat": round(lat, 6),
            "lng": round(lng, 6),
            "speedKph": round(random.uniform(20, 60), 1),
            "heading": random.randint(20, 70),
            "sentAt": start_ms + i * interval_ms,
        })
    return pings


def with_signature(ping: Dict[str, Any], secret: str) -> Dict[str, Any]:
    # Signature is over the exact bytes that will be sent
    body = json.dumps(ping, separators=(',', ':'))
    sample = {"body": body}
    if secret:
        sample["signature"] = sign_body(secret, body.encode('utf-8'))
    return sample


def main():
    parser = argparse.ArgumentParser(description="Generate sample ping payloads")
    parser.add_argument("--secret", default=os.getenv("TRACKER_SECRET", ""),
                        help="Device secret used to sign the samples")
    parser.add_argument("--route-length", type=int, default=10)
    parser.add_argument("--output-dir", default=os.path.dirname(os.path.abspath(__file__)))
    args = parser.parse_args()

    now_ms = int(time.time() * 1000)
    vehicle_id = random_vehicle_id()

    samples = {
        "ping-minimal.json": [with_signature(minimal_ping(vehicle_id), args.secret)],
        "ping-full.json": [with_signature(full_ping(vehicle_id, now_ms), args.secret)],
        "ping-route.json": [
            with_signature(p, args.secret)
            for p in route_pings(vehicle_id, args.route_length, now_ms)
        ],
    }

    os.makedirs(args.output_dir, exist_ok=True)
    for filename, content in samples.items():
        path = os.path.join(args.output_dir, filename)
        with open(path, 'w') as f:
            json.dump(content, f, indent=2)
        print(f"✓ Wrote {len(content)} sample(s) to {path}")


if __name__ == "__main__":
    main()
