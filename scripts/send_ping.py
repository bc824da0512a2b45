#!/usr/bin/env python3
"""
Send a signed ping to a deployed ingestion endpoint and print the response.
"""

import argparse
import json
import os
import sys
import time

import requests

from tracker_ingest.constants import SIGNATURE_HEADER, TRACKER_KEY_HEADER
from tracker_ingest.service import sign_body

# Configuration
API_URL = os.getenv('API_URL', 'http://localhost:8080/ingest')


def build_ping(args) -> dict:
    ping = {
        "vehicleId": args.vehicle_id,
        "lat": args.lat,
        "lng": args.lng,
        "sentAt": args.sent_at or int(time.time() * 1000),
    }
    for key, value in (("speedKph", args.speed), ("heading", args.heading),
                       ("accuracyM", args.accuracy), ("batteryPct", args.battery)):
        if value is not None:
            ping[key] = value
    return ping


def main():
    parser = argparse.ArgumentParser(description="Send one ping to the tracker ingest API")
    parser.add_argument("--url", default=API_URL)
    parser.add_argument("--api-key", default=os.getenv("TRACKER_KEY"), required=os.getenv("TRACKER_KEY") is None)
    parser.add_argument("--secret", default=os.getenv("TRACKER_SECRET"),
                        help="Sign the body with this device secret")
    parser.add_argument("--vehicle-id", required=True)
    parser.add_argument("--lat", type=float, required=True)
    parser.add_argument("--lng", type=float, required=True)
    parser.add_argument("--speed", type=float)
    parser.add_argument("--heading", type=float)
    parser.add_argument("--accuracy", type=float)
    parser.add_argument("--battery", type=float)
    parser.add_argument("--sent-at", type=int, help="Event time in epoch milliseconds")
    parser.add_argument("--timeout", type=float, default=10.0)
    args = parser.parse_args()

    body = json.dumps(build_ping(args), separators=(',', ':')).encode('utf-8')
    headers = {
        "Content-Type": "application/json",
        TRACKER_KEY_HEADER: args.api_key,
    }
    if args.secret:
        headers[SIGNATURE_HEADER] = sign_body(args.secret, body)

    try:
        response = requests.post(args.url, data=body, headers=headers, timeout=args.timeout)
    except requests.RequestException as e:
        print(f"✗ Request failed: {e}")
        sys.exit(1)

    print(f"Status: {response.status_code}")
    print(response.text)
    sys.exit(0 if response.status_code == 200 else 1)


if __name__ == "__main__":
    main()
