#!/usr/bin/env python3
"""Load test script: shows the token endpoint being throttled.

RUN:  python scripts/load_test_rate_limit.py

Sends TOTAL_REQUESTS to POST /jwt in rapid succession and prints how many
were issued (200) vs. throttled (429).

Prerequisites:
  - The API must be running: uvicorn fluency_api.main:app --port 8000
"""

from __future__ import annotations

import time

import httpx

BASE_URL = "http://localhost:8000"
TOTAL_REQUESTS = 30


def main() -> None:
    print("Rate Limit Load Test")
    print("=" * 50)
    print(f"Target: {BASE_URL}/jwt")
    print(f"Total requests: {TOTAL_REQUESTS}")
    print()

    results: dict[int, int] = {}
    retry_after: str | None = None
    start = time.monotonic()

    with httpx.Client(base_url=BASE_URL, timeout=10) as client:
        for i in range(TOTAL_REQUESTS):
            resp = client.post("/jwt", json={"email": f"load-{i}@example.com"})
            results[resp.status_code] = results.get(resp.status_code, 0) + 1
            if resp.status_code == 429 and retry_after is None:
                retry_after = resp.headers.get("retry-after")

            if (i + 1) % 10 == 0:
                print(f"  Sent {i + 1}/{TOTAL_REQUESTS} requests...")

    elapsed = time.monotonic() - start

    print()
    print(f"Results after {TOTAL_REQUESTS} requests ({elapsed:.2f}s):")
    print("-" * 40)

    issued = results.get(200, 0)
    throttled = results.get(429, 0)
    other = sum(v for k, v in results.items() if k not in (200, 429))

    print(f"  Issued   (200): {issued:>4}")
    print(f"  Throttled(429): {throttled:>4}")
    if other:
        print(f"  Other:          {other:>4}")
    if retry_after is not None:
        print(f"  First Retry-After: {retry_after}s")

    print()
    print("Token bucket capacity: 10 per client IP")
    print("Refill rate: 1 token every 6 seconds")
    print()

    if throttled > 0:
        print("Rate limiting is working.")
    else:
        print("WARNING: No requests were throttled.")


if __name__ == "__main__":
    main()
