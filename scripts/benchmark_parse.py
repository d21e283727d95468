#!/usr/bin/env python3
"""Deterministic timing harness for concurrent link title resolution."""

from __future__ import annotations

import argparse
import time

import httpx

from mparser.parser import Parser

_MESSAGE = (
    "Hello Parser. Here some mentions: @one@two @three and some emoticons: (adsdasd2132das).\n"
    "And here are some URLs: {links}"
)


def _mock_client(latency_s: float) -> httpx.Client:
    def handler(request: httpx.Request) -> httpx.Response:
        time.sleep(latency_s)
        return httpx.Response(200, text=f"<title>{request.url.host}</title>")

    return httpx.Client(transport=httpx.MockTransport(handler))


def _run_case(*, link_count: int, workers: int, latency_s: float, iterations: int) -> float:
    links = " ".join(f"http://bench{idx:03d}.example/page" for idx in range(link_count))
    message = _MESSAGE.format(links=links)

    with _mock_client(latency_s) as client:
        parser = Parser(client, max_workers=workers)
        start = time.perf_counter()
        for _ in range(iterations):
            info = parser.parse(message)
            if len(info.links) != link_count:
                raise RuntimeError(f"Expected {link_count} links, got {len(info.links)}")
            if info.links[0].title != "bench000.example":
                raise RuntimeError(f"Unexpected first title {info.links[0].title!r}")
        return (time.perf_counter() - start) / iterations


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Benchmark mparser link title fan-out.")
    parser.add_argument("--link-count", type=int, default=16, help="Links per synthetic message.")
    parser.add_argument("--iterations", type=int, default=3, help="Parses per case.")
    parser.add_argument("--low-workers", type=int, default=1, help="Fetch workers in baseline case.")
    parser.add_argument("--high-workers", type=int, default=8, help="Fetch workers in optimized case.")
    parser.add_argument("--latency-ms", type=float, default=40.0, help="Mock latency per fetch.")
    parser.add_argument("--min-speedup", type=float, default=2.0, help="Minimum required baseline/optimized ratio.")
    return parser.parse_args()


def main() -> int:
    args = _parse_args()
    latency_s = args.latency_ms / 1000.0

    if args.low_workers >= args.high_workers:
        raise SystemExit("--high-workers must be greater than --low-workers")

    baseline_s = _run_case(
        link_count=args.link_count, workers=args.low_workers, latency_s=latency_s, iterations=args.iterations
    )
    optimized_s = _run_case(
        link_count=args.link_count, workers=args.high_workers, latency_s=latency_s, iterations=args.iterations
    )
    speedup = baseline_s / optimized_s if optimized_s > 0 else 0.0

    print(
        "benchmark_parse:"
        f" links={args.link_count}"
        f" baseline_s={baseline_s:.4f}"
        f" optimized_s={optimized_s:.4f}"
        f" speedup={speedup:.3f}x"
        f" min_required={args.min_speedup:.3f}x"
    )

    if speedup < args.min_speedup:
        print("FAIL: measured speedup is below threshold")
        return 1

    print("PASS: measured speedup meets threshold")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
