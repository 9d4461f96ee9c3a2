#!/usr/bin/env python3
"""Benchmark permission checks: latency (p50, p95, p99) and QPS, cold vs cached.

Usage:
  uv run python scripts/bench_resolve.py [--num-users 1000] [--num-checks 20000]

  Against PostgreSQL (schema from alembic upgrade head):
    PERSISTENCE_BACKEND=postgres DATABASE_URL=postgresql://... \\
      uv run python scripts/bench_resolve.py
"""
from __future__ import annotations

import argparse
import asyncio
import os
import random
import statistics
import sys
import time

from rolegate.config import Settings
from rolegate.main import open_engine


def _summary(label: str, latencies: list[float], total_elapsed: float) -> str:
    n = len(latencies)
    qps = n / total_elapsed if total_elapsed else 0.0
    p50 = statistics.median(latencies) * 1_000_000
    p95 = sorted(latencies)[int(n * 0.95) - 1] * 1_000_000 if n >= 20 else p50
    p99 = sorted(latencies)[int(n * 0.99) - 1] * 1_000_000 if n >= 100 else p95
    return (
        f"{label} (checks={n})\n"
        f"  QPS: {qps:.0f}\n"
        f"  Latency: p50={p50:.1f} us, p95={p95:.1f} us, p99={p99:.1f} us\n"
    )


async def _run(args: argparse.Namespace) -> str:
    settings = Settings(seed_defaults=True, epoch_scope=args.epoch_scope)
    async with open_engine(settings) as facade:
        permissions = [p.name for p in await facade.list_permissions()]
        roles = [r.name for r in await facade.list_roles()]
        users = [f"user-{i}" for i in range(args.num_users)]
        for user in users[: args.num_users // 10]:
            await facade.set_user_overrides(user, random.sample(permissions, 3), "granted")
            await facade.set_user_overrides(user, random.sample(permissions, 2), "denied")

        checks = [
            (random.choice(users), random.sample(roles, 2), random.choice(permissions))
            for _ in range(args.num_checks)
        ]

        results = []
        for label in ("Cold cache", "Warm cache"):
            latencies: list[float] = []
            start_total = time.perf_counter()
            for user, user_roles, permission in checks:
                t0 = time.perf_counter()
                await facade.has_permission(user, user_roles, permission)
                latencies.append(time.perf_counter() - t0)
            results.append(_summary(label, latencies, time.perf_counter() - start_total))

        stats = facade.cache_stats
        results.append(f"Cache: hits={stats.hits}, misses={stats.misses}, size={stats.size}\n")
    return "".join(results)


def main() -> int:
    parser = argparse.ArgumentParser(description="Benchmark permission resolution")
    parser.add_argument("--num-users", type=int, default=1000, help="Distinct users")
    parser.add_argument("--num-checks", type=int, default=20000, help="has_permission calls per pass")
    parser.add_argument("--epoch-scope", choices=["global", "scoped"], default="global")
    parser.add_argument("--output", type=str, default="/results/bench_resolve.txt", help="Output file path")
    args = parser.parse_args()

    summary = asyncio.run(_run(args))
    print(summary)

    try:
        os.makedirs(os.path.dirname(args.output) or ".", exist_ok=True)
        with open(args.output, "w", encoding="utf-8") as f:
            f.write(summary)
        print(f"Wrote {args.output}")
    except OSError:
        pass

    return 0


if __name__ == "__main__":
    sys.exit(main())
