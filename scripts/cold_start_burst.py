import argparse
import json
import statistics
import time
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List

import httpx


class ColdStartBurst:
    """Fires concurrent requests at a scaled-to-zero deployment to exercise the wake path."""

    def __init__(self, url: str, output_dir: Path, timeout_s: float = 200.0):
        self.url = url
        self.output_dir = output_dir
        self.output_dir.mkdir(parents=True, exist_ok=True)
        self.client = httpx.Client(timeout=timeout_s)

    def invoke(self, index: int) -> Dict[str, Any]:
        start_time = time.perf_counter()
        timestamp = datetime.now().isoformat()

        try:
            response = self.client.get(self.url)
            status_code = response.status_code
            status = "success" if response.status_code < 500 else "failure"
            error = None
        except httpx.HTTPError as e:
            status_code = None
            status = "failure"
            error = str(e)

        return {
            "index": index,
            "timestamp": timestamp,
            "duration_ms": int((time.perf_counter() - start_time) * 1000),
            "status": status,
            "status_code": status_code,
            "error": error,
        }

    def run(self, burst_size: int) -> List[Dict[str, Any]]:
        print(f"Running cold-start burst: {burst_size} concurrent requests against {self.url}")
        with ThreadPoolExecutor(max_workers=burst_size) as executor:
            return list(executor.map(self.invoke, range(burst_size)))

    def save_results(self, results: List[Dict[str, Any]], name: str) -> Path:
        filename = self.output_dir / f"results_{name}_{int(time.time())}.json"
        with open(filename, "w") as f:
            json.dump(results, f, indent=2)
        print(f"Results saved to {filename}")
        return filename


def summarize(results: List[Dict[str, Any]]) -> Dict[str, Any]:
    durations = sorted(r["duration_ms"] for r in results if r["status"] == "success")
    total = len(results)
    summary: Dict[str, Any] = {
        "total": total,
        "success_rate": (len(durations) / total) * 100 if total else 0.0,
    }
    if durations:
        summary["min_ms"] = durations[0]
        summary["p50_ms"] = statistics.median(durations)
        summary["p90_ms"] = statistics.quantiles(durations, n=10)[8] if len(durations) > 1 else durations[0]
        summary["max_ms"] = durations[-1]
    return summary


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Cold-start burst generator")
    parser.add_argument("--url", required=True, help="Public URL of the scaled-to-zero service")
    parser.add_argument("--requests", type=int, default=10, help="Burst size")
    parser.add_argument("--timeout", type=float, default=200.0, help="Per-request timeout in seconds")
    parser.add_argument("--output", default="experiments", help="Output directory for results")

    args = parser.parse_args()

    burst = ColdStartBurst(args.url, Path(args.output), timeout_s=args.timeout)
    results = burst.run(args.requests)
    burst.save_results(results, f"burst_{args.requests}req")

    summary = summarize(results)
    print(f"Total Requests: {summary['total']}")
    print(f"Success Rate:   {summary['success_rate']:.1f}%")
    if "p50_ms" in summary:
        print("Latency (ms):")
        print(f"  Min: {summary['min_ms']}")
        print(f"  P50: {summary['p50_ms']:.0f}")
        print(f"  P90: {summary['p90_ms']:.0f}")
        print(f"  Max: {summary['max_ms']}")
    else:
        print("No successful requests to analyze latency.")
