"""Lightweight REST client for the clubstats API."""

from __future__ import annotations

import argparse
import json

import httpx


def _print_stats(label: str, stats: dict | None) -> None:
    if not stats:
        print(f"{label}: -")
        return
    avg = stats.get("avgRating")
    avg_text = f"{avg:.2f}" if isinstance(avg, (int, float)) else "-"
    print(
        f"{label}: {stats.get('appearances', 0)} apps, {stats.get('minutes', 0):g} min, "
        f"{stats.get('goals', 0):g} G, {stats.get('assists', 0):g} A, rating {avg_text}"
    )


def main() -> None:
    parser = argparse.ArgumentParser(description="Interact with the clubstats REST API")
    parser.add_argument("base_url", help="Base URL of the API, e.g. http://localhost:8000")
    parser.add_argument("club_id", help="Public club id or owner scope")
    parser.add_argument("player_id", help="Player id")
    parser.add_argument("--season", help="Season to report instead of the latest registered one")
    parser.add_argument("--summaries", action="store_true", help="Include per-season summaries")
    parser.add_argument("--force", action="store_true", help="Bypass the stats cache")
    parser.add_argument("--seasons", action="store_true", help="List registered seasons and exit")
    parser.add_argument("--invalidate", action="store_true", help="Drop the cached stats entry and exit")
    parser.add_argument("--raw", action="store_true", help="Print the JSON payload as returned")
    args = parser.parse_args()

    base = f"/clubs/{args.club_id}/players/{args.player_id}"
    with httpx.Client(base_url=args.base_url) as client:
        if args.invalidate:
            resp = client.post(f"{base}/stats/invalidate")
            if resp.status_code == 404:
                raise SystemExit(resp.json().get("detail", "not found"))
            resp.raise_for_status()
            print("Cache invalidated")
            return

        if args.seasons:
            resp = client.get(f"{base}/seasons")
            if resp.status_code == 404:
                raise SystemExit(resp.json().get("detail", "not found"))
            resp.raise_for_status()
            print(json.dumps(resp.json(), indent=2))
            return

        params: dict[str, str] = {}
        if args.season:
            params["season"] = args.season
        if args.summaries:
            params["includeSummaries"] = "1"
        if args.force:
            params["force"] = "1"
        resp = client.get(f"{base}/stats", params=params)
        if resp.status_code == 404:
            raise SystemExit(resp.json().get("detail", "not found"))
        resp.raise_for_status()
        payload = resp.json()

    if args.raw:
        print(json.dumps(payload, indent=2))
        return

    _print_stats(f"Season {payload.get('statsSeason') or '-'}", payload.get("seasonStats"))
    _print_stats("Career", payload.get("careerStats"))
    for summary in payload.get("seasonSummaries") or []:
        _print_stats(f"  {summary['season']}", summary.get("total"))
        for row in summary.get("competitions", []):
            _print_stats(f"    {row['competitionName']}", row.get("stats"))


if __name__ == "__main__":
    main()
