"""CLI entrypoint: explore layout, raw positions, build watching and the API server."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging

from goat.builds.watch import watch_builds
from goat.catalog.features import FeatureCatalog
from goat.clients.config import load_provider_credentials
from goat.clients.github import GitHubActionsClient
from goat.core.config import Settings
from goat.explore.positions import generate_positions
from goat.explore.tiles import build_explore_tiles, explore_layout, grid_payload, render_ascii


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="The Goat showcase tools")
    parser.add_argument("--log-level", default="INFO", help="Logging level (default: INFO)")
    sub = parser.add_subparsers(dest="command", required=True)

    explore = sub.add_parser("explore", help="Render the explore grid for the feature catalog")
    explore.add_argument("--count", type=int, default=None, help="Only lay out the first N features by day")
    explore.add_argument("--building", action="store_true", help="Append the build-in-progress tile")
    explore.add_argument("--json", action="store_true", help="Emit the grid as JSON instead of text")

    positions = sub.add_parser("positions", help="Print packed tile coordinates as JSON")
    positions.add_argument("count", type=int, help="Number of tiles to place")

    watch = sub.add_parser("watch-build", help="Poll GitHub Actions build status")
    watch.add_argument("--iterations", type=int, default=10)
    watch.add_argument("--interval", type=float, default=None, help="Seconds between polls")

    serve = sub.add_parser("serve", help="Run the HTTP API")
    serve.add_argument("--host", default="127.0.0.1")
    serve.add_argument("--port", type=int, default=8000)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(level=args.log_level.upper(), format="[%(levelname)s] %(name)s: %(message)s")
    settings = Settings()

    if args.command == "positions":
        if args.count < 0:
            parser.error("count must be non-negative")
        print(json.dumps([list(coord) for coord in generate_positions(args.count)]))
        return 0

    if args.command == "explore":
        features = FeatureCatalog.from_path(settings.catalog_path).sorted_by_day(released_only=False)
        if args.count is not None:
            features = features[: max(0, args.count)]
        grid = explore_layout(features, is_building=args.building)
        if args.json:
            print(json.dumps(grid_payload(grid), ensure_ascii=False, indent=2))
        else:
            tiles = build_explore_tiles(features, is_building=args.building)
            print(render_ascii(grid))
            print(f"{len(tiles)} tiles on a {grid.width}x{grid.height} grid")
        return 0

    if args.command == "watch-build":
        credentials = load_provider_credentials()
        client = GitHubActionsClient(
            repo=settings.github_repo,
            token=credentials["github_status_token"],
            api_url=credentials["github_api_url"],
            timeout_s=credentials["timeout_s"],
        )
        interval = args.interval if args.interval is not None else settings.build_poll_interval_s

        def report(index: int, status: dict[str, object]) -> None:
            print(
                f"[{index:02d}] building={status.get('isBuilding')} "
                f"status={status.get('status')} conclusion={status.get('conclusion')}"
            )

        asyncio.run(watch_builds(client, iterations=args.iterations, interval_s=interval, on_status=report))
        return 0

    if args.command == "serve":
        import uvicorn

        from goat_api.main import build_app

        uvicorn.run(build_app(settings), host=args.host, port=args.port)
        return 0

    return 1


if __name__ == "__main__":
    raise SystemExit(main())
