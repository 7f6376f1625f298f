"""System / process wrapper CLI commands."""

from __future__ import annotations

import argparse
import json
import subprocess
import sys

import httpx

from usercount.config import settings


def register(subparsers: argparse._SubParsersAction[argparse.ArgumentParser]) -> None:
    api_cmd = subparsers.add_parser("api", help="Start FastAPI server")
    api_cmd.add_argument("--host", default=settings.host)
    api_cmd.add_argument("--port", type=int, default=settings.port)
    api_cmd.add_argument("--reload", action="store_true")
    api_cmd.set_defaults(_handler=cmd_api)

    health_cmd = subparsers.add_parser("health", help="Check API health")
    health_cmd.add_argument(
        "--base-url", default=f"http://127.0.0.1:{settings.port}"
    )
    health_cmd.add_argument(
        "--format", choices=["table", "json", "text"], default="table"
    )
    health_cmd.set_defaults(_handler=cmd_health)


def cmd_api(args: argparse.Namespace) -> int:
    cmd = [
        sys.executable,
        "-m",
        "uvicorn",
        "usercount.api.app:build_app",
        "--factory",
        "--host",
        args.host,
        "--port",
        str(args.port),
    ]
    if args.reload:
        cmd.append("--reload")
    return subprocess.call(cmd)


def cmd_health(args: argparse.Namespace) -> int:
    url = args.base_url.rstrip("/") + "/"
    try:
        with httpx.Client(timeout=3.0, trust_env=False) as client:
            resp = client.get(url)
            resp.raise_for_status()
            payload = resp.json()
    except (httpx.HTTPError, ValueError) as exc:
        if args.format == "json":
            print(json.dumps({"status": "error", "url": url, "detail": str(exc)}))
        else:
            print(f"status: error\nurl: {url}\ndetail: {exc}")
        return 1

    if args.format == "json":
        print(json.dumps({"status": "ok", "url": url, **payload}, ensure_ascii=False, indent=2))
    else:
        print("status: ok")
        print(f"url: {url}")
        if "version" in payload:
            print(f"version: {payload['version']}")
    return 0
