"""Command-line runner."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
from pathlib import Path
from typing import Any

from phish_link_detector.config.settings import load_config
from phish_link_detector.domain.url.models import LinkContext
from phish_link_detector.orchestrator.detector import LinkDetector
from phish_link_detector.tools.url_fetch.service import NullRedirectResolver


def create_detector(
    config_path: str | None = None,
    *,
    offline: bool = False,
    timeout_s: float | None = None,
) -> LinkDetector:
    config, _raw = load_config(config_path)
    if timeout_s is not None and timeout_s > 0:
        config = config.model_copy(update={"redirect_timeout_s": timeout_s})
    resolver = NullRedirectResolver() if offline else None
    return LinkDetector(config=config, resolver=resolver)


def run_once(detector: LinkDetector, text: str, url: str) -> str:
    result = detector.analyze_link_sync(text, url)
    return json.dumps(result.to_dict(), ensure_ascii=True)


def _load_batch(path: str) -> list[LinkContext]:
    payload: Any = json.loads(Path(path).read_text(encoding="utf-8"))
    if not isinstance(payload, list):
        raise SystemExit(f"{path}: expected a JSON list of {{\"text\", \"url\"}} objects")
    links: list[LinkContext] = []
    for item in payload:
        if not isinstance(item, dict):
            continue
        links.append(LinkContext(visible_text=item.get("text"), href_url=item.get("url")))
    return links


def run_batch(detector: LinkDetector, path: str) -> str:
    report = asyncio.run(detector.scan_links(_load_batch(path)))
    return report.model_dump_json()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="phish-link-detector")
    parser.add_argument("--text", help="Visible text of the link.")
    parser.add_argument("--url", help="Actual href of the link.")
    parser.add_argument("--batch", help="JSON file with a list of {\"text\", \"url\"} objects.")
    parser.add_argument("--config", help="Path to a detector config yaml.")
    parser.add_argument("--offline", action="store_true", help="Skip network redirect resolution.")
    parser.add_argument("--timeout", type=float, help="Redirect resolution timeout in seconds.")
    parser.add_argument("--log-level", default="WARNING", help="Logging level, e.g. INFO or DEBUG.")
    return parser


def main(argv: list[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, str(args.log_level).upper(), logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    if not args.batch and args.url is None:
        parser.error("either --url (with --text) or --batch is required")

    detector = create_detector(args.config, offline=args.offline, timeout_s=args.timeout)
    if args.batch:
        print(run_batch(detector, args.batch))
        return
    print(run_once(detector, args.text or "", args.url))
