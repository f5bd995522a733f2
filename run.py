import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

import requests
from jsonschema import ValidationError

from config import DEFAULTS, AppConfig, FetchConfig, OutputConfig
from doc_ingestor import ApiDocIngestor
from emitter import write_declarations
from models import DocParseError
from type_assembler import AssemblyResult, build_declarations
from utils import render_sections_markdown

logger = logging.getLogger(__name__)

# ---------- fetch ----------

def fetch_document(cfg: FetchConfig, *, refresh: bool = False, offline: bool = False) -> str:
    """
    Return the raw API reference page, reusing the on-disk cache when present.
    offline: never touch the network; a missing cache is an error.
    """
    cache = Path(cfg.cache_path)
    if cache.exists() and not refresh:
        logger.info("using cached document %s", cache)
        return cache.read_text(encoding="utf-8")
    if offline:
        raise FileNotFoundError(f"offline mode and no cached document at {cache}")

    logger.info("fetching %s", cfg.url)
    headers = {"User-Agent": cfg.user_agent} if cfg.user_agent else {}
    resp = requests.get(cfg.url, headers=headers, timeout=cfg.timeout)
    resp.raise_for_status()
    html = resp.text

    cache.parent.mkdir(parents=True, exist_ok=True)
    cache.write_text(html, encoding="utf-8")
    return html

# ---------- pipeline ----------

def run_pipeline(html: str, cfg: AppConfig = DEFAULTS) -> AssemblyResult:
    sections = ApiDocIngestor(cfg.parse).parse(html)
    logger.info("found %d section(s)", len(sections))
    return build_declarations(sections, cfg.parse)


def log_summary(result: AssemblyResult, written: List[Path]):
    n_fields = sum(len(d.fields) for d in result.declarations)
    n_overloads = sum(len(f.overloads) for d in result.declarations for f in d.fields)
    logger.info(
        "%d declaration(s), %d field(s), %d overload(s), %d enum constant(s) injected, %d module(s) dropped",
        len(result.declarations), n_fields, n_overloads, result.injected_enums, len(result.dropped),
    )
    logger.info("%d file(s) written", len(written))


def build_arg_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(description="Generate type declarations from an HTML API reference")
    ap.add_argument("--url", default=DEFAULTS.fetch.url, help="API reference page to fetch")
    ap.add_argument("--cache", default=DEFAULTS.fetch.cache_path, help="raw document cache file")
    ap.add_argument("--out", default=DEFAULTS.output.externs_root, help="externs root directory")
    ap.add_argument("--refresh", action="store_true", help="re-fetch even if the cache exists")
    ap.add_argument("--offline", action="store_true", help="only use the cached document")
    ap.add_argument("--dump-sections", action="store_true", help="print segmented sections as Markdown and exit")
    ap.add_argument("--no-validate", action="store_true", help="skip JSON Schema validation of the output")
    ap.add_argument("-v", "--verbose", action="store_true")
    return ap


def main(argv: Optional[List[str]] = None) -> int:
    args = build_arg_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="[%(levelname)s] %(message)s",
    )

    cfg = AppConfig(
        parse=DEFAULTS.parse,
        fetch=FetchConfig(url=args.url, cache_path=args.cache,
                          timeout=DEFAULTS.fetch.timeout, user_agent=DEFAULTS.fetch.user_agent),
        output=OutputConfig(externs_root=args.out, indent=DEFAULTS.output.indent,
                            validate=not args.no_validate),
    )

    html = fetch_document(cfg.fetch, refresh=args.refresh, offline=args.offline)

    if args.dump_sections:
        sys.stdout.write(render_sections_markdown(ApiDocIngestor(cfg.parse).parse(html)))
        return 0

    try:
        result = run_pipeline(html, cfg)
    except DocParseError as e:
        raise SystemExit(f"[ParseError] {e}")

    try:
        written = write_declarations(result.declarations, cfg.output)
    except ValidationError as e:
        raise SystemExit(f"[SchemaError] invalid declaration output: {e.message}")

    log_summary(result, written)
    return 0


if __name__ == "__main__":
    sys.exit(main())
