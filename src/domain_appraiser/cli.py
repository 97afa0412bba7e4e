"""
Command-line interface for the domain appraiser.

This module provides the main CLI entry point with commands for:
- appraise: Score a domain and estimate its price
- comps: List comparable sales for a domain
- config: Show the effective configuration
"""

import argparse
import asyncio
import json
import sys
from pathlib import Path
from typing import Optional

from . import __version__
from .audit_logger import AuditLogger
from .config import SystemConfig, is_placeholder_credential, load_config_from_env
from .exceptions import PersistenceError, RateLimitError, ValidationError
from .models import Appraisal, ComparableSale, EvaluationOptions
from .orchestrator import AppraisalResponse, AppraisalService


EXIT_OK = 0
EXIT_ERROR = 1
EXIT_INVALID = 2
EXIT_RATE_LIMITED = 3


def create_logger(config: SystemConfig) -> AuditLogger:
    return AuditLogger.from_settings(
        level=config.logging.level,
        output_format=config.logging.output_format,
        output_stream=sys.stderr,
    )


def format_appraisal(response: AppraisalResponse) -> str:
    """Render an appraisal as a human-readable report."""
    appraisal: Appraisal = response.appraisal
    price = appraisal.price_estimate
    lines = [
        f"Domain: {appraisal.domain}",
        f"Score: {appraisal.final_score:.2f} ({appraisal.bracket})",
        f"Investor price: {price.investor_display}",
        f"Retail price: {price.retail_display}",
        f"Legal: {appraisal.legal_flag.value}",
        f"Source: {response.source.value}",
        "Breakdown:",
    ]
    for entry in appraisal.breakdown:
        source = entry.data_source.value if entry.data_source else "-"
        note = f"  {entry.note}" if entry.note else ""
        lines.append(
            f"  {entry.factor:<13} {entry.score:6.1f} x {entry.weight:.2f} = "
            f"{entry.contribution:6.2f} [{source}]{note}"
        )
    if appraisal.comparables:
        lines.append("Comparable sales:")
        lines.extend(f"  {format_sale(sale)}" for sale in appraisal.comparables)
    if appraisal.commentary:
        lines.append(f"Commentary: {appraisal.commentary}")
    lines.append(f"Price basis: {price.explanation}")
    return "\n".join(lines)


def format_sale(sale: ComparableSale) -> str:
    similarity = f"{sale.similarity}%" if sale.similarity is not None else "-"
    return f"{sale.domain:<24} ${sale.sold_price:>10,}  {sale.sold_date}  {sale.source}  ({similarity})"


async def run_appraise(
    domain: str,
    options: EvaluationOptions,
    config: SystemConfig,
    client_id: str = "cli",
    as_json: bool = False,
) -> int:
    """
    Appraise one domain and print the result.

    Returns:
        Exit code (0 success, 2 invalid input, 3 rate limited)
    """
    logger = create_logger(config)
    try:
        service = AppraisalService.from_config(config, logger=logger)
    except PersistenceError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        return EXIT_ERROR

    async with service:
        try:
            response = await service.appraise(domain, options, client_id=client_id)
        except ValidationError as e:
            print(f"Error: {e.message}", file=sys.stderr)
            return EXIT_INVALID
        except RateLimitError as e:
            print(f"Error: {e.message} Retry after {e.retry_after_seconds}s.", file=sys.stderr)
            return EXIT_RATE_LIMITED

        if service.whois_worker is not None:
            await service.whois_worker.drain()

    if as_json:
        print(json.dumps(response.to_dict(), indent=2, ensure_ascii=False))
    else:
        print(format_appraisal(response))
    return EXIT_OK


async def run_comps(
    domain: str,
    config: SystemConfig,
    limit: Optional[int] = None,
    as_json: bool = False,
) -> int:
    """List comparable sales for a domain."""
    logger = create_logger(config)
    try:
        service = AppraisalService.from_config(config, logger=logger)
    except PersistenceError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        return EXIT_ERROR

    async with service:
        try:
            sales = await service.find_comparables(domain, limit)
        except ValidationError as e:
            print(f"Error: {e.message}", file=sys.stderr)
            return EXIT_INVALID

    if as_json:
        print(json.dumps([sale.to_dict() for sale in sales], indent=2))
    elif not sales:
        print("No comparable sales found.")
    else:
        for sale in sales:
            print(format_sale(sale))
    return EXIT_OK


def _load_config(args: argparse.Namespace) -> SystemConfig:
    env_file = Path(args.env_file) if getattr(args, "env_file", None) else None
    return load_config_from_env(env_file)


def cmd_appraise(args: argparse.Namespace) -> int:
    """Handle the 'appraise' command."""
    try:
        options = EvaluationOptions(
            country=args.country,
            user_traffic=args.traffic,
            domain_age=args.age,
            use_comps=not args.no_comps,
            skip_whois=args.skip_whois,
        )
    except ValidationError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        return EXIT_INVALID

    return asyncio.run(run_appraise(
        domain=args.domain,
        options=options,
        config=_load_config(args),
        client_id=args.client_id,
        as_json=args.json,
    ))


def cmd_comps(args: argparse.Namespace) -> int:
    """Handle the 'comps' command."""
    return asyncio.run(run_comps(
        domain=args.domain,
        config=_load_config(args),
        limit=args.limit,
        as_json=args.json,
    ))


def cmd_config(args: argparse.Namespace) -> int:
    """Handle the 'config' command."""
    config = _load_config(args)

    def status(value: Optional[str]) -> str:
        return "missing" if is_placeholder_credential(value) else "configured"

    print("Effective configuration:")
    print(f"  WHOIS credentials: {status(config.adapters.whois_api_key)}")
    print(f"  xAI credentials: {status(config.adapters.xai_api_key)}")
    print(f"  NameBio credentials: {status(config.adapters.namebio_api_key)}")
    print(f"  Adapter timeout: {config.adapters.timeout_seconds:g}s")
    print(f"  Rate limit: {config.rate_limits.max_requests} per {config.rate_limits.window_seconds:g}s")
    print(f"  Cache freshness: {config.cache.freshness_seconds:g}s")
    print(f"  Sales dataset: {config.comparables.dataset_path or 'built-in sample'}")
    print(f"  State file: {config.persistence.state_file_path or 'in-memory'}")
    print(f"  Log level: {config.logging.level}")
    return EXIT_OK


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser for the CLI."""
    parser = argparse.ArgumentParser(
        prog="domain-appraiser",
        description="Multi-factor domain name valuation",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # 'appraise' command
    appraise_parser = subparsers.add_parser(
        "appraise",
        help="Score a domain and estimate its price",
    )
    appraise_parser.add_argument(
        "domain",
        help="Domain to appraise (e.g., example.com)",
    )
    appraise_parser.add_argument(
        "--country",
        help="Two-letter target market country code",
    )
    appraise_parser.add_argument(
        "--traffic",
        type=int,
        help="Known monthly visits",
    )
    appraise_parser.add_argument(
        "--age",
        type=float,
        help="Known domain age in years",
    )
    appraise_parser.add_argument(
        "--no-comps",
        action="store_true",
        help="Skip comparable sales",
    )
    appraise_parser.add_argument(
        "--skip-whois",
        action="store_true",
        help="Defer the WHOIS lookup and attach it afterwards",
    )
    appraise_parser.add_argument(
        "--client-id",
        default="cli",
        help="Identifier the rate limit is counted against",
    )
    appraise_parser.add_argument(
        "--json",
        action="store_true",
        help="Print the result as JSON",
    )
    appraise_parser.add_argument(
        "--env-file",
        help="Path to a .env file with credentials",
    )
    appraise_parser.set_defaults(func=cmd_appraise)

    # 'comps' command
    comps_parser = subparsers.add_parser(
        "comps",
        help="List comparable sales for a domain",
    )
    comps_parser.add_argument(
        "domain",
        help="Domain to find comparables for",
    )
    comps_parser.add_argument(
        "--limit", "-n",
        type=int,
        help="Maximum number of results",
    )
    comps_parser.add_argument(
        "--json",
        action="store_true",
        help="Print the result as JSON",
    )
    comps_parser.add_argument(
        "--env-file",
        help="Path to a .env file with credentials",
    )
    comps_parser.set_defaults(func=cmd_comps)

    # 'config' command
    config_parser = subparsers.add_parser(
        "config",
        help="Show the effective configuration",
    )
    config_parser.add_argument(
        "--env-file",
        help="Path to a .env file with credentials",
    )
    config_parser.set_defaults(func=cmd_config)

    return parser


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point for the CLI."""
    parser = create_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return EXIT_ERROR

    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
