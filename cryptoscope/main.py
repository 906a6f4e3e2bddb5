"""
Main entry point for local execution.

Usage:
    python -m cryptoscope.main [OPTIONS]

Options:
    --limit         Number of recommendations to show (default: from config)
    --per-page      Coins fetched from the market listing (default: from config)
    --page          Listing page, 1-based (default: 1)
    --sentiment     Attach social sentiment to the ranked coins
    --log-level     Logging level: DEBUG, INFO, WARNING, ERROR (default: INFO)
    --json-logs     Output logs as JSON
    --json          Print the cycle result as JSON instead of a table

Examples:
    # Top 10 recommendations from the first 100 coins
    python -m cryptoscope.main

    # Top 5 from the second page of 250 coins, as JSON
    python -m cryptoscope.main --limit 5 --per-page 250 --page 2 --json
"""

import argparse
import asyncio
import json
import sys
from typing import NoReturn, Optional

from cryptoscope.application.use_cases.recommendation_cycle import CycleResult
from cryptoscope.domain.entities.analysis import Horizon
from cryptoscope.infrastructure.config import get_settings
from cryptoscope.infrastructure.container import cleanup_container, create_container
from cryptoscope.infrastructure.logging import get_logger, setup_logging


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="cryptoscope - Multi-source crypto market data and ranked recommendations",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )

    parser.add_argument(
        "--limit",
        type=int,
        help="Number of recommendations to show (default: from config)",
    )

    parser.add_argument(
        "--per-page",
        type=int,
        help="Coins fetched from the market listing (default: from config)",
    )

    parser.add_argument(
        "--page",
        type=int,
        default=1,
        help="Listing page, 1-based (default: 1)",
    )

    parser.add_argument(
        "--sentiment",
        action="store_true",
        help="Attach social sentiment to the ranked coins",
    )

    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="INFO",
        help="Logging level (default: INFO)",
    )

    parser.add_argument(
        "--json-logs",
        action="store_true",
        help="Output logs as JSON",
    )

    parser.add_argument(
        "--json",
        action="store_true",
        help="Print the cycle result as JSON",
    )

    return parser.parse_args(argv)


def format_result(result: CycleResult) -> str:
    """Render a cycle result as a plain-text table."""
    lines = ["", "=" * 72, "CRYPTOSCOPE RECOMMENDATIONS", "=" * 72]
    lines.append(f"Data source: {result.data_source}")
    lines.append(
        f"Fetched: {result.coins_fetched}  Excluded: {result.coins_excluded}  "
        f"Failed: {result.coins_failed}  Duration: {result.total_duration_seconds:.2f}s"
    )

    if not result.success:
        lines.append("")
        lines.append("Market data unavailable:")
        lines.extend(f"  - {error}" for error in result.errors)
    elif result.is_empty:
        lines.append("")
        lines.append("No recommendations: no coin passed the filters this cycle.")
    else:
        lines.append("")
        lines.append(
            f"{'#':>3}  {'Symbol':<8} {'Price':>14} {'1h':>7} {'4h':>7} "
            f"{'24h':>7} {'7d':>7} {'Score':>6}  Cycle"
        )
        for i, analysis in enumerate(result.recommendations, start=1):
            p = analysis.predictions
            lines.append(
                f"{i:>3}  {analysis.coin.display_symbol:<8} "
                f"{analysis.coin.current_price:>14.6g} "
                f"{p[Horizon.ONE_HOUR]:>+7.2f} {p[Horizon.FOUR_HOURS]:>+7.2f} "
                f"{p[Horizon.ONE_DAY]:>+7.2f} {p[Horizon.SEVEN_DAYS]:>+7.2f} "
                f"{analysis.technical_score:>6.0f}  {analysis.market_cycle.value}"
            )
            if analysis.social_sentiment:
                sentiment = analysis.social_sentiment
                lines.append(
                    f"{'':>5}sentiment {sentiment.overall_score:.0f} ({sentiment.trend})"
                )

    lines.append("=" * 72)
    return "\n".join(lines)


async def run_async(args: argparse.Namespace) -> int:
    """Run one recommendation cycle asynchronously."""
    logger = get_logger(__name__)

    settings = get_settings()
    if args.sentiment:
        settings = settings.model_copy(update={"enable_social_sentiment": True})

    try:
        logger.info("Initializing application...")
        container = await create_container(settings)

        result = await container.recommendation_cycle.run(
            limit=args.limit,
            per_page=args.per_page,
            page=args.page,
        )

        if args.json:
            print(json.dumps(result.to_dict(), indent=2, default=str))
        else:
            print(format_result(result))

        return 0 if result.success else 1

    finally:
        await cleanup_container()


def main() -> NoReturn:
    """Main entry point."""
    args = parse_args()

    # Setup logging
    setup_logging(
        log_level=args.log_level,
        json_format=args.json_logs,
    )

    # Run async main
    exit_code = asyncio.run(run_async(args))
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
