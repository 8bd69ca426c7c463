"""
Auto-scheduler for the signal engine
Runs the momentum scan after the New York close on weekdays and stores the
results under results/
"""

import schedule
import time
from datetime import datetime
import pytz
from config import SCHEDULER_CONFIG
from main import SignalBot
from utils.logger import setup_logger

logger = setup_logger(__name__)

MARKET_TZ = pytz.timezone(SCHEDULER_CONFIG["TIMEZONE"])


def is_trading_day(now: datetime = None) -> bool:
    """
    Check if the given (or current) market-local day is Monday-Friday

    Returns:
        True on weekdays
    """
    now = now or datetime.now(MARKET_TZ)
    return now.weekday() < 5


def run_bot(bot: SignalBot = None, now: datetime = None) -> int:
    """
    Scan every configured universe and save the results

    Returns:
        Number of universes scanned
    """
    now = now or datetime.now(MARKET_TZ)
    if not is_trading_day(now):
        logger.info(f"Skipping scheduled scan on {now.strftime('%A')}")
        return 0

    logger.info("=" * 60)
    logger.info("AUTO-SCHEDULED SCAN STARTED")
    logger.info(f"Time: {now.strftime('%Y-%m-%d %H:%M:%S %Z')}")
    logger.info("=" * 60)

    bot = bot or SignalBot()
    scanned = 0
    for universe in SCHEDULER_CONFIG["UNIVERSES"]:
        try:
            response = bot.run_momentum(universe=universe)
        except Exception as e:
            logger.error(f"Error in scheduled scan of {universe}: {e}", exc_info=True)
            continue
        bot.save_results(response, universe)
        logger.info(f"{universe}: {response.summary.total} signals, "
                    f"{response.summary.strong_buy + response.summary.buy} actionable")
        scanned += 1

    logger.info("AUTO-SCHEDULED SCAN COMPLETED")
    return scanned


def setup_scheduler():
    """Setup the daily job at the configured market-local time"""
    schedule.every().day.at(SCHEDULER_CONFIG["RUN_AT"], SCHEDULER_CONFIG["TIMEZONE"]).do(run_bot)
    logger.info(f"Scheduler configured: daily at {SCHEDULER_CONFIG['RUN_AT']} {SCHEDULER_CONFIG['TIMEZONE']}")


def run_scheduler():
    """Run scheduler loop"""
    setup_scheduler()
    logger.info("Scheduler started. Waiting for next run...")

    try:
        while True:
            schedule.run_pending()
            time.sleep(SCHEDULER_CONFIG["POLL_SECONDS"])
    except KeyboardInterrupt:
        logger.info("Scheduler stopped by user")


if __name__ == "__main__":
    import sys

    if len(sys.argv) > 1 and sys.argv[1] == "--now":
        logger.info("Running scan immediately (--now flag)")
        run_bot()
    else:
        run_scheduler()
