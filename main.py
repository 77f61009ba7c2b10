"""
Rebalancer API server entry point.

Validates the environment, then serves backend.app.main:app with uvicorn.

Usage:
    python main.py
"""
import logging
import sys

import uvicorn

from backend.app.core.config import settings
from rebalancer.config.settings import BinanceConfig, RebalanceConfig
from rebalancer.exceptions import ConfigurationError

logger = logging.getLogger(__name__)


def validate_environment() -> bool:
    """
    Check settings before serving.

    Binance credentials are only required outside the development
    environment, where every trade is simulated.

    Returns:
        bool: True when the server can start
    """
    try:
        RebalanceConfig.validate()
        if RebalanceConfig.is_dev_mode():
            logger.warning("Development environment: trades and redemptions are simulated")
        else:
            BinanceConfig.validate()
    except ConfigurationError as e:
        logger.error(e.message)
        logger.error("Check the .env file or the environment variables.")
        return False

    logger.info(
        f"Environment OK (max_trade_value_usd={RebalanceConfig.MAX_TRADE_VALUE_USD}, "
        f"settlement_delay={RebalanceConfig.SETTLEMENT_DELAY_SECONDS}s)"
    )
    return True


if __name__ == "__main__":
    logging.basicConfig(
        level=getattr(logging, settings.LOG_LEVEL),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    if not validate_environment():
        logger.error("Environment validation failed, exiting.")
        sys.exit(1)

    try:
        uvicorn.run(
            "backend.app.main:app",
            host=settings.HOST,
            port=settings.PORT,
            log_level=settings.LOG_LEVEL.lower(),
        )
    except KeyboardInterrupt:
        logger.info("Server stopped")
