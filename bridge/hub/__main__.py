import uvicorn
from dotenv import load_dotenv
from loguru import logger

from bridge.adapters.logging.ops_logger import OpsEventLogger
from bridge.adapters.logging.setup import configure_logging
from bridge.hub.api.main import create_app
from bridge.hub.config import HubConfig


def main() -> None:
    load_dotenv()
    config = HubConfig.from_env()
    configure_logging(config.log_level, config.journal_path)

    if config.token_generated:
        logger.warning("API_SECRET_TOKEN not set; generated one for this run: {}", config.api_secret_token)
        logger.warning("Set API_SECRET_TOKEN on both hub and agent to keep them paired across restarts")
    if config.uses_default_password:
        logger.warning("DASHBOARD_PASS not set; using the default password, change it before exposing the hub")

    app = create_app(config, event_logger=OpsEventLogger().handle)

    logger.info("Starting hub on {}:{}", config.host, config.port)
    logger.info("Dashboard user: {}", config.dashboard_user)
    uvicorn.run(
        app,
        host=config.host,
        port=config.port,
        log_level=config.log_level.lower(),
        timeout_graceful_shutdown=5,
    )


if __name__ == "__main__":
    main()
