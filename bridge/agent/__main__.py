import uvicorn
from dotenv import load_dotenv
from loguru import logger

from bridge.adapters.filedrop.oif_sink import FileDropSink
from bridge.adapters.logging.ops_logger import OpsEventLogger
from bridge.adapters.logging.setup import configure_logging
from bridge.agent.api import create_app
from bridge.agent.config import AgentConfig, ConfigError
from bridge.agent.service import AgentService


def main() -> None:
    load_dotenv()
    try:
        config = AgentConfig.from_env()
    except ConfigError as exc:
        raise SystemExit(str(exc))
    configure_logging(config.log_level, config.journal_path)

    sink = FileDropSink(config.incoming_dir)
    sink.check_directory()
    service = AgentService(
        config.link_config(),
        sink,
        execution_capacity=config.execution_queue_size,
        event_logger=OpsEventLogger().handle,
    )
    app = create_app(service)

    logger.info("Starting agent")
    logger.info("Hub URL: {}", config.hub_url)
    logger.info("Incoming folder: {}", sink.directory)
    logger.info("Snapshot webhook on http://{}:{}/webhook", config.host, config.port)
    uvicorn.run(app, host=config.host, port=config.port, log_level=config.log_level.lower())


if __name__ == "__main__":
    main()
