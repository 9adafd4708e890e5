"""Entry point for the contact inbox server."""

import logging

from dotenv import load_dotenv

from contact_inbox.app import create_app
from contact_inbox.config import load_config


def main():
    load_dotenv(override=False)
    config = load_config()

    logging.basicConfig(
        level=getattr(logging, config.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    logger = logging.getLogger(__name__)

    app = create_app(config)
    handler = app.config["components"]["handler"]

    logger.info("Server running: http://localhost:%d", config.port)
    if config.site_dir:
        logger.info("Site:           http://localhost:%d/", config.port)
    logger.info("Inbox file:     %s", config.inbox_path)
    logger.info("Email relay:    %s", "enabled" if handler.relay_enabled else "disabled")

    try:
        app.run(host=config.host, port=config.port, use_reloader=False)
    except KeyboardInterrupt:
        logger.info("Interrupted")
    finally:
        handler.close()


if __name__ == "__main__":
    main()
