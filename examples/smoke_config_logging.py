from __future__ import annotations

import logging

from clair.config import YamlConfigLoader
from clair.config.models import ConfigLoadRequest
from clair.logging import init_logging


def main() -> None:
    init_logging("DEBUG")
    config = YamlConfigLoader().load(ConfigLoadRequest(yaml_path="examples/config.yaml"))

    logger = logging.getLogger("smoke")
    logger.info("Config loaded database_type=%s", config.database.type)
    logger.info("Updater interval=%s", config.updater.interval)


if __name__ == "__main__":
    main()
