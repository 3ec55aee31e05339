import logging

logger = logging.getLogger("skolara.app")
