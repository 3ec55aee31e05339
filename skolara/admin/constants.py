from skolara.common.logging_setup import get_logger

logger = get_logger("skolara.admin")
