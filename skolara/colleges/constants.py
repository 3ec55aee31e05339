from skolara.common.logging_setup import get_logger

logger = get_logger("skolara.colleges")

STATUS_FILTERS = ("ALL", "ACTIVE", "INACTIVE")
