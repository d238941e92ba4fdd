import logging


ROOT_LOGGER = "naturetrails"
LOG_FORMAT = "%(asctime)s | %(name)s | %(levelname)s | %(message)s"


#-- initialize the application logger; safe to call on every Streamlit rerun
def setup_logger(name: str = ROOT_LOGGER, level="INFO") -> logging.Logger:
    logger = logging.getLogger(name)
    logger.setLevel(level)

    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)
        logger.propagate = False

    return logger


def get_logger(module: str) -> logging.Logger:
    return logging.getLogger(f"{ROOT_LOGGER}.{module}")


def mask_phone(phone: str) -> str:
    """Keep the last four digits of a phone number for log lines."""
    if not phone:
        return "unknown"
    digits = "".join(ch for ch in phone if ch.isdigit())
    if len(digits) < 8:
        return "invalid"
    return f"***{digits[-4:]}"
