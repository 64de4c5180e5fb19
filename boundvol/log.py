# boundvol/log.py
import logging

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def configure_logging(level: int = logging.INFO) -> logging.Logger:
    """
    Opt-in handler setup for applications and scripts.
    Library modules only ever call logging.getLogger(__name__).
    """
    logging.basicConfig(level=level, format=LOG_FORMAT)
    root = logging.getLogger("boundvol")
    root.setLevel(level)
    return root
