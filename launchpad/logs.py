"""
Logging setup shared by the bot, the deposit monitor and the deployer
"""

import logging
import os


def setup_logging(level: str = 'INFO', log_dir: str = 'logs') -> logging.Logger:
    """Setup logging"""
    os.makedirs(log_dir, exist_ok=True)

    logger = logging.getLogger('launchpad')
    logger.setLevel(logging.DEBUG)

    file_handler = logging.FileHandler(os.path.join(log_dir, 'launchpad.log'), encoding='utf-8')
    file_handler.setLevel(logging.DEBUG)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(getattr(logging, level.upper(), logging.INFO))

    formatter = logging.Formatter(
        '%(asctime)s | %(levelname)s | %(message)s'
    )
    file_handler.setFormatter(formatter)
    console_handler.setFormatter(formatter)

    logger.handlers.clear()
    logger.addHandler(file_handler)
    logger.addHandler(console_handler)

    # Reduce noise from httpx (Telegram API requests)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("telegram").setLevel(logging.INFO)

    return logger
