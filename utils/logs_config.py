##################################################################################################
#                                        OVERVIEW                                                #
#                                                                                                #
# Shared logger for every script in the repository. Messages go to the console (stdout) and to   #
# a rotating log file under LOG_DIR (set LOG_DIR="" to log to the console only).                 #
##################################################################################################

##################################################################################################
#                                            IMPORTS                                             #
##################################################################################################

import os
import sys
import logging
from logging.handlers import RotatingFileHandler

from dotenv import load_dotenv

##################################################################################################
#                                        CONFIGURATION                                           #
##################################################################################################

load_dotenv()  # Load environment variables from .env

LOGGER_NAME = "bookstore"
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
LOG_DIR = os.getenv("LOG_DIR", "logs")   # Empty string disables file logging
LOG_FILE = os.path.join(LOG_DIR, "bookstore.log") if LOG_DIR else None

LOG_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

MAX_BYTES = 10 * 1024 * 1024    # 10MB per file
BACKUP_COUNT = 5

##################################################################################################
#                                         LOGGER SETUP                                           #
##################################################################################################

def setup_logger(name=LOGGER_NAME, level=LOG_LEVEL, log_file=LOG_FILE):
    """
    Creates (or returns) the named logger with a console handler and a rotating file handler.

    Calling it more than once does not duplicate handlers.

    Args:
        name (str): Logger name.
        level (str): Logging level name (e.g. "INFO", "DEBUG").
        log_file (str | None): Path of the log file. None disables file logging.

    Returns:
        logging.Logger: The configured logger.
    """

    log = logging.getLogger(name)
    log.setLevel(level)

    if log.handlers:
        return log

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    log.addHandler(console_handler)

    if log_file:
        os.makedirs(os.path.dirname(log_file) or ".", exist_ok=True)
        file_handler = RotatingFileHandler(log_file, maxBytes=MAX_BYTES, backupCount=BACKUP_COUNT, encoding="utf-8")
        file_handler.setFormatter(formatter)
        log.addHandler(file_handler)

    return log


logger = setup_logger()
