import logging
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

_FILE_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def init(verbose: bool = False, debug: bool = False, log_file: Optional[str] = None) -> logging.Logger:
    """
    Configure the 'tfreclaim' logger: a rich handler on stderr (warnings
    only unless verbose/debug) and, if given, a file that gets everything.
    """
    logger = logging.getLogger("tfreclaim")
    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)
    logger.setLevel(logging.DEBUG)
    logger.propagate = False

    if debug:
        level = logging.DEBUG
    elif verbose:
        level = logging.INFO
    else:
        level = logging.WARNING

    console = RichHandler(console=Console(stderr=True), show_path=debug, markup=False)
    console.setLevel(level)
    logger.addHandler(console)

    if log_file:
        fh = logging.FileHandler(log_file, mode="w", encoding="utf-8")
        fh.setLevel(logging.DEBUG)
        fh.setFormatter(logging.Formatter(_FILE_FORMAT))
        logger.addHandler(fh)

    return logger
