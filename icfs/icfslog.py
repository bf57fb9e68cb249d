"""
Every icfs logger lives below the `icfs` package logger and is created with
`getLogger`. `init_logging` installs one colouring stream handler on the root
logger and sets the levels for the package and for the filesystem requests.
"""
import logging
import sys

from icfs.util import yes

TRACE = 5
logging.addLevelName(TRACE, "TRACE")

PACKAGE = "icfs"

RESET = "\x1b[0m"

LEVEL_COLORS = {
    TRACE: "\x1b[90;20m",
    logging.DEBUG: "\x1b[90;20m",
    logging.INFO: "\x1b[38;20m",
    logging.WARNING: "\x1b[33;20m",
    logging.ERROR: "\x1b[31;20m",
    logging.CRITICAL: "\x1b[31;1m",
}


class IcfsLogger(logging.Logger):
    """
    A child created with `getChild(suffix, suffix_as_tag=True)` logs under
    its parent's name and shows the suffix as a tag, so `icfs.fs.time`
    prints as `[fs] [time]`.
    """

    tag: str | None = None

    def trace(self, msg, *args, **kwargs):
        if self.isEnabledFor(TRACE):
            self._log(TRACE, msg, args, **kwargs)

    def getChild(self, suffix: str, suffix_as_tag=False) -> "IcfsLogger":
        child = super().getChild(suffix)
        child.tag = suffix if suffix_as_tag else None
        return child

    def makeRecord(self, *args, **kwargs) -> logging.LogRecord:
        rec = super().makeRecord(*args, **kwargs)
        rec.tag = self.tag

        if yes(self.tag) and yes(self.parent):
            rec.name = self.parent.name

        return rec


logging.setLoggerClass(IcfsLogger)

icfs_logger: IcfsLogger = logging.getLogger(PACKAGE)  # type: ignore


def getLogger(name: str) -> IcfsLogger:
    return icfs_logger.getChild(name)


class Formatter(logging.Formatter):
    """`LEVEL [name] [tag] message`, the package prefix dropped, coloured by level"""

    def format(self, record: logging.LogRecord) -> str:
        name = record.name.removeprefix(f"{PACKAGE}.")
        tag = getattr(record, "tag", None)

        line = f"{record.levelname} [{name}]"

        if yes(tag):
            line += f" [{tag}]"

        line += f" {record.getMessage()}"

        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)

        color = LEVEL_COLORS.get(record.levelno)

        return line if color is None else color + line + RESET


def init_logging(
    debug_level: int = logging.INFO,
    fs_debug_level: int = logging.INFO,
):
    logging.getLogger("asyncio").setLevel(logging.ERROR)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(Formatter())

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)

    icfs_logger.setLevel(debug_level)
    icfs_logger.getChild("fs").setLevel(fs_debug_level)
