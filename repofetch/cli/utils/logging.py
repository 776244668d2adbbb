import logging
import sys

from repofetch.git.process import mask_credentials


logger = logging.getLogger("repofetch")


class CredentialMaskingFilter(logging.Filter):
    """Mask URL userinfo in every record, whatever module logged it."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.msg = mask_credentials(record.getMessage())
        record.args = None
        return True


def configure_logging(debug: bool):
    """
    Configures the logging system based on the debug flag.

    Git output and fetch progress go to stdout so the CI server shows them in
    the build log of the step.
    """
    handler = logging.StreamHandler(sys.stdout)
    formatter = logging.Formatter("%(message)s")
    handler.setFormatter(formatter)
    handler.addFilter(CredentialMaskingFilter())

    log_level = logging.DEBUG if debug else logging.INFO
    logger.setLevel(log_level)

    # GitPython logs every command it runs at debug level
    logging.getLogger("git").setLevel(logging.DEBUG if debug else logging.WARNING)

    if not logger.hasHandlers():
        logger.addHandler(handler)
