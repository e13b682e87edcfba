# Utility functions for the storage quota audit

import logging

BYTES_PER_GB = 1024 ** 3

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def setup_logging(level=logging.INFO, log_file='storage_quota_audit.log'):
    """Setup logging configuration for the audit tool"""
    handlers = [logging.StreamHandler()]
    if log_file:
        handlers.append(logging.FileHandler(log_file))
    logging.basicConfig(level=level, format=LOG_FORMAT, handlers=handlers, force=True)
    # The Azure SDK logs every HTTP request at INFO
    logging.getLogger('azure').setLevel(logging.WARNING)
    return logging.getLogger(__name__)


def bytes_to_gb(bytes_value):
    """Convert a byte count to GB rounded to 2 decimal places"""
    return round(bytes_value / BYTES_PER_GB, 2)


def format_bytes(bytes_value):
    """Convert bytes to human readable format"""
    if bytes_value == 0:
        return "0 B"

    size_names = ["B", "KB", "MB", "GB", "TB"]
    i = 0
    while bytes_value >= 1024 and i < len(size_names) - 1:
        bytes_value /= 1024.0
        i += 1

    return f"{bytes_value:.2f} {size_names[i]}"


def parse_int_or_default(value, default):
    """Parse an integer string, returning (value, parsed_ok)"""
    if value is None:
        return default, False
    try:
        return int(str(value).strip()), True
    except ValueError:
        return default, False


def banner(title, width=80):
    """Build the centred banner used for console section headers"""
    line = "=" * width
    return f"{line}\n{f' {title} '.center(width, '=')}\n{line}"
