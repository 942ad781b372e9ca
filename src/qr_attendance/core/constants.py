"""Constants and defaults.

Note: The capture windows are a compliance rule, not configuration.
"""

from datetime import time

TIME_IN_START = time(7, 0, 0)
TIME_IN_END = time(11, 30, 0)  # inclusive
TIME_OUT_START = time(13, 0, 0)
TIME_OUT_END = time(17, 0, 0)  # exclusive

DEFAULT_SCAN_TIMEOUT_SECONDS = 10.0
DEFAULT_SCAN_HISTORY_LIMIT = 10
DEFAULT_RECORDED_BY = "sbo"
DEFAULT_DEVICE_ID = "default"
