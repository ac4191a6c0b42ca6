"""httpver Utils"""
from utils.logger     import get_logger, log, quiet_dependency_loggers
from utils.validators import is_valid_hostname, validate_port, sanitize_evidence
from utils.constants  import HttpVersion, PROBE_ORDER, PROBE_TIMEOUTS
__all__ = ["get_logger", "log", "quiet_dependency_loggers",
           "is_valid_hostname", "validate_port", "sanitize_evidence",
           "HttpVersion", "PROBE_ORDER", "PROBE_TIMEOUTS"]
