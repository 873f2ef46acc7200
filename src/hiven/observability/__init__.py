from hiven.observability.logger import get_logger, session_context, setup_logging

__all__ = ["get_logger", "session_context", "setup_logging"]
