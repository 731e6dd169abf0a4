from .operation_logging import OperationLoggingOptions, audited, timed

__all__ = ["OperationLoggingOptions", "audited", "timed"]
