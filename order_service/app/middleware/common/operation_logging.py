"""
Audit and execution-time decorators for Order Service components.

Both read ``self.operation_options`` at call time; a component without
options falls back to the defaults.
"""

import functools
import time
from typing import Any, Awaitable, Callable, Dict, Optional, TypeVar

from pydantic import BaseModel

from ...core.setting import OrderSettings, get_settings
from ...utils.logging import setup_order_logging as setup_logging

logger = setup_logging("order_service.operations", log_level=get_settings().LOG_LEVEL)

F = TypeVar("F", bound=Callable[..., Awaitable[Any]])


class OperationLoggingOptions(BaseModel):
    audit_enabled: bool = True
    audit_log_parameters: bool = True
    performance_enabled: bool = True
    warning_threshold_ms: int = 1000
    detailed_logging: bool = False

    @classmethod
    def from_settings(cls, settings: OrderSettings) -> "OperationLoggingOptions":
        return cls(
            audit_enabled=settings.AUDIT_ENABLED,
            audit_log_parameters=settings.AUDIT_LOG_PARAMETERS,
            performance_enabled=settings.PERFORMANCE_ENABLED,
            warning_threshold_ms=settings.PERFORMANCE_WARNING_THRESHOLD_MS,
            detailed_logging=settings.PERFORMANCE_DETAILED_LOGGING,
        )


_DEFAULT_OPTIONS = OperationLoggingOptions()


def _options_for(instance: Any) -> OperationLoggingOptions:
    return getattr(instance, "operation_options", None) or _DEFAULT_OPTIONS


def _describe(value: Any) -> Any:
    if value is None or isinstance(value, (bool, int, float, str)):
        return value
    if isinstance(value, bytes):
        return f"bytes[{len(value)}]"
    identifier = getattr(value, "id", None)
    if identifier is not None:
        return f"{type(value).__name__}(id={identifier})"
    return type(value).__name__


def audited(operation: str) -> Callable[[F], F]:
    """Log the call, its positional arguments and its outcome"""

    def decorator(func: F) -> F:
        @functools.wraps(func)
        async def wrapper(self, *args, **kwargs):
            options = _options_for(self)
            if not options.audit_enabled:
                return await func(self, *args, **kwargs)

            audit_context: Dict[str, Any] = {
                "operation": operation,
                "component": type(self).__name__,
                "event_type": "audit",
            }
            if options.audit_log_parameters:
                audit_context["parameters"] = [_describe(arg) for arg in args] + [
                    f"{name}={_describe(value)}" for name, value in kwargs.items()
                ]

            try:
                result = await func(self, *args, **kwargs)
            except Exception as e:
                logger.warning(
                    f"Audit: {operation} failed",
                    extra={**audit_context, "status": "error", "error": str(e)},
                )
                raise

            logger.info(
                f"Audit: {operation} completed",
                extra={**audit_context, "status": "success", "result": _describe(result)},
            )
            return result

        return wrapper  # type: ignore

    return decorator


def timed(
    operation: str, warning_threshold_ms: Optional[int] = None
) -> Callable[[F], F]:
    """Warn when a call runs past the threshold; debug-log its duration otherwise"""

    def decorator(func: F) -> F:
        @functools.wraps(func)
        async def wrapper(self, *args, **kwargs):
            options = _options_for(self)
            if not options.performance_enabled:
                return await func(self, *args, **kwargs)

            threshold = (
                warning_threshold_ms
                if warning_threshold_ms is not None
                else options.warning_threshold_ms
            )
            start_time = time.perf_counter()
            success = True
            try:
                return await func(self, *args, **kwargs)
            except Exception:
                success = False
                raise
            finally:
                duration_ms = round((time.perf_counter() - start_time) * 1000, 2)
                metrics = {
                    "operation": operation,
                    "component": type(self).__name__,
                    "duration_ms": duration_ms,
                    "success": success,
                    "event_type": "performance",
                }
                if duration_ms > threshold:
                    logger.warning(
                        f"{operation} exceeded {threshold} ms",
                        extra={**metrics, "warning_threshold_ms": threshold},
                    )
                elif options.detailed_logging:
                    logger.info(f"{operation} timing", extra=metrics)
                else:
                    logger.debug(f"{operation} timing", extra=metrics)

        return wrapper  # type: ignore

    return decorator
