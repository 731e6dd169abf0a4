"""
Operation logging decorators for Product Service components.

``audited``, ``timed`` and ``validate_parameters`` wrap async methods of
components that expose an ``operation_options`` attribute. The options are
read on every call, so a component built with audit disabled never logs
audit records even though its methods stay decorated.
"""

import functools
import inspect
import time
from typing import Any, Awaitable, Callable, Dict, Optional, TypeVar

from pydantic import BaseModel

from ...core.setting import ProductSettings, get_settings
from ...utils.logging import setup_product_logging as setup_logging

logger = setup_logging(
    "product_service.operations", log_level=get_settings().LOG_LEVEL
)

F = TypeVar("F", bound=Callable[..., Awaitable[Any]])


class OperationLoggingOptions(BaseModel):
    """Switches for the cross-cutting operation decorators"""

    audit_enabled: bool = True
    audit_log_parameters: bool = True
    audit_log_results: bool = False
    performance_enabled: bool = True
    warning_threshold_ms: int = 1000
    detailed_logging: bool = False
    validation_enabled: bool = True

    @classmethod
    def from_settings(cls, settings: ProductSettings) -> "OperationLoggingOptions":
        return cls(
            audit_enabled=settings.AUDIT_ENABLED,
            audit_log_parameters=settings.AUDIT_LOG_PARAMETERS,
            audit_log_results=settings.AUDIT_LOG_RESULTS,
            performance_enabled=settings.PERFORMANCE_ENABLED,
            warning_threshold_ms=settings.PERFORMANCE_WARNING_THRESHOLD_MS,
            detailed_logging=settings.PERFORMANCE_DETAILED_LOGGING,
            validation_enabled=settings.VALIDATION_ENABLED,
        )


_DEFAULT_OPTIONS = OperationLoggingOptions()


def _options_for(instance: Any) -> OperationLoggingOptions:
    return getattr(instance, "operation_options", None) or _DEFAULT_OPTIONS


def _describe(value: Any) -> Any:
    """Compact, log-safe representation of a call argument"""
    if value is None or isinstance(value, (bool, int, float, str)):
        return value
    identifier = getattr(value, "id", None)
    if identifier is not None:
        return f"{type(value).__name__}(id={identifier})"
    return type(value).__name__


def _bound_arguments(func: Callable, args: tuple, kwargs: dict) -> Dict[str, Any]:
    bound = inspect.signature(func).bind(*args, **kwargs)
    bound.apply_defaults()
    arguments = dict(bound.arguments)
    arguments.pop("self", None)
    return arguments


def audited(operation: str) -> Callable[[F], F]:
    """Log an audit record for every call, with its outcome"""

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
                audit_context["parameters"] = {
                    name: _describe(value)
                    for name, value in _bound_arguments(
                        func, (self, *args), kwargs
                    ).items()
                }

            try:
                result = await func(self, *args, **kwargs)
            except Exception as e:
                logger.warning(
                    f"Audit: {operation} failed",
                    extra={**audit_context, "status": "error", "error": str(e)},
                )
                raise

            if options.audit_log_results:
                audit_context["result"] = _describe(result)
            logger.info(
                f"Audit: {operation} completed",
                extra={**audit_context, "status": "success"},
            )
            return result

        return wrapper  # type: ignore

    return decorator


def timed(
    operation: str, warning_threshold_ms: Optional[int] = None
) -> Callable[[F], F]:
    """Measure execution time and warn when it exceeds the threshold"""

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
            error_type: Optional[str] = None
            try:
                return await func(self, *args, **kwargs)
            except Exception as e:
                success = False
                error_type = type(e).__name__
                raise
            finally:
                duration_ms = round((time.perf_counter() - start_time) * 1000, 2)
                metrics: Dict[str, Any] = {
                    "operation": operation,
                    "component": type(self).__name__,
                    "method": func.__name__,
                    "duration_ms": duration_ms,
                    "success": success,
                    "event_type": "performance",
                }
                if options.detailed_logging and error_type:
                    metrics["error_type"] = error_type

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


def validate_parameters(
    **rules: Callable[[Any], Optional[str]],
) -> Callable[[F], F]:
    """
    Check named arguments before the call.

    Each rule receives the argument value and returns an error message, or
    ``None`` when the value is acceptable. Violations raise ``ValueError``.
    """

    def decorator(func: F) -> F:
        @functools.wraps(func)
        async def wrapper(self, *args, **kwargs):
            if _options_for(self).validation_enabled:
                arguments = _bound_arguments(func, (self, *args), kwargs)
                for name, rule in rules.items():
                    problem = rule(arguments.get(name))
                    if problem:
                        logger.warning(
                            f"Parameter validation failed for {func.__name__}",
                            extra={
                                "parameter": name,
                                "reason": problem,
                                "component": type(self).__name__,
                                "event_type": "validation",
                            },
                        )
                        raise ValueError(f"{name}: {problem}")
            return await func(self, *args, **kwargs)

        return wrapper  # type: ignore

    return decorator


def required(value: Any) -> Optional[str]:
    return "must not be None" if value is None else None


def positive_id(value: Any) -> Optional[str]:
    if not isinstance(value, int) or isinstance(value, bool) or value <= 0:
        return "must be a positive integer id"
    return None
