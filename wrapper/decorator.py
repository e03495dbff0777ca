"""Decorator that runs a function handler inside a MetricWrapper"""
import inspect
from functools import wraps
from typing import Optional
from metrics.models import Labels, MetricsCloseError
from .metric_wrapper import MetricWrapper


def find_context(args, kwargs):
    """Execution context passed to the handler, if any"""
    if "context" in kwargs:
        return kwargs["context"]
    for arg in args:
        if hasattr(arg, "function_name"):
            return arg
    return None


def _close(wrapper: MetricWrapper) -> None:
    try:
        wrapper.close()
    except MetricsCloseError as e:
        wrapper.logger.warning("Exception thrown closing wrapper", error=str(e))


def with_metrics(func=None, *, dimensions: Labels = None, auth_token: Optional[str] = None):
    """Report invocations, errors and duration for a sync or async handler

    Exceptions raised by the handler are counted and re-raised.
    """

    def decorate(fn):
        if inspect.iscoroutinefunction(fn):
            @wraps(fn)
            async def async_wrapper(*args, **kwargs):
                wrapper = MetricWrapper(find_context(args, kwargs), dimensions, auth_token)
                try:
                    return await fn(*args, **kwargs)
                except Exception:
                    wrapper.error()
                    raise
                finally:
                    _close(wrapper)

            return async_wrapper

        @wraps(fn)
        def sync_wrapper(*args, **kwargs):
            wrapper = MetricWrapper(find_context(args, kwargs), dimensions, auth_token)
            try:
                return fn(*args, **kwargs)
            except Exception:
                wrapper.error()
                raise
            finally:
                _close(wrapper)

        return sync_wrapper

    if func is not None:
        return decorate(func)
    return decorate
