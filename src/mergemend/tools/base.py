"""Tool description and the boundary every tool operation runs behind."""

import time
from collections.abc import Callable
from dataclasses import dataclass
from functools import wraps

from pydantic import BaseModel

from mergemend.core.errors import ConflictToolError
from mergemend.core.result import Failure, Success, ToolResult


@dataclass(frozen=True)
class Tool:
    """A named operation that can be called with a raw parameter dict.

    Attributes:
        name: Identifier used for function calling
        description: What the tool does (for the function schema)
        params_model: pydantic model validating the parameters
        handler: Callable taking a validated params_model instance
    """

    name: str
    description: str
    params_model: type[BaseModel]
    handler: Callable[[BaseModel], ToolResult]

    @property
    def parameters(self) -> dict:
        """JSON schema of parameters."""
        return self.params_model.model_json_schema(by_alias=False)

    def execute(self, params: BaseModel) -> ToolResult:
        return self.handler(params)


def tool_boundary(action: str):
    """Turn a method returning a data dict into one returning ToolResult.

    Logs before the call, on success (with elapsed time) and on
    failure. Expected failures (ConflictToolError) keep their own
    message; anything else is reported as "Failed to <action>: ...".
    The wrapped object must have a `logger` attribute.

    Args:
        action: Phrase completing "Failed to ...", e.g. "detect conflicts"
    """
    def decorator(func):
        @wraps(func)
        def wrapper(self, params, *args, **kwargs) -> ToolResult:
            tool_name = func.__name__
            logger = self.logger
            start_time = time.time()

            logger.debug(
                f"Tool '{tool_name}' invoked",
                tool_name=tool_name,
                params=params.model_dump(exclude_none=True),
            )

            try:
                data = func(self, params, *args, **kwargs)
            except ConflictToolError as e:
                logger.warn(
                    f"Tool '{tool_name}' failed",
                    tool_name=tool_name,
                    execution_time_ms=_elapsed_ms(start_time),
                    error=str(e),
                )
                return Failure(error=str(e))
            except Exception as e:
                logger.error(
                    f"Tool '{tool_name}' raised unexpected exception",
                    tool_name=tool_name,
                    execution_time_ms=_elapsed_ms(start_time),
                    exception_type=type(e).__name__,
                    exception_message=str(e),
                    _exc_info=e,
                )
                return Failure(error=f"Failed to {action}: {e}")

            logger.debug(
                f"Tool '{tool_name}' succeeded",
                tool_name=tool_name,
                execution_time_ms=_elapsed_ms(start_time),
            )
            return Success(data=data)

        return wrapper

    return decorator


def _elapsed_ms(start_time: float) -> float:
    return round((time.time() - start_time) * 1000, 2)
