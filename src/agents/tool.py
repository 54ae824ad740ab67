"""Callable tool contract shared by specialists and domain tools."""

import json
from abc import ABC, abstractmethod
from typing import Any, ClassVar, Dict, Type

from pydantic import BaseModel, ValidationError

from src.agents.errors import DomainToolError, ToolArgumentError
from src.providers.base import ProviderError, ToolCall, ToolResult, ToolSpec
from src.utils.logger import get_logger

logger = get_logger()


class Tool(ABC):
    """Base class for anything a model can call.

    Subclasses declare ``name``, ``description`` and a pydantic
    ``args_model`` whose field descriptions guide the model's argument
    extraction, and implement ``run``.

    ``invoke`` never raises for a failed call: every fault becomes an
    error ``ToolResult`` the calling model can react to.
    """

    name: ClassVar[str]
    description: ClassVar[str]
    args_model: ClassVar[Type[BaseModel]]

    def spec(self) -> ToolSpec:
        """Describe this tool to the calling model."""
        schema = self.args_model.model_json_schema()
        schema.pop("title", None)
        return ToolSpec(name=self.name, description=self.description, parameters=schema)

    def parse_arguments(self, arguments: Dict[str, Any]) -> BaseModel:
        try:
            return self.args_model.model_validate(arguments)
        except ValidationError as e:
            raise ToolArgumentError(str(e)) from e

    async def invoke(self, call: ToolCall) -> ToolResult:
        """
        Run one tool call.

        Args:
            call: Tool call issued by a model

        Returns:
            ToolResult paired with the call's identifier
        """
        try:
            args = self.parse_arguments(call.arguments)
            output = await self.run(args)
            return ToolResult(
                call_id=call.id,
                name=self.name,
                content=self.format_output(output),
            )
        except ToolArgumentError as e:
            return self._error_result(call, "invalid_arguments", e)
        except DomainToolError as e:
            return self._error_result(call, "domain_tool", e)
        except ProviderError as e:
            return self._error_result(call, "model_call", e)
        except Exception as e:
            logger.exception(f"{self.name}: Unexpected error")
            return self._error_result(call, "execution", e)

    @abstractmethod
    async def run(self, args: BaseModel) -> Any:
        """Execute the tool with validated arguments."""
        pass

    @staticmethod
    def format_output(output: Any) -> str:
        if isinstance(output, str):
            return output
        if isinstance(output, BaseModel):
            return output.model_dump_json(exclude_none=True)
        return json.dumps(output, ensure_ascii=False, default=str)

    def _error_result(self, call: ToolCall, kind: str, error: Exception) -> ToolResult:
        detail = str(error) or type(error).__name__
        logger.error(f"{self.name}: Tool call {call.id} failed [{kind}]: {detail}")
        return ToolResult(
            call_id=call.id,
            name=self.name,
            content=f"{self.name} failed [{kind}]: {detail}",
            is_error=True,
        )
