"""
Function Registry
=================

Functions are the local capabilities the *model* may invoke. Each turn,
every registered function is described to the backend; when a reply
carries a function call, the agent asks this registry to resolve it.

Resolution:
1. Look the function up by name; unknown names raise ConfigurationError
2. Call the handler with the parsed arguments (sync or async)
3. Wrap the outcome in a "function" message tagged with the name:
   - success → JSON of the handler's result
   - failure → JSON object {"error": "<message>"}

Handler failures are absorbed rather than raised, so the failure lands in
the conversation and the model can see and react to it on the next turn.

Registering a name twice replaces the earlier definition. This is
intentional: it lets callers swap handlers without unregistering first.
"""

import json
from typing import Any

from aigent.errors import ConfigurationError
from aigent.types import FunctionCall, FunctionDefinition, Message
from aigent.utils.awaitables import call_maybe_async
from aigent.utils.logger import Logger

logger = Logger("Functions")


class FunctionRegistry:
    """Name → FunctionDefinition mapping owned by one Agent."""

    def __init__(self):
        self._functions: dict[str, FunctionDefinition] = {}

    def __len__(self) -> int:
        return len(self._functions)

    def __contains__(self, name: str) -> bool:
        return name in self._functions

    def register(self, definition: FunctionDefinition) -> None:
        if definition.name in self._functions:
            logger.debug(f"Replacing function: {definition.name}")
        self._functions[definition.name] = definition

    def unregister(self, name: str) -> None:
        self._functions.pop(name, None)

    def get(self, name: str) -> FunctionDefinition | None:
        return self._functions.get(name)

    def names(self) -> list[str]:
        return list(self._functions)

    def descriptors(self) -> list[dict[str, Any]]:
        """Name/description/parameters of every function, for the backend."""
        return [fn.to_descriptor() for fn in self._functions.values()]

    async def resolve(self, function_call: FunctionCall) -> Message:
        """
        Run the function a model asked for.

        Args:
            function_call: Name and parsed arguments from the backend

        Returns:
            The function-role message to append to the conversation

        Raises:
            ConfigurationError: If no function with that name is registered
        """
        definition = self.get(function_call.name)
        if definition is None:
            raise ConfigurationError(f"Function '{function_call.name}' not found")

        logger.info(f"Calling function: {function_call.name}")
        try:
            result = await call_maybe_async(definition.handler, function_call.arguments)
            content = json.dumps(result, default=str)
        except Exception as e:
            logger.warning(
                f"Function {function_call.name} failed",
                {"error_type": type(e).__name__, "error_message": str(e)},
            )
            content = json.dumps({"error": str(e) or type(e).__name__})

        return Message.function(function_call.name, content)
