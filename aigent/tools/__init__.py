"""
Tools
=====

Tools are utilities the *caller* invokes through Agent.execute_tool(). They
differ from functions in two ways:

1. The model never sees or calls them
2. They have no effect on the conversation: nothing is appended to memory

Failures are not absorbed. An unknown name raises ConfigurationError, and
whatever the tool itself raises reaches the caller unchanged.

This module provides:
- ToolRegistry: name → Tool mapping with direct execution
- DEFAULT_TOOLS: ready-made tools (HTTP, files, calculator, date/time, weather)
"""

from typing import Any

from aigent.errors import ConfigurationError
from aigent.tools.builtin import DEFAULT_TOOLS
from aigent.types import Tool
from aigent.utils.awaitables import call_maybe_async
from aigent.utils.logger import Logger

logger = Logger("Tools")


class ToolRegistry:
    """
    Registry of caller-invoked tools, owned by one Agent.

    Registering a name that already exists replaces the earlier tool.

    Example:
        registry = ToolRegistry()
        registry.register(calculator_tool)
        result = await registry.execute("calculator", {"expression": "2 + 2"})
    """

    def __init__(self):
        self._tools: dict[str, Tool] = {}

    def __len__(self) -> int:
        return len(self._tools)

    def __contains__(self, name: str) -> bool:
        return name in self._tools

    def register(self, tool: Tool) -> None:
        if tool.name in self._tools:
            logger.debug(f"Replacing tool: {tool.name}")
        self._tools[tool.name] = tool

    def unregister(self, name: str) -> None:
        self._tools.pop(name, None)

    def get(self, name: str) -> Tool | None:
        return self._tools.get(name)

    def names(self) -> list[str]:
        return list(self._tools)

    async def execute(self, name: str, args: dict[str, Any]) -> Any:
        """
        Run a tool by name.

        Raises:
            ConfigurationError: If the tool isn't registered
            Exception: Anything the tool raises, unchanged
        """
        tool = self.get(name)
        if tool is None:
            raise ConfigurationError(f"Tool '{name}' not found")

        logger.info(f"Executing tool: {name}")
        return await call_maybe_async(tool.execute, args)


__all__ = ["ToolRegistry", "DEFAULT_TOOLS"]
