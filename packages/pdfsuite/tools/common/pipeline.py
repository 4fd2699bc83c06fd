"""Plugin registry and orchestration helpers for pdfsuite tools."""

from __future__ import annotations

from typing import Dict, Iterable

from .interfaces import BaseTool, ProcessingContext, ToolFactory


class ToolRegistry:
    """Registry storing available pdfsuite tools."""

    def __init__(self) -> None:
        self._tools: Dict[str, type[BaseTool]] = {}

    def register(self, name: str, tool_class: type[BaseTool]) -> None:
        if name in self._tools:
            raise ValueError(f"Tool '{name}' is already registered")
        self._tools[name] = tool_class

    def create(self, name: str, context: ProcessingContext) -> BaseTool:
        try:
            tool_class = self._tools[name]
        except KeyError as exc:
            raise KeyError(f"Tool '{name}' is not registered") from exc
        tool = tool_class(context)
        tool.name = name
        return tool

    def names(self) -> Iterable[str]:
        return sorted(self._tools.keys())

    def get(self, name: str) -> type[BaseTool] | None:
        return self._tools.get(name)

    def __contains__(self, name: object) -> bool:
        return name in self._tools


registry = ToolRegistry()


def register_tool(*names: str):
    """Register the decorated tool class under one or more identifiers."""

    def decorator(cls: type[BaseTool]) -> type[BaseTool]:
        for name in names:
            registry.register(name, cls)
        return cls

    return decorator


__all__ = ["ToolRegistry", "registry", "register_tool", "ProcessingContext", "BaseTool", "ToolFactory"]
