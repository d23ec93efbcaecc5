"""
Graph — thin runner over nodnod.

    from storefront import graph as G

    @G.node
    class ResolvedLinesNode:
        def __init__(self, lines: list[PricedLine]) -> None:
            self.lines = lines

        @classmethod
        async def __compose__(cls, request: RequestNode) -> "ResolvedLinesNode":
            ...

    quote = await G.run(QuoteNode).inject(request)

Modules that declare nodes must not use ``from __future__ import annotations``:
nodnod reads ``__compose__`` hints at runtime to wire dependencies.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, cast

from nodnod import Scope, Value, EventLoopAgent, Node
from nodnod import scalar_node as node


@dataclass(frozen=True, slots=True)
class Run[T]:
    """
    Awaitable, immutable description of one graph execution.

    Dependencies of ``target`` are discovered by nodnod; externals
    (dataclasses, stores) are pushed into the scope by type.
    """

    target: type[T]
    injections: tuple[tuple[type[Any], Any], ...] = ()

    def inject(self, value: object) -> Run[T]:
        """Inject under the value's runtime type."""
        return self.inject_as(cast(type[Any], type(value)), value)

    def inject_as[V](self, typ: type[V], value: V) -> Run[T]:
        return Run(self.target, (*self.injections, (typ, value)))

    def __await__(self) -> Any:
        return self._execute().__await__()

    async def _execute(self) -> T:
        agent = EventLoopAgent.build({cast(type[Node[Any, Any]], self.target)})

        async with Scope(detail=self.target.__name__) as scope:
            for typ, value in self.injections:
                scope.push(Value(typ, value))

            await agent.run(scope, {})

            found = scope.get(self.target)
            if found is None:
                raise KeyError(f"{self.target.__name__} was not composed")
            return cast(T, found.value)


def run[T](target: type[T]) -> Run[T]:
    return Run(target)


async def compose[T](target: type[T], *inputs: object) -> T:
    """One-shot: ``await compose(QuoteNode, request)``."""
    graph_run = run(target)
    for value in inputs:
        graph_run = graph_run.inject(value)
    return await graph_run


__all__ = ("node", "Run", "run", "compose")
