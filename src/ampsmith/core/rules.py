"""Rule declaration and execution engine for the page renderer.

Handlers declare their intent via the ``@renders`` decorator, which records
structural metadata (phase, priority, targeted node names). At runtime the
:class:`RenderEngine` collects those declarations, organises them per
:class:`RenderPhase`, and streams the BeautifulSoup tree into HTML.

Architecture

`Declaration layer`
: ``@renders`` stores a lightweight :class:`RuleDefinition` on every handler.

`Registry layer`
: :class:`RenderRegistry` collates definitions into sortable :class:`RenderRule`
  instances grouped by phase/node name.

`Execution layer`
: :class:`RenderEngine` runs document rules for each phase and, during the
  BODY phase, walks the tree with :class:`_DocumentWalker`. Every node gets an
  enter and an exit event. The first rule returning a :class:`WalkStatus`
  claims the event; unclaimed events fall back to the default serialisation
  from :mod:`ampsmith.core.markup`.

Errors raised by handlers are latched on the context. Once an error is
latched no further rule runs and the walk stops.
"""

from __future__ import annotations

from collections import deque
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from enum import Enum, auto
from typing import TYPE_CHECKING, Any, cast

from bs4.element import Comment, NavigableString, PageElement, Tag

from .exceptions import AmpsmithError
from .markup import render_enter, render_exit


if TYPE_CHECKING:  # pragma: no cover - typing only
    from .context import PageContext


class RenderPhase(Enum):
    """Ordered passes executed while rendering a page.

    ``HEADER``
    : resolve the front matter and every inline payload, finalise the CSP and
      emit the top of the page.

    ``BODY``
    : stream the document tree into HTML.

    ``FOOTER``
    : close open sections and emit the bottom of the page.
    """

    HEADER = auto()
    BODY = auto()
    FOOTER = auto()


class WalkStatus(Enum):
    """How the walker proceeds after a handler claimed a node."""

    CONTINUE = auto()
    """Descend into the children, then dispatch the exit event."""

    SKIP_CHILDREN = auto()
    """Skip the children and the exit event."""

    TERMINATE = auto()
    """Stop the walk."""


RuleCallable = Callable[[Any, "PageContext"], "WalkStatus | None"]


DOCUMENT_NODE = "__document__"
TEXT_NODE = "#text"
COMMENT_NODE = "#comment"
RAW_NODE = "#raw"
CUSTOM_ELEMENT_NODE = "#custom"


def node_key(node: PageElement) -> str:
    """Return the name rules use to target ``node``."""
    if isinstance(node, Tag):
        # Custom element names always contain a hyphen.
        return CUSTOM_ELEMENT_NODE if "-" in node.name else node.name
    if isinstance(node, Comment):
        return COMMENT_NODE
    if type(node) is NavigableString:
        return TEXT_NODE
    return RAW_NODE


@dataclass
class RenderRule:
    """Concrete rendering rule registered in the engine."""

    priority: int
    phase: RenderPhase
    tags: tuple[str, ...]
    name: str
    handler: RuleCallable
    after_children: bool = False
    before: tuple[str, ...] = ()
    after: tuple[str, ...] = ()

    def applies_to_document(self) -> bool:
        """Return True when the rule targets the synthetic document node."""
        return self.tags == (DOCUMENT_NODE,)


@dataclass(frozen=True)
class RuleDefinition:
    """Descriptor installed on handler callables by the decorator."""

    phase: RenderPhase
    tags: tuple[str, ...]
    priority: int = 0
    name: str | None = None
    after_children: bool = False
    before: tuple[str, ...] = ()
    after: tuple[str, ...] = ()

    def bind(self, handler: RuleCallable) -> RenderRule:
        """Create a concrete rule instance bound to the callable."""
        name = self.name or getattr(handler, "__name__", handler.__class__.__name__)
        return RenderRule(
            phase=self.phase,
            tags=self.tags,
            priority=self.priority,
            name=name,
            handler=handler,
            after_children=self.after_children,
            before=self.before,
            after=self.after,
        )


class RenderRegistry:
    """Container used to gather render rules before execution."""

    def __init__(self) -> None:
        self._rules: dict[RenderPhase, dict[str, list[RenderRule]]] = {}

    def register(self, rule: RenderRule) -> None:
        """Register a rule for later execution."""
        phase_bucket = self._rules.setdefault(rule.phase, {})
        for tag in rule.tags:
            tag_bucket = phase_bucket.setdefault(tag, [])
            tag_bucket.append(rule)
            tag_bucket[:] = self._sort_rules(tag_bucket)

    def iter_phase(self, phase: RenderPhase) -> Iterable[RenderRule]:
        """Iterate over rules for the provided phase."""
        buckets = self._rules.get(phase, {})
        for tag_rules in buckets.values():
            yield from tag_rules

    def rules_for_phase(self, phase: RenderPhase) -> dict[str, tuple[RenderRule, ...]]:
        """Return the rule mapping for the requested phase."""
        phase_bucket = self._rules.get(phase, {})
        return {tag: tuple(rules) for tag, rules in phase_bucket.items()}

    def _sort_rules(self, rules: list[RenderRule]) -> list[RenderRule]:
        """Return rules ordered deterministically using before/after constraints."""
        if len(rules) <= 1:
            return list(rules)

        name_to_index: dict[str, int] = {}
        for index, rule in enumerate(rules):
            name_to_index.setdefault(rule.name, index)

        adjacency: dict[int, set[int]] = {index: set() for index in range(len(rules))}
        indegree: dict[int, int] = dict.fromkeys(range(len(rules)), 0)

        def _add_edge(source: int, target: int) -> None:
            if target in adjacency[source]:
                return
            adjacency[source].add(target)
            indegree[target] += 1

        for current_index, rule in enumerate(rules):
            for target_name in rule.before:
                target_index = name_to_index.get(target_name)
                if target_index is not None:
                    _add_edge(current_index, target_index)
            for target_name in rule.after:
                target_index = name_to_index.get(target_name)
                if target_index is not None:
                    _add_edge(target_index, current_index)

        def _order_key(idx: int) -> tuple[int, str, int]:
            return (rules[idx].priority, rules[idx].name, idx)

        queue: deque[int] = deque(
            sorted((index for index, count in indegree.items() if count == 0), key=_order_key)
        )
        ordered: list[int] = []

        while queue:
            current = queue.popleft()
            ordered.append(current)
            for neighbour in sorted(adjacency[current], key=_order_key):
                indegree[neighbour] -= 1
                if indegree[neighbour] == 0:
                    queue.append(neighbour)
            queue = deque(sorted(queue, key=_order_key))

        if len(ordered) != len(rules):
            cycle_names = sorted(
                rule.name for index, rule in enumerate(rules) if index not in ordered
            )
            raise RuntimeError(
                "Cyclic render rule dependencies detected: " + ", ".join(cycle_names)
            )

        return [rules[index] for index in ordered]


def renders(
    *tags: str,
    phase: RenderPhase = RenderPhase.BODY,
    priority: int = 0,
    name: str | None = None,
    after_children: bool = False,
    before: Iterable[str] = (),
    after: Iterable[str] = (),
) -> Callable[[RuleCallable], RuleCallable]:
    """Decorator used to register node handlers."""
    selected_tags = tags or (DOCUMENT_NODE,)
    definition = RuleDefinition(
        phase=phase,
        tags=tuple(selected_tags),
        priority=priority,
        name=name,
        after_children=after_children,
        before=tuple(before),
        after=tuple(after),
    )

    def decorator(handler: RuleCallable) -> RuleCallable:
        cast(Any, handler).__render_rule__ = definition
        return handler

    return decorator


class RenderEngine:
    """Execution engine that orchestrates the registered rules."""

    def __init__(self, registry: RenderRegistry | None = None) -> None:
        self.registry = registry or RenderRegistry()

    def collect_from(self, owner: Any) -> None:
        """Collect decorated callables from an object or module."""
        for attribute in dir(owner):
            handler = getattr(owner, attribute)
            definition = getattr(handler, "__render_rule__", None)
            if definition is None and hasattr(handler, "__func__"):
                definition = getattr(handler.__func__, "__render_rule__", None)
            if isinstance(definition, RuleDefinition):
                self.registry.register(definition.bind(handler))

    def register(self, handler: RuleCallable) -> None:
        """Register a standalone callable decorated with ``@renders``."""
        definition = getattr(handler, "__render_rule__", None)
        if not isinstance(definition, RuleDefinition):
            msg = "Handler must be decorated with @renders"
            raise TypeError(msg)
        self.registry.register(definition.bind(handler))

    def run(self, root: Tag, context: PageContext) -> None:
        """Execute every phase against ``root`` until done or an error is latched."""
        for phase in RenderPhase:
            if context.failed:
                return
            context.enter_phase(phase)
            phase_rules = self.registry.rules_for_phase(phase)

            for rule in phase_rules.get(DOCUMENT_NODE, ()):
                if execute_rule(rule, root, context) is WalkStatus.TERMINATE:
                    break

            if phase is RenderPhase.BODY:
                _DocumentWalker(phase_rules, context).walk_children(root)


def execute_rule(rule: RenderRule, node: Any, context: PageContext) -> WalkStatus | None:
    """Run ``rule`` on ``node``, latching rendering errors on the context."""
    if context.failed:
        return WalkStatus.TERMINATE
    try:
        return rule.handler(node, context)
    except AmpsmithError as exc:
        context.fail(exc)
        return WalkStatus.TERMINATE


class _DocumentWalker:
    """Depth-first walker dispatching enter/exit events and writing default markup."""

    def __init__(
        self,
        rules_by_tag: dict[str, tuple[RenderRule, ...]],
        context: PageContext,
    ) -> None:
        self.rules_by_tag = rules_by_tag
        self.context = context

    def walk_children(self, node: Tag) -> WalkStatus:
        for child in list(node.children):
            if self.walk(child) is WalkStatus.TERMINATE:
                return WalkStatus.TERMINATE
        return WalkStatus.CONTINUE

    def walk(self, node: PageElement) -> WalkStatus:
        """Render ``node`` and its descendants."""
        if self.context.failed:
            return WalkStatus.TERMINATE

        status = self._dispatch(node, after_children=False)
        if status is None:
            self.context.write(render_enter(node))
            status = WalkStatus.CONTINUE
        if status is WalkStatus.TERMINATE:
            return status
        if status is WalkStatus.SKIP_CHILDREN:
            return WalkStatus.CONTINUE

        if isinstance(node, Tag) and self.walk_children(node) is WalkStatus.TERMINATE:
            return WalkStatus.TERMINATE

        status = self._dispatch(node, after_children=True)
        if status is None:
            self.context.write(render_exit(node))
            status = WalkStatus.CONTINUE
        return status

    def _dispatch(self, node: PageElement, *, after_children: bool) -> WalkStatus | None:
        """Offer the event to each matching rule until one claims it."""
        for rule in self.rules_by_tag.get(node_key(node), ()):
            if rule.after_children != after_children:
                continue
            status = execute_rule(rule, node, self.context)
            if status is not None:
                return status
        return None


__all__ = [
    "COMMENT_NODE",
    "CUSTOM_ELEMENT_NODE",
    "DOCUMENT_NODE",
    "RAW_NODE",
    "TEXT_NODE",
    "RenderEngine",
    "RenderPhase",
    "RenderRegistry",
    "RenderRule",
    "RuleDefinition",
    "WalkStatus",
    "execute_rule",
    "node_key",
    "renders",
]
