"""Offline content validation.

Authoring mistakes are reported as ``ValidationIssue`` records with a path
and a message. Nothing here runs at tick time.
"""
from __future__ import annotations

import logging
from collections import Counter
from typing import Any, Iterable, Iterator, Mapping

from idle_condition import Always, Condition, Never
from idle_condition import iter_references as condition_references
from idle_consequence import iter_references as consequence_references

from idle_game.content import ContentError, GameContent, ValidationIssue, parse_content

logger = logging.getLogger(__name__)

PHASE_COUNT = 20
MAX_CHAIN_DEPTH = 64

_WHITE, _GREY, _BLACK = 0, 1, 2


def _duplicates(ids: Iterable[Any], section: str) -> Iterator[ValidationIssue]:
    for value, count in sorted(Counter(ids).items(), key=lambda kv: str(kv[0])):
        if count > 1:
            yield ValidationIssue(section, f"duplicate id {value!r} ({count} definitions)")


def _check_phases(content: GameContent, phase_count: int | None) -> Iterator[ValidationIssue]:
    numbers = [p.number for p in content.phases]
    yield from _duplicates(numbers, "phases")
    if not numbers:
        yield ValidationIssue("phases", "no phases defined")
        return
    if sorted(set(numbers)) != list(range(1, max(numbers) + 1)):
        yield ValidationIssue("phases", f"phases must be numbered 1..N without gaps, got {sorted(set(numbers))}")
    if phase_count is not None and len(set(numbers)) != phase_count:
        yield ValidationIssue("phases", f"expected {phase_count} phases, found {len(set(numbers))}")
    by_number = {p.number: p for p in reversed(content.phases)}
    first = by_number.get(1)
    if first is not None and not isinstance(first.unlock, Always):
        yield ValidationIssue("phases.1.unlock", "phase 1 should unlock with 'always'", "warning")
    last = by_number[max(by_number)]
    if not isinstance(last.transition, Never):
        yield ValidationIssue(
            f"phases.{last.number}.transition",
            "the final phase should transition with 'never'",
            "warning",
        )


class _References:
    """Known ids per reference kind."""

    def __init__(self, content: GameContent) -> None:
        self._known: dict[str, frozenset[Any]] = {
            kind: content.ids(kind)
            for kind in ("resource", "producer", "upgrade", "achievement", "secret", "choice")
        }
        self._known["phase"] = frozenset(p.number for p in content.phases)
        self._texts = content.texts

    def check(self, kind: str, ref: Any, path: str) -> Iterator[ValidationIssue]:
        if kind == "content":
            if ref not in self._texts:
                yield ValidationIssue(path, f"no text for content id {ref!r}", "warning")
            return
        known = self._known.get(kind)
        if known is not None and ref not in known:
            yield ValidationIssue(path, f"unknown {kind} id {ref!r}")

    def condition(self, cond: Condition, path: str) -> Iterator[ValidationIssue]:
        for kind, ref in condition_references(cond):
            yield from self.check(kind, ref, path)

    def consequences(self, effects: Iterable[Any], path: str) -> Iterator[ValidationIssue]:
        for i, effect in enumerate(effects):
            for kind, ref in consequence_references(effect):
                yield from self.check(kind, ref, f"{path}[{i}]")


def _check_references(content: GameContent) -> Iterator[ValidationIssue]:
    refs = _References(content)
    for p in content.phases:
        yield from refs.condition(p.unlock, f"phases.{p.number}.unlock")
        yield from refs.condition(p.transition, f"phases.{p.number}.transition")
    for prod in content.producers:
        base = f"producers.{prod.id}"
        yield from refs.check("resource", prod.resource, f"{base}.resource")
        for resource_id in prod.cost:
            yield from refs.check("resource", resource_id, f"{base}.cost")
        yield from refs.condition(prod.unlock, f"{base}.unlock")
    for up in content.upgrades:
        base = f"upgrades.{up.id}"
        for resource_id in up.cost:
            yield from refs.check("resource", resource_id, f"{base}.cost")
        for i, required in enumerate(up.requires):
            yield from refs.check("upgrade", required, f"{base}.requires[{i}]")
        yield from refs.condition(up.unlock, f"{base}.unlock")
        yield from refs.consequences(up.effects, f"{base}.effects")
    for trig in content.triggers:
        base = f"triggers.{trig.id}"
        yield from refs.check("content", trig.content_id, f"{base}.content")
        if trig.phase is not None:
            yield from refs.check("phase", trig.phase, f"{base}.phase")
        for i, cond in enumerate(trig.conditions):
            yield from refs.condition(cond, f"{base}.conditions[{i}]")
        yield from refs.consequences(trig.consequences, f"{base}.consequences")
    for kind, section in (("achievement", content.achievements), ("secret", content.secrets)):
        for d in section:
            base = f"{kind}s.{d.id}"
            yield from refs.condition(d.condition, f"{base}.condition")
            yield from refs.consequences(d.consequences, f"{base}.consequences")
            if d.prerequisite is not None:
                yield from refs.check(kind, d.prerequisite, f"{base}.prerequisite")
    for choice in content.choices:
        for option, effects in choice.options.items():
            yield from refs.consequences(effects, f"choices.{choice.id}.options.{option}")


def find_cycles(graph: Mapping[str, Iterable[str]], max_depth: int = MAX_CHAIN_DEPTH) -> list[list[str]]:
    """Return each cycle in a ``node -> requirements`` graph once.

    Iterative three-colour depth-first search, so every edge is followed
    once. A chain deeper than *max_depth* is reported as a cycle of its own
    path.
    """
    colour: dict[str, int] = {}
    cycles: list[list[str]] = []
    for start in graph:
        if colour.get(start, _WHITE) != _WHITE:
            continue
        colour[start] = _GREY
        path = [start]
        stack = [iter(graph.get(start, ()))]
        while stack:
            nxt = next(stack[-1], None)
            if nxt is None:
                stack.pop()
                colour[path.pop()] = _BLACK
                continue
            seen = colour.get(nxt, _WHITE)
            if seen == _GREY:
                cycles.append(path[path.index(nxt):] + [nxt])
            elif seen == _WHITE:
                if len(path) >= max_depth:
                    cycles.append(path + [nxt])
                    continue
                colour[nxt] = _GREY
                path.append(nxt)
                stack.append(iter(graph.get(nxt, ())))
    return cycles


def _check_cycles(content: GameContent) -> Iterator[ValidationIssue]:
    graphs: list[tuple[str, dict[str, tuple[str, ...]]]] = [
        ("upgrades", {u.id: u.requires for u in content.upgrades}),
        ("achievements", {
            d.id: (d.prerequisite,) if d.prerequisite else () for d in content.achievements
        }),
        ("secrets", {
            d.id: (d.prerequisite,) if d.prerequisite else () for d in content.secrets
        }),
    ]
    for section, graph in graphs:
        for cycle in find_cycles(graph):
            yield ValidationIssue(
                f"{section}.{cycle[0]}", f"circular requirement: {' -> '.join(cycle)}"
            )


def check_content(content: GameContent, phase_count: int | None = PHASE_COUNT) -> list[ValidationIssue]:
    """Cross-reference checks on already parsed content."""
    issues: list[ValidationIssue] = []
    for section, defs in (
        ("resources", content.resources),
        ("producers", content.producers),
        ("upgrades", content.upgrades),
        ("triggers", content.triggers),
        ("achievements", content.achievements),
        ("secrets", content.secrets),
        ("choices", content.choices),
    ):
        issues.extend(_duplicates((d.id for d in defs), section))
    issues.extend(_check_phases(content, phase_count))
    issues.extend(_check_references(content))
    issues.extend(_check_cycles(content))
    return issues


def validate_content(raw: Any, phase_count: int | None = PHASE_COUNT) -> list[ValidationIssue]:
    """Every structural and cross-reference issue in *raw*."""
    content, issues = parse_content(raw)
    return issues + check_content(content, phase_count)


def load_content(raw: Any, phase_count: int | None = PHASE_COUNT) -> GameContent:
    """Parse and validate *raw*. Raises ContentError if any error was found.

    Warnings are logged and do not stop loading.
    """
    content, issues = parse_content(raw)
    issues += check_content(content, phase_count)
    errors = [i for i in issues if i.severity == "error"]
    for warning in (i for i in issues if i.severity != "error"):
        logger.warning("Content warning %s: %s", warning.path, warning.message)
    if errors:
        raise ContentError(errors)
    return content
