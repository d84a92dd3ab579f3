"""Introspection reports over a filter context."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from hookline.models import FilterEntry, Transform
from hookline.registry import FilterContext


class EntrySummary(BaseModel):
    model_config = ConfigDict(extra="forbid")

    identity_key: str
    priority: float
    kind: str
    callback: str


class HookSummary(BaseModel):
    model_config = ConfigDict(extra="forbid")

    hook_id: str
    entry_count: int
    has_applied: bool = False
    entries: list[EntrySummary] = Field(default_factory=list)


class RegistryReport(BaseModel):
    model_config = ConfigDict(extra="forbid")

    hook_count: int
    filter_count: int
    hooks: list[HookSummary] = Field(default_factory=list)


def _summarize_entry(entry: FilterEntry) -> EntrySummary:
    callback = entry.callback
    name = callback.name if isinstance(callback, Transform) else repr(callback.value)
    return EntrySummary(
        identity_key=entry.identity_key,
        priority=entry.priority,
        kind=callback.kind,
        callback=name,
    )


def describe_registry(context: FilterContext) -> RegistryReport:
    """Summarize every non-empty hook, entries listed in execution order."""
    applied = context.applied_snapshot()
    hooks: list[HookSummary] = []
    for hook_id in sorted(context.hooks()):
        entries = sorted(context.entries(hook_id), key=lambda entry: entry.priority)
        hooks.append(
            HookSummary(
                hook_id=hook_id,
                entry_count=len(entries),
                has_applied=hook_id in applied,
                entries=[_summarize_entry(entry) for entry in entries],
            )
        )
    return RegistryReport(
        hook_count=len(hooks),
        filter_count=sum(hook.entry_count for hook in hooks),
        hooks=hooks,
    )


def render_json_report(report: RegistryReport) -> str:
    return report.model_dump_json(indent=2)


def _format_priority(priority: float) -> str:
    return f"{priority:g}"


def render_markdown_report(report: RegistryReport) -> str:
    lines: list[str] = []
    lines.append("# Hook Registry")
    lines.append("")
    lines.append(f"- Hooks: {report.hook_count}")
    lines.append(f"- Filters: {report.filter_count}")

    for hook in report.hooks:
        lines.append("")
        applied = " (applied)" if hook.has_applied else ""
        lines.append(f"## {hook.hook_id}{applied}")
        lines.append("")
        lines.append("| Priority | Kind | Callback | Key |")
        lines.append("|---|---|---|---|")
        for entry in hook.entries:
            lines.append(f"| {_format_priority(entry.priority)} | {entry.kind} | `{entry.callback}` | `{entry.identity_key}` |")

    return "\n".join(lines) + "\n"
