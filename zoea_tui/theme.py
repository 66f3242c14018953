"""Colour palette handed explicitly to every styled render call."""

from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Any, Mapping

from rich.style import Style

from .entries import Role, Source


@dataclass(frozen=True)
class Theme:
    """Hex colours used by the dashboard renderers."""

    user: str = "#00FF66"
    assistant: str = "#FF00CC"
    system: str = "#00CCFF"
    tool: str = "#FFCC00"
    swarm: str = "#FFAF00"
    brand: str = "#9D00FF"
    teal: str = "#00FFCC"
    muted: str = "#5555AA"
    error: str = "#FF3366"
    reasoning_header: str = "#D75FD7"
    reasoning: str = "#FF87FF"
    scrollbar_thumb: str = "#8A8A8A"
    scrollbar_track: str = "#585858"

    @classmethod
    def from_config(cls, theme_config: Mapping[str, Any] | None) -> Theme:
        """Build a theme from the validated ``[theme]`` config table."""
        if not theme_config:
            return cls()
        known = {item.name for item in fields(cls)}
        values = {
            key: str(value)
            for key, value in theme_config.items()
            if key in known and value
        }
        return cls(**values)

    def role_style(self, role: Role, source: Source = Source.DIRECT) -> Style:
        """Return the prefix style for an entry's role and source."""
        if source is Source.BROADCAST:
            return Style(color=self.swarm, bold=True)
        colour = {
            Role.USER: self.user,
            Role.ASSISTANT: self.assistant,
            Role.SYSTEM: self.system,
            Role.TOOL: self.tool,
        }.get(role, self.system)
        return Style(color=colour, bold=role is Role.USER)

    def style(self, name: str, **kwargs: Any) -> Style:
        """Return a rich style for one of the named palette colours."""
        return Style(color=getattr(self, name), **kwargs)


DEFAULT_THEME = Theme()
