"""Channel name templates.

A channel template is plain text with ``{{.Owner}}``, ``{{.Repo}}`` and
``{{.Event}}`` placeholders, optionally padded with spaces inside the
braces.  Templates are compiled once at startup so syntax errors stop the
process before it accepts deliveries.

Usage
-----
>>> template = ChannelTemplate.compile("{{.Owner}}.{{.Repo}}.{{.Event}}")
>>> template.render(ChannelVars(owner="octo", repo="reef", event="push"))
'octo.reef.push'

"""

from __future__ import annotations

import dataclasses
import re

from hookstream.webhook.errors import RenderError, TemplateSyntaxError

DEFAULT_CHANNEL_TEMPLATE = "github.events"

_PLACEHOLDER_OPEN = "{{"
_PLACEHOLDER = re.compile(r"\{\{\s*\.([A-Za-z_][A-Za-z0-9_]*)\s*\}\}")

# Placeholder name -> ChannelVars attribute
_FIELDS = {
    "Owner": "owner",
    "Repo": "repo",
    "Event": "event",
}


@dataclasses.dataclass(frozen=True, slots=True)
class ChannelVars:
    """Values substituted into a channel template."""

    owner: str
    repo: str
    event: str


@dataclasses.dataclass(frozen=True, slots=True)
class ChannelTemplate:
    """Compiled channel template.

    Attributes
    ----------
    source
        Template text as configured.
    parts
        ``(literal, attribute)`` pairs; ``attribute`` is ``None`` for the
        trailing literal.

    """

    source: str
    parts: tuple[tuple[str, str | None], ...]

    @classmethod
    def compile(cls, source: str) -> ChannelTemplate:
        """Parse *source* into a reusable template.

        Raises
        ------
        TemplateSyntaxError
            If the template is empty, has a malformed placeholder, or names
            a field other than ``Owner``, ``Repo`` or ``Event``.

        """
        if not source:
            raise TemplateSyntaxError.empty()

        parts: list[tuple[str, str | None]] = []
        pos = 0
        while (start := source.find(_PLACEHOLDER_OPEN, pos)) != -1:
            match = _PLACEHOLDER.match(source, start)
            if match is None:
                raise TemplateSyntaxError.unbalanced(source, start)
            field = match.group(1)
            if field not in _FIELDS:
                raise TemplateSyntaxError.unknown_field(source, field)
            parts.append((source[pos:start], _FIELDS[field]))
            pos = match.end()
        parts.append((source[pos:], None))
        return cls(source=source, parts=tuple(parts))

    def render(self, variables: ChannelVars) -> str:
        """Return the channel name for *variables*.

        Raises
        ------
        RenderError
            If the rendered channel name is empty.

        """
        rendered = "".join(
            literal if attribute is None else literal + getattr(variables, attribute)
            for literal, attribute in self.parts
        )
        if not rendered:
            raise RenderError.empty_channel(self.source)
        return rendered


def render_channel(template: ChannelTemplate, owner: str, repo: str, event: str) -> str:
    """Render *template* for one delivery."""
    return template.render(ChannelVars(owner=owner, repo=repo, event=event))


__all__ = [
    "DEFAULT_CHANNEL_TEMPLATE",
    "ChannelTemplate",
    "ChannelVars",
    "render_channel",
]
