"""URL pattern compilation.

Turns a path template such as ``/articles/{id}/comments/{slug}`` into an
anchored regular expression with one named group per placeholder.
Literal text is escaped before placeholders are substituted, so
``/files/v1.0/{name}`` matches a literal dot.
"""

import re
from dataclasses import dataclass

from perch.errors import ConfigurationError

# Anything between braces is a placeholder candidate. Validation of the
# name happens afterwards so bad names fail loudly instead of being kept
# as literal text.
_PLACEHOLDER = re.compile(r"\{([^{}]*)\}")

# One path segment: no embedded slash.
_SEGMENT = "[^/]+"


@dataclass(frozen=True, slots=True)
class CompiledPattern:
    """A compiled path template.

    ``param_names`` keeps placeholder declaration order, which is the
    order handlers receive positional arguments in.
    """

    pattern: str
    regex: re.Pattern[str]
    param_names: tuple[str, ...]

    def match(self, path: str) -> dict[str, str] | None:
        """Return the captured segments, or ``None`` when *path* does not match.

        Values are the raw substrings of *path*; nothing is percent-decoded.
        """
        m = self.regex.match(path)
        if m is None:
            return None
        return {name: value for name, value in m.groupdict().items() if not name.isdigit()}


def compile_pattern(pattern: str) -> CompiledPattern:
    """Compile a path template into an anchored matcher.

    Examples::

        "/users"            -> \\A/users\\Z
        "/users/{id}"       -> \\A/users/(?P<id>[^/]+)\\Z
        "/a/{x}/b/{y}"      -> param_names == ("x", "y")

    Raises:
        ConfigurationError: On duplicate placeholder names, names that are
            not Python identifiers, or stray braces.
    """
    parts: list[str] = []
    names: list[str] = []
    pos = 0

    for m in _PLACEHOLDER.finditer(pattern):
        literal = pattern[pos : m.start()]
        _check_literal(pattern, literal)
        parts.append(re.escape(literal))

        name = m.group(1)
        if not name.isidentifier():
            msg = (
                f"Invalid placeholder {{{name}}} in route pattern {pattern!r}. "
                "Placeholder names must be valid identifiers, e.g. {id} or {post_slug}."
            )
            raise ConfigurationError(msg)
        if name in names:
            msg = f"Duplicate placeholder {{{name}}} in route pattern {pattern!r}."
            raise ConfigurationError(msg)

        names.append(name)
        parts.append(f"(?P<{name}>{_SEGMENT})")
        pos = m.end()

    tail = pattern[pos:]
    _check_literal(pattern, tail)
    parts.append(re.escape(tail))

    regex = re.compile(r"\A" + "".join(parts) + r"\Z")
    return CompiledPattern(pattern=pattern, regex=regex, param_names=tuple(names))


def _check_literal(pattern: str, literal: str) -> None:
    if "{" in literal or "}" in literal:
        msg = f"Unbalanced brace in route pattern {pattern!r}."
        raise ConfigurationError(msg)
