"""Middleware that rewrites request paths using regular expressions."""

from __future__ import annotations

import re

from .framework import Context, Handler, Middleware


def _capture_tokens(pattern: re.Pattern, text: str) -> list[tuple[str, str]] | None:
    match = pattern.search(text)
    if match is None:
        return None
    groups = [match.group(0), *(group or "" for group in match.groups())]
    return [(f"${index}", group) for index, group in enumerate(groups)]


def _replace(template: str, pairs: list[tuple[str, str]]) -> str:
    # Replacements are tried in the order given at each position, without overlap.
    out: list[str] = []
    pos = 0
    while pos < len(template):
        for old, new in pairs:
            if template.startswith(old, pos):
                out.append(new)
                pos += len(old)
                break
        else:
            out.append(template[pos])
            pos += 1
    return "".join(out)


def regex_rewrite(rules: dict[str, str]) -> Middleware:
    """Rewrite the path with the first rule whose regex matches; $0, $1... refer to captures."""
    compiled = [(re.compile(pattern), target) for pattern, target in rules.items()]

    def middleware(next_handler: Handler) -> Handler:
        def handler(ctx: Context):
            for pattern, target in compiled:
                pairs = _capture_tokens(pattern, ctx.path)
                if pairs is not None:
                    ctx.path = _replace(target, pairs)
                    break
            return next_handler(ctx)

        return handler

    return middleware