"""Pluggy hook specifications for export and import lifecycle events."""

from __future__ import annotations

import pluggy

PROJECT_NAME = "ctdata"

hookspec = pluggy.HookspecMarker(PROJECT_NAME)
hookimpl = pluggy.HookimplMarker(PROJECT_NAME)


class CtdataHookSpec:
    """Hook specifications for the ctdata plugin system."""

    @hookspec
    def post_export(self, source: str, artifact: str, size: int) -> None:
        """Called after an artifact was built.

        ``artifact`` is ``"text"`` or ``"file"``; ``size`` is its length
        in characters or bytes.
        """

    @hookspec
    def post_import(self, source: str, inserted: int, updated: int) -> None:
        """Called after an import committed. Not called for dry runs or rejections."""
