"""WSGI web server for a game client's site: releases feed, installer downloads, redirects, caching and proxying."""

__version__ = "1.0.0"