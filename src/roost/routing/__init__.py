"""Routing — route definitions, dynamic component parsing, and app
directory discovery.

Route definitions are produced by a loader and consumed once by the
segment walker; nothing here holds state across resolutions.
"""
