"""GUI adapter layer.

This package provides thin Qt-shaped adapters over engine services.

Notes
-----
Adapters exist to:
- keep GUI code free of persistence details,
- deliver engine change signals through the Qt event loop instead of from
  inside an engine call,
- translate engine domain errors into user-visible messages.
"""
