"""Declarative dashboard documents: catalog, validation, rendering, streaming.

Dashboards are JSON documents made of typed components. This package holds the
component catalog, the structural validator, the render engine that turns a
validated tree into output nodes, and the decoder that reconstructs partial
documents while a generator is still streaming them.

Nothing here imports Django or performs I/O; the view layer in `core.views`
feeds documents in and serializes the results.
"""
