"""
Install service: capability detection, asset resolution, and the
collaborators that download, install and configure the release.

Layers (onion, inner first):
    data → domain → detection → execution → orchestration

Import from the submodules directly; this package module stays empty
so that ``core.models`` can depend on ``data`` without a cycle.
"""
