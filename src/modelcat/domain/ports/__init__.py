"""Ports implemented by adapters."""

from __future__ import annotations

from modelcat.domain.ports.sources import PullResult, Source, UpstreamSource

__all__ = ["PullResult", "Source", "UpstreamSource"]
