"""Query pipeline: cache keys, the cache-aside orchestrator and graph expansion."""

from samplegraph.pipeline.graph_builder import SampleGraphBuilder
from samplegraph.pipeline.keys import DEFAULT_NAMESPACE, derive_key, derive_search_key
from samplegraph.pipeline.orchestrator import SampleQueryOrchestrator

__all__ = [
    "DEFAULT_NAMESPACE",
    "SampleGraphBuilder",
    "SampleQueryOrchestrator",
    "derive_key",
    "derive_search_key",
]
