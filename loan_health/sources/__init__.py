"""Raw reserve sources."""
from .aave_subgraph import AaveSubgraphSource, SubgraphError

__all__ = ["AaveSubgraphSource", "SubgraphError"]
