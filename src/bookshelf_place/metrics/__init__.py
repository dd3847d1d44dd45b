from .wirelength import WirelengthCalculator, net_hpwl, total_hpwl
from .hypergraph import HyperGraph, HypergraphBuilder, HyperParams, build_hypergraph

__all__ = [
    "HyperGraph",
    "HypergraphBuilder",
    "HyperParams",
    "WirelengthCalculator",
    "build_hypergraph",
    "net_hpwl",
    "total_hpwl"
]
