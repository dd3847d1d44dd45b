"""Hypergraph induced by a subset of cells, for partitioning.

The vertices are the chosen cells (weighted by area); the hyperedges are
the nets that touch at least one of them, each exactly once. With terminal
propagation, pins outside the subset are summarized by two fixed
pseudo-vertices: a source (outside pin before the split point) and a sink
(outside pin at or after it). Vertex 0..n-1 follow the order of the cells
given to the builder.

Edge lists use the CSR layout expected by hypergraph partitioners: the
pins of edge e are eptr[eind[e]:eind[e + 1]].
"""

from dataclasses import dataclass, field
from typing import List, Sequence
import logging

import networkx as nx
import numpy as np

from ..core.circuit import Circuit
from ..core.marklist import MarkList

logger = logging.getLogger(__name__)


@dataclass
class HyperParams:
    """Hypergraph construction options.

    Attributes:
        horizontal: Split line is horizontal (compare pin y), else vertical
        split_point: Coordinate separating source side from sink side
        term_prop: Add source/sink pseudo-vertices for outside pins
        edge_weight_mode: 0 = all edges weight 1; 1 = weight 6 for nets
            with outside pins, 5 otherwise
    """
    horizontal: bool = False
    split_point: float = 0.0
    term_prop: bool = True
    edge_weight_mode: int = 0


@dataclass
class HyperGraph:
    """Hypergraph in CSR form."""
    vertex_weights: np.ndarray
    edge_weights: np.ndarray
    partition: np.ndarray
    eind: np.ndarray
    eptr: np.ndarray
    cells: List[int] = field(default_factory=list)
    nets: List[int] = field(default_factory=list)
    source: int = -1
    sink: int = -1

    @property
    def num_vertices(self) -> int:
        return len(self.vertex_weights)

    @property
    def num_edges(self) -> int:
        return len(self.edge_weights)

    def edge(self, e: int) -> np.ndarray:
        return self.eptr[self.eind[e]:self.eind[e + 1]]

    def to_networkx(self) -> nx.Graph:
        """Bipartite graph: ("v", i) vertex nodes and ("e", j) net nodes."""
        graph = nx.Graph()
        for v in range(self.num_vertices):
            graph.add_node(("v", v), bipartite=0, weight=int(self.vertex_weights[v]),
                           part=int(self.partition[v]))
        for e in range(self.num_edges):
            graph.add_node(("e", e), bipartite=1, weight=int(self.edge_weights[e]))
            for v in self.edge(e):
                graph.add_edge(("v", int(v)), ("e", e))
        return graph


class HypergraphBuilder:
    """Builds hypergraphs for subsets of one circuit.

    Mark lists are allocated once and cleared between builds.
    """

    def __init__(self, circuit: Circuit):
        self.circuit = circuit
        self.cellmark = MarkList(len(circuit.cells))
        self.netmark = MarkList(len(circuit.nets))

    def build(self, cells: Sequence[int], params: HyperParams) -> HyperGraph:
        circuit = self.circuit
        self.cellmark.clear()
        self.netmark.clear()

        for c in cells:
            if self.cellmark.is_marked(c):
                raise ValueError(f"Cell {c} listed twice")
            self.cellmark.mark(c)
            for p in circuit.cells[c].pins:
                self.netmark.mark(circuit.pins[p].net)

        num_nets = len(self.netmark)
        sources = np.zeros(num_nets, dtype=bool)
        sinks = np.zeros(num_nets, dtype=bool)
        if params.term_prop:
            for net_id in self.netmark.list:
                k = self.netmark.index_of(net_id)
                for p in circuit.nets[net_id].pins:
                    pin = circuit.pins[p]
                    if self.cellmark.is_marked(pin.cell):
                        continue
                    loc = circuit.pin_location(pin)
                    if loc is None:
                        continue
                    value = loc[1] if params.horizontal else loc[0]
                    if value < params.split_point:
                        sources[k] = True
                    else:
                        sinks[k] = True

        vertex_weights = [int(circuit.cells[c].area) for c in self.cellmark.list]
        partition = [-1] * len(vertex_weights)
        source = sink = -1
        if params.term_prop:
            source = len(vertex_weights)
            vertex_weights.append(1)
            partition.append(0)
            sink = len(vertex_weights)
            vertex_weights.append(1)
            partition.append(1)

        eind = [0]
        eptr: List[int] = []
        edge_weights = []
        for k, net_id in enumerate(self.netmark.list):
            for p in circuit.nets[net_id].pins:
                cell = circuit.pins[p].cell
                if self.cellmark.is_marked(cell):
                    eptr.append(self.cellmark.index_of(cell))
            if params.term_prop:
                if sources[k]:
                    eptr.append(source)
                if sinks[k]:
                    eptr.append(sink)
            eind.append(len(eptr))

            if params.edge_weight_mode == 1:
                edge_weights.append(6 if sources[k] or sinks[k] else 5)
            else:
                edge_weights.append(1)

        logger.debug(
            f"Hypergraph: {len(vertex_weights)} vertices, {num_nets} edges, "
            f"{int(sources.sum() + sinks.sum())} propagated terminals"
        )
        return HyperGraph(
            vertex_weights=np.array(vertex_weights, dtype=np.int64),
            edge_weights=np.array(edge_weights, dtype=np.int64),
            partition=np.array(partition, dtype=np.int64),
            eind=np.array(eind, dtype=np.int64),
            eptr=np.array(eptr, dtype=np.int64),
            cells=list(self.cellmark.list),
            nets=list(self.netmark.list),
            source=source,
            sink=sink
        )


def build_hypergraph(circuit: Circuit, cells: Sequence[int], params: HyperParams = None) -> HyperGraph:
    """Convenience function to build one hypergraph."""
    return HypergraphBuilder(circuit).build(cells, params or HyperParams())
