"""Test hypergraph construction."""

import pytest

from bookshelf_place.metrics.hypergraph import HyperParams, HypergraphBuilder, build_hypergraph


def cells(circuit, *names):
    return [circuit.cell_index(n) for n in names]


def test_terminal_propagation(small_circuit):
    graph = build_hypergraph(small_circuit, cells(small_circuit, "a", "b"))
    assert graph.num_vertices == 4
    assert graph.num_edges == 2
    assert list(graph.vertex_weights) == [16, 12, 1, 1]
    assert list(graph.partition) == [-1, -1, 0, 1]
    assert (graph.source, graph.sink) == (2, 3)
    # n1 reaches the pad left of the split; n2 reaches c to its right
    assert list(graph.edge(0)) == [0, 1, 2]
    assert list(graph.edge(1)) == [1, 3]
    assert list(graph.eind) == [0, 3, 5]


def test_without_terminal_propagation(small_circuit):
    params = HyperParams(term_prop=False)
    graph = build_hypergraph(small_circuit, cells(small_circuit, "a", "b"), params)
    assert graph.num_vertices == 2
    assert graph.source == -1
    assert list(graph.eind) == [0, 2, 3]
    assert list(graph.edge_weights) == [1, 1]


def test_edge_weight_mode(small_circuit):
    params = HyperParams(edge_weight_mode=1)
    graph = build_hypergraph(small_circuit, cells(small_circuit, "a", "b", "c"), params)
    # n1 still has the pad outside; n2 is fully inside
    assert list(graph.edge_weights) == [6, 5]


def test_horizontal_split(small_circuit):
    params = HyperParams(horizontal=True, split_point=10.0)
    graph = build_hypergraph(small_circuit, cells(small_circuit, "a", "b"), params)
    assert list(graph.edge(0)) == [0, 1, 2]
    assert list(graph.edge(1)) == [1, 2]


def test_vertex_order_follows_input(small_circuit):
    graph = build_hypergraph(small_circuit, cells(small_circuit, "b", "a"), HyperParams(term_prop=False))
    assert graph.cells == cells(small_circuit, "b", "a")
    assert list(graph.vertex_weights) == [12, 16]


def test_duplicate_cell(small_circuit):
    with pytest.raises(ValueError):
        build_hypergraph(small_circuit, cells(small_circuit, "a", "a"))


def test_builder_reuse(small_circuit):
    builder = HypergraphBuilder(small_circuit)
    first = builder.build(cells(small_circuit, "a"), HyperParams())
    builder.build(cells(small_circuit, "c"), HyperParams())
    again = builder.build(cells(small_circuit, "a"), HyperParams())
    assert list(first.eptr) == list(again.eptr)


def test_to_networkx(small_circuit):
    graph = build_hypergraph(small_circuit, cells(small_circuit, "a", "b")).to_networkx()
    assert graph.number_of_nodes() == 6
    assert graph.number_of_edges() == 5
    assert graph.nodes[("v", 0)]["weight"] == 16
    assert graph.nodes[("v", 2)]["part"] == 0
