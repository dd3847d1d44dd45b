#!/usr/bin/env python3
"""Create a small random Bookshelf design for testing the reader and placer."""

import argparse
import random
from pathlib import Path

from bookshelf_place.core.circuit import Circuit, CellKind, PinDirection
from bookshelf_place.integration.bookshelf.writer import write_design


def create_test_design(
    output_dir: str,
    name: str = "synthetic",
    num_cells: int = 40,
    num_terminals: int = 4,
    num_nets: int = 30,
    num_rows: int = 6,
    row_height: float = 12.0,
    sites_per_row: int = 80,
    seed: int = 42
) -> Path:
    """Create a random row-based design and write it as Bookshelf files.

    Args:
        output_dir: Directory to write the files into
        name: Design name (file stem)
        num_cells: Number of movable standard cells
        num_terminals: Number of I/O pads placed on the left and right edges
        num_nets: Number of nets (2-4 pins each)
        num_rows: Number of placement rows
        row_height: Height of every row
        sites_per_row: Sites per row (site width 1)
        seed: Random seed

    Returns:
        Path of the aux file
    """
    random.seed(seed)
    circuit = Circuit(name=name)

    for i in range(num_rows):
        circuit.add_row(
            y=i * row_height,
            height=row_height,
            site_width=1.0,
            site_spacing=1.0,
            x_min=0.0,
            num_sites=sites_per_row
        )

    for i in range(num_cells):
        width = float(random.randint(2, 8))
        circuit.add_cell(f"o{i}", width, row_height)

    core_height = num_rows * row_height
    for i in range(num_terminals):
        cell = circuit.add_cell(f"p{i}", 1.0, 1.0, CellKind.TERMINAL)
        x = -2.0 if i % 2 == 0 else sites_per_row + 1.0
        y = core_height * (i // 2 + 1) / (num_terminals // 2 + 1)
        circuit.set_position(cell.index, x, y)

    directions = (PinDirection.INPUT, PinDirection.OUTPUT)
    for n in range(num_nets):
        degree = random.randint(2, 4)
        cells = random.sample(range(len(circuit.cells)), degree)
        pins = [
            (c, directions[k == 0], random.uniform(-0.5, 0.5), random.uniform(-0.5, 0.5))
            for k, c in enumerate(cells)
        ]
        circuit.add_net(f"n{n}", pins)

    aux_path = write_design(circuit, output_dir, annotate=[f"synthetic design, seed {seed}"])

    print(f"Created test design: {aux_path}")
    print(f"  Rows: {num_rows} x {sites_per_row} sites")
    print(f"  Cells: {num_cells} movable, {num_terminals} terminals")
    print(f"  Nets: {num_nets}, pins: {circuit.num_pins}")
    print(f"  Utilization: {circuit.utilization():.3f}")
    return aux_path


def main():
    parser = argparse.ArgumentParser(description="Create a random Bookshelf test design")
    parser.add_argument("--output_dir", type=str, default="data/synthetic",
                        help="Output directory")
    parser.add_argument("--name", type=str, default="synthetic",
                        help="Design name")
    parser.add_argument("--num_cells", type=int, default=40,
                        help="Number of movable cells")
    parser.add_argument("--num_terminals", type=int, default=4,
                        help="Number of terminals")
    parser.add_argument("--num_nets", type=int, default=30,
                        help="Number of nets")
    parser.add_argument("--num_rows", type=int, default=6,
                        help="Number of rows")
    parser.add_argument("--sites_per_row", type=int, default=80,
                        help="Sites per row")
    parser.add_argument("--seed", type=int, default=42,
                        help="Random seed")

    args = parser.parse_args()

    create_test_design(
        output_dir=args.output_dir,
        name=args.name,
        num_cells=args.num_cells,
        num_terminals=args.num_terminals,
        num_nets=args.num_nets,
        num_rows=args.num_rows,
        sites_per_row=args.sites_per_row,
        seed=args.seed
    )


if __name__ == "__main__":
    main()
