"""Command-line driver.

Usage:
    bookshelf-place run --aux designs/ibm01/ibm01.aux
    bookshelf-place run -a designs/ibm01/ibm01.aux -b -o placed.ps --write-dir out/
"""

import argparse
import logging
import sys
from typing import List, Optional

from .config import RunConfig, load_config, override
from .core.circuit import Circuit
from .errors import BookshelfError
from .integration.bookshelf.reader import AuxResolver
from .integration.bookshelf.writer import write_design
from .metrics.wirelength import log_wirelength
from .placer.block_placer import BlockPlacer
from .render.layout import RenderConfig, render_layout
from .utils.logging import setup_logging

logger = logging.getLogger(__name__)

BLOCK_OUTPUT = "blockplacement.ps"


def log_summary(circuit: Circuit) -> None:
    """Log the circuit summary block."""
    s = circuit.summary()
    logger.info("---- CIRCUIT SUMMARY INFORMATION ----")
    logger.info(f"Circuit has {s['cells']} cells, {s['nets']} nets, {s['rows']} rows")
    logger.info(f"{s['terminals']} pads")
    logger.info(f"Total cell area: {s['cell_area']:.6g}")
    logger.info(f"Total row area: {s['row_area']:.6g}")
    logger.info(f"Utilization: {s['utilization']:.4f}")
    logger.info(f"Cells: {s['standard_cells']} Macros: {s['macros']} Terminals {s['terminals']}")
    logger.info("---------------")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="bookshelf-place",
        description="Read Bookshelf placement benchmarks and pack cells into rows"
    )
    sub = parser.add_subparsers(dest="command", required=True)

    run = sub.add_parser("run", help="Read a design, optionally block-place it, and render it")
    run.add_argument("-a", "--aux", required=True, help="Path to the design's .aux file")
    run.add_argument("-b", "--block", action="store_true", help="Run the block placer")
    run.add_argument("-o", "--output", default=None, help="Layout output file (format by extension)")
    run.add_argument("--config", default=None, help="YAML run configuration")
    run.add_argument("--write-dir", default=None, help="Write the resulting design here")
    run.add_argument("--parallel", action="store_true", default=None,
                     help="Parse independent files concurrently")
    run.add_argument("--log-level", default=None, help="Logging level (DEBUG, INFO, ...)")
    run.add_argument("--no-render", action="store_true", help="Skip layout rendering")
    return parser


def run(args: argparse.Namespace) -> int:
    config = load_config(args.config) if args.config else RunConfig()
    config = override(
        config,
        parallel=args.parallel,
        log_level=args.log_level,
        write_dir=args.write_dir
    )
    setup_logging(config.level, config.log_file)

    circuit = AuxResolver(parallel=config.parallel).resolve(args.aux)
    log_summary(circuit)
    log_wirelength(circuit)

    if args.block:
        logger.info("Running block placement")
        BlockPlacer(config.placer).place(circuit)
        log_wirelength(circuit, "after block placement")

    if config.write_dir:
        command = " ".join(["run", "-a", args.aux] + (["-b"] if args.block else []))
        write_design(circuit, config.write_dir, annotate=[f"command: {command}"])

    if not args.no_render:
        output = args.output or config.render.output
        if args.block and not args.output and output == RenderConfig.output:
            output = BLOCK_OUTPUT
        render_layout(circuit, output, config.render)
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        if args.command == "run":
            return run(args)
    except BookshelfError as e:
        print(f"error: {e}", file=sys.stderr)
        return 1
    return 2


if __name__ == "__main__":
    sys.exit(main())
