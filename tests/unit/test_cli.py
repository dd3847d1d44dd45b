"""Test the command-line driver."""

import logging

import pytest

from bookshelf_place.cli import build_parser, main
from bookshelf_place.integration.bookshelf.reader import read_aux


@pytest.fixture(autouse=True)
def restore_logging():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


def test_parser_requires_aux():
    with pytest.raises(SystemExit):
        build_parser().parse_args(["run"])


def test_parser_defaults():
    args = build_parser().parse_args(["run", "-a", "x.aux"])
    assert args.aux == "x.aux"
    assert not args.block
    assert args.output is None
    assert args.parallel is None


def test_read_and_render(small_design, tmp_path):
    output = tmp_path / "layout.png"
    assert main(["run", "-a", str(small_design), "-o", str(output)]) == 0
    assert output.exists()


def test_block_place_and_write(small_design, tmp_path):
    out_dir = tmp_path / "placed"
    code = main([
        "run", "-a", str(small_design), "-b", "--no-render",
        "--write-dir", str(out_dir), "--parallel", "--log-level", "warning"
    ])
    assert code == 0
    circuit = read_aux(out_dir / "small.aux")
    a = circuit.get_cell("a")
    assert (a.x, a.y) == (5.0, 0.0)
    assert circuit.get_cell("f").is_placed


def test_block_output_default_name(small_design, tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    assert main(["run", "-a", str(small_design), "-b"]) == 0
    assert (tmp_path / "blockplacement.ps").exists()


def test_config_file(small_design, tmp_path):
    config = tmp_path / "run.yaml"
    output = tmp_path / "from_config.png"
    config.write_text(f"render:\n  output: {output}\n  draw_nets: true\n  color_by: wirelength\n")
    assert main(["run", "-a", str(small_design), "--config", str(config)]) == 0
    assert output.exists()


def test_missing_file_reports_error(tmp_path, capsys):
    assert main(["run", "-a", str(tmp_path / "none.aux"), "--no-render"]) == 1
    err = capsys.readouterr().err
    assert err.startswith("error: ")
    assert "none.aux" in err


def test_format_error_reports_location(design_factory, capsys):
    aux = design_factory(nodes="UCLA nodes 1.0\nNumNodes : 3\nNumTerminals : 0\na 2 2\nb 3 3\n")
    assert main(["run", "-a", str(aux), "--no-render"]) == 1
    assert "small.nodes:5:" in capsys.readouterr().err


def test_overflow_reports_error(design_factory, capsys):
    nodes = ("UCLA nodes 1.0\nNumNodes : 5\nNumTerminals : 1\n"
             "a 40 4\nb 3 4\nc 2 4\nf 2 4\np 1 1 terminal\n")
    aux = design_factory(nodes=nodes)
    assert main(["run", "-a", str(aux), "-b", "--no-render"]) == 1
    assert "cannot place cell a" in capsys.readouterr().err


def test_bad_config_reports_error(small_design, tmp_path, capsys):
    config = tmp_path / "bad.yaml"
    config.write_text("placer:\n  order: random\n")
    assert main(["run", "-a", str(small_design), "--config", str(config), "--no-render"]) == 1
    assert "order" in capsys.readouterr().err


def test_failed_placement_check_reports_error(small_design, monkeypatch, capsys):
    from bookshelf_place.placer import block_placer
    from bookshelf_place.placer.legality import LegalityViolation

    monkeypatch.setattr(
        block_placer, "check_legality",
        lambda circuit, placement, tol: [LegalityViolation("overlap", "b", "forced")]
    )
    assert main(["run", "-a", str(small_design), "-b", "--no-render"]) == 1
    err = capsys.readouterr().err
    assert err.startswith("error: block placer produced an illegal placement")
