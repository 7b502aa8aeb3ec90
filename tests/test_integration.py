"""
End-to-end tests for the stitching pipeline and its command line.
"""

import io
import os
import tempfile
from dataclasses import dataclass

import pytest
from repeat_stitcher import stitch, stitch_records, PartitionError
from repeat_stitcher.algorithms.cost_model import CostModel
from repeat_stitcher.config.config_loader import ENV_INPUT, ENV_WORKERS
from repeat_stitcher.io.gff_reader import parse_attributes, read_repeats
from repeat_stitcher.pipeline.main_pipeline import main
from repeat_stitcher.scripts.run_pipeline import build_overrides, build_parser
from repeat_stitcher.scripts.run_pipeline import main as cli_main


def gff_line(chrom, start, end, strand, name, repeat_class, cons_start, cons_end, score=100):
    """One repeat masker feature in 1-based inclusive coordinates."""
    return (f"{chrom}\tRepeatMasker\tsimilarity\t{start}\t{end}\t{score}\t{strand}\t.\t"
            f"Repeat {name} {repeat_class} {cons_start} {cons_end} 0\n")


def sample_gff():
    lines = ["##gff-version 2\n"]
    # Three fragments of one Alu on chr1 plus strand.
    lines.append(gff_line("chr1", 1001, 1100, "+", "AluY", "SINE/Alu", 1, 100))
    lines.append(gff_line("chr1", 1101, 1200, "+", "AluY", "SINE/Alu", 101, 200))
    lines.append(gff_line("chr1", 1201, 1300, "+", "AluY", "SINE/Alu", 201, 300))
    # Two fragments of an L1 on the minus strand, consensus running backwards.
    lines.append(gff_line("chr1", 5001, 5100, "-", "L1PA2", "LINE/L1", 101, 200))
    lines.append(gff_line("chr1", 5101, 5200, "-", "L1PA2", "LINE/L1", 1, 100))
    # A lone repeat on chr2 cannot be chained.
    lines.append(gff_line("chr2", 101, 200, "+", "MIR", "SINE/MIR", 1, 100))
    return "".join(lines)


def unresolved_gff():
    """A partition whose second record lacks consensus coordinates."""
    return (gff_line("chr3", 101, 200, "+", "AluSx", "SINE/Alu", 1, 100)
            + gff_line("chr3", 201, 300, "+", "AluSx", "SINE/Alu", ".", "."))


def chr3_gff():
    """Two chainable fragments on chr3."""
    return (gff_line("chr3", 101, 200, "+", "AluSx", "SINE/Alu", 1, 100)
            + gff_line("chr3", 201, 300, "+", "AluSx", "SINE/Alu", 101, 200))


@dataclass(frozen=True)
class FailingCostModel(CostModel):
    """Raises while scoring links on one chromosome."""
    failing_chrom: str = "chr3"

    def __call__(self, left, right):
        if right.genomic.chrom == self.failing_chrom:
            raise RuntimeError(f"cannot score {right.name}")
        return super().__call__(left, right)


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    monkeypatch.delenv(ENV_INPUT, raising=False)
    monkeypatch.delenv(ENV_WORKERS, raising=False)


def run(text, workers=1):
    """Run main() on `text`, returning (exit code, output lines)."""
    with tempfile.TemporaryDirectory() as tmpdir:
        input_gff = os.path.join(tmpdir, "rm.gff")
        output_gff = os.path.join(tmpdir, "stitched.gff")
        with open(input_gff, 'w') as f:
            f.write(text)

        overrides = {
            'io': {'input_gff': input_gff, 'output_gff': output_gff, 'logs_dir': tmpdir},
            'performance': {'num_workers': workers},
        }
        code = main(overrides=overrides)

        lines = []
        if os.path.exists(output_gff):
            with open(output_gff) as f:
                lines = f.read().splitlines()
    return code, lines


@pytest.mark.parametrize("workers", [1, 2])
def test_end_to_end(workers):
    code, lines = run(sample_gff(), workers=workers)

    assert code == 0
    assert lines[0] == "##gff-version 2"
    features = [line.split("\t") for line in lines[1:]]
    assert len(features) == 2

    alu, l1 = features
    assert alu[:8] == ["chr1", "stitch", "composite", "1001", "1300", "300", "+", "."]
    assert dict(parse_attributes(alu[8])) == {
        "Class": "SINE/Alu",
        "Parts": "AluY 1 100 1001 1100|AluY 101 200 1101 1200|AluY 201 300 1201 1300",
    }
    assert l1[:7] == ["chr1", "stitch", "composite", "5001", "5200", "200", "-"]
    assert dict(parse_attributes(l1[8]))["Class"] == "LINE/L1"


def test_unresolved_consensus_is_not_a_failure():
    """A record without consensus coordinates is left out and the run still succeeds."""
    code, lines = run(sample_gff() + unresolved_gff(), workers=2)

    assert code == 0
    assert len(lines) == 3
    assert not any(line.startswith("chr3") for line in lines)


def test_failed_partition_sets_exit_code(monkeypatch):
    """Healthy partitions are still written when another one fails."""
    from repeat_stitcher.pipeline import scheduler

    real_stitch_block = scheduler.stitch_block

    def stitch_block(block, cost_model):
        if block[0].genomic.chrom == "chr3":
            raise RuntimeError("cannot chain chr3")
        return real_stitch_block(block, cost_model)

    monkeypatch.setattr(scheduler, "stitch_block", stitch_block)
    code, lines = run(sample_gff() + chr3_gff(), workers=1)

    assert code == 1
    assert len(lines) == 3
    assert not any(line.startswith("chr3") for line in lines)


def test_malformed_input_is_fatal():
    text = sample_gff() + "chr1\tRepeatMasker\tsimilarity\t1\t2\t3\t?\t.\tRepeat A B 1 2 0\n"
    code, lines = run(text)
    assert code == 1
    assert lines == []


def test_missing_input():
    assert main(overrides={'io': {'input_gff': '/nonexistent/rm.gff'}}) == 1
    assert main(overrides={'validation': {'validate_inputs': False}}) == 1


def test_performance_report_written():
    with tempfile.TemporaryDirectory() as tmpdir:
        input_gff = os.path.join(tmpdir, "rm.gff")
        with open(input_gff, 'w') as f:
            f.write(sample_gff())

        code = main(overrides={
            'io': {'input_gff': input_gff, 'output_gff': os.path.join(tmpdir, "out.gff"),
                   'logs_dir': os.path.join(tmpdir, "logs")},
            'debug': {'performance_report': True, 'log_to_file': True},
        })

        assert code == 0
        assert os.path.exists(os.path.join(tmpdir, "logs", "performance_report.json"))
        assert os.path.exists(os.path.join(tmpdir, "logs", "stitch.log"))


def test_stdout_output(capsys):
    with tempfile.TemporaryDirectory() as tmpdir:
        input_gff = os.path.join(tmpdir, "rm.gff")
        with open(input_gff, 'w') as f:
            f.write(sample_gff())

        assert cli_main(["--in", input_gff, "--workers", "1"]) == 0

    out = capsys.readouterr().out.splitlines()
    assert out[0] == "##gff-version 2"
    assert len(out) == 3


def test_stitch_api():
    records = read_repeats(io.StringIO(sample_gff() + chr3_gff()))
    model = FailingCostModel()

    assert len(stitch(records).composites) == 3
    result = stitch(records, cost_model=model)
    assert len(result.composites) == 2
    assert [f.key.chrom for f in result.failures] == ["chr3"]

    with pytest.raises(PartitionError, match="1 partition"):
        stitch_records(records, cost_model=model)
    assert len(stitch_records(records[:6], cost_model=model)) == 2


def test_cli_arguments():
    args = build_parser().parse_args([
        "--input", "rm.gff", "--out", "out.gff", "--workers", "0",
        "--max-separation", "1000", "--max-span", "2000", "--log-level", "DEBUG",
    ])

    assert build_overrides(args) == {
        'io': {'input_gff': 'rm.gff', 'output_gff': 'out.gff'},
        'performance': {'num_workers': 'auto'},
        'stitching': {'max_separation': 1000, 'max_span': 2000},
        'debug': {'log_level': 'DEBUG'},
    }
    assert build_overrides(build_parser().parse_args([])) == {}


def test_cli_version(capsys):
    assert cli_main(["--version"]) == 0
    assert capsys.readouterr().out.startswith("repeat-stitch ")
