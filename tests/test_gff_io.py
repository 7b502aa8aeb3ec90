"""
Tests for reading repeat masker GFF and writing composites.
"""

import io
import os
import tempfile

import pytest
from repeat_stitcher.core.records import Composite, GenomicInterval, Part, Strand
from repeat_stitcher.io.gff_reader import (
    MalformedRecordError,
    parse_attributes,
    parse_repeat_attribute,
    parse_gff_line,
    read_repeats,
)
from repeat_stitcher.io.gff_writer import (
    GFF_HEADER,
    format_part,
    format_composite,
    write_composites,
)

LINE = ('chr1\tRepeatMasker\tsimilarity\t101\t200\t1234\t+\t.\t'
        'Target "Motif:AluJr" 1 100; Repeat AluJr SINE/Alu 1 100 200')

SAMPLE_GFF = """##gff-version 2
# repeat masker output
chr1\tRepeatMasker\tsimilarity\t101\t200\t100\t+\t.\tRepeat AluJr SINE/Alu 2 101 0

chr1\tRepeatMasker\tsimilarity\t201\t300\t100\t+\t.\tRepeat AluJr SINE/Alu 102 201 0
"""


def test_parse_gff_line():
    """1-based inclusive columns become 0-based half-open intervals."""
    r = parse_gff_line(LINE)

    assert r.name == "AluJr"
    assert r.repeat_class == "SINE/Alu"
    assert r.score == 1234.0
    assert r.genomic == GenomicInterval("chr1", 100, 200, Strand.PLUS)
    assert r.consensus_left == 0
    assert r.consensus_right == 100


def test_parse_unavailable_fields():
    line = 'chrX\tRM\tsimilarity\t11\t20\t.\t-\t.\tRepeat (CA)n Simple_repeat . . .'
    r = parse_gff_line(line)

    assert r.score == 0.0
    assert r.genomic.strand == Strand.MINUS
    assert r.consensus_left is None
    assert r.consensus_right is None
    assert not r.has_consensus


def test_parse_attributes():
    attrs = parse_attributes('Class "SINE/Alu"; Parts "a 1 2 3 4"; ')
    assert attrs == [("Class", "SINE/Alu"), ("Parts", "a 1 2 3 4")]


def test_parse_repeat_attribute():
    assert parse_repeat_attribute("L1PA2 LINE/L1 5 6010 12") == ("L1PA2", "LINE/L1", 4, 6010)
    with pytest.raises(ValueError):
        parse_repeat_attribute("L1PA2 LINE/L1 5")
    with pytest.raises(ValueError):
        parse_repeat_attribute("L1PA2 LINE/L1 five 6010 12")


@pytest.mark.parametrize("line,message", [
    ("chr1\tRM\tsimilarity\t101\t200", "9 tab-separated columns"),
    ("chr1\tRM\tsimilarity\tx\t200\t1\t+\t.\tRepeat A B 1 2 0", "non-numeric coordinates"),
    ("chr1\tRM\tsimilarity\t101\t200\thigh\t+\t.\tRepeat A B 1 2 0", "non-numeric score"),
    ("chr1\tRM\tsimilarity\t101\t200\t1\t+\t.\tTarget A", "missing repeat tag"),
    ("chr1\tRM\tsimilarity\t101\t200\t1\t*\t.\tRepeat A B 1 2 0", "illegal strand"),
    ("chr1\tRM\tsimilarity\t200\t100\t1\t+\t.\tRepeat A B 1 2 0", "interval"),
    ("chr1\tRM\tsimilarity\t101\t200\t1\t+\t.\tRepeat A B 50 2 0", "before start"),
])
def test_malformed_lines(line, message):
    with pytest.raises(MalformedRecordError, match=message) as excinfo:
        parse_gff_line(line, 7)
    assert excinfo.value.line_number == 7
    assert str(excinfo.value).startswith("line 7: ")


def test_read_repeats_from_stream():
    records = read_repeats(io.StringIO(SAMPLE_GFF))
    assert [r.genomic.left for r in records] == [100, 200]
    assert [r.consensus_left for r in records] == [1, 101]


def test_read_repeats_reports_line_number():
    text = SAMPLE_GFF + "chr1\tRM\tsimilarity\tbad\n"
    with pytest.raises(MalformedRecordError, match="line 6"):
        read_repeats(io.StringIO(text))


def test_read_repeats_from_file():
    with tempfile.TemporaryDirectory() as tmpdir:
        path = os.path.join(tmpdir, "rm.gff")
        with open(path, 'w') as f:
            f.write(SAMPLE_GFF)

        assert len(read_repeats(path)) == 2


def example_composite():
    return Composite("SINE/Alu", 200.0, (
        Part("AluJr", 1, 101, GenomicInterval("chr1", 100, 200, Strand.PLUS)),
        Part("AluJr", 101, 201, GenomicInterval("chr1", 200, 300, Strand.PLUS)),
    ))


def test_format_part():
    part = Part("AluJr", 1, 101, GenomicInterval("chr1", 100, 200, Strand.PLUS))
    assert format_part(part) == "AluJr 2 101 101 200"

    unknown = Part("(CA)n", None, None, GenomicInterval("chr1", 0, 10, Strand.PLUS))
    assert format_part(unknown) == "(CA)n . . 1 10"


def test_format_composite():
    columns = format_composite(example_composite()).split("\t")

    assert columns[:8] == ["chr1", "stitch", "composite", "101", "300", "200", "+", "."]
    assert columns[8] == 'Class "SINE/Alu"; Parts "AluJr 2 101 101 200|AluJr 102 201 201 300"'


def test_format_fractional_score():
    c = Composite("SINE/Alu", 12.5, example_composite().parts)
    assert format_composite(c).split("\t")[5] == "12.5"


def test_end_column_is_genomic():
    """The end column is the largest genomic right end, not a consensus position."""
    c = Composite("LINE/L1", 1.0, (
        Part("L1", 5000, 6000, GenomicInterval("chr2", 10, 900, Strand.MINUS)),
        Part("L1", 4000, 5000, GenomicInterval("chr2", 850, 880, Strand.MINUS)),
    ))
    columns = format_composite(c).split("\t")
    assert (columns[3], columns[4], columns[6]) == ("11", "900", "-")


def test_write_composites():
    out = io.StringIO()
    n = write_composites([example_composite(), example_composite()], out)

    lines = out.getvalue().splitlines()
    assert n == 2
    assert lines[0] == GFF_HEADER
    assert len(lines) == 3

    out = io.StringIO()
    write_composites([], out, header=False)
    assert out.getvalue() == ""


def test_written_parts_read_back():
    """Parts written in 1-based form parse back to the same coordinates."""
    c = example_composite()
    line = format_composite(c)
    parts = dict(parse_attributes(line.split("\t")[8]))["Parts"].split("|")

    for text, part in zip(parts, c.parts):
        name, cl, cr, gl, gr = text.split()
        assert name == part.name
        assert int(cl) - 1 == part.consensus_left
        assert int(cr) == part.consensus_right
        assert int(gl) - 1 == part.genomic.left
        assert int(gr) == part.genomic.right
