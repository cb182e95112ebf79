"""Unit tests for the document model, YAML loader and LaTeX writer."""

import pytest

from texforge.contexts.document.loader import (
    InvalidDocumentError,
    document_from_dict,
    load_document,
    parse_inlines,
)
from texforge.contexts.document.model import (
    BulletList,
    CodeBlock,
    Document,
    Emph,
    Header,
    Image,
    Meta,
    Para,
    RawBlock,
    Space,
    Str,
    bottom_up,
    images,
    stringify,
)
from texforge.contexts.document.writer import WriterOptions, escape_latex, write_latex

SAMPLE_YAML = """\
meta:
  title: Field Report
  author: Hubert Farnsworth
  toc: true
blocks:
  - header: Findings
    level: 1
  - para:
      - "The probe returned "
      - emph: intact
      - image: {src: probe.png, label: Probe, title: The probe}
  - bullets:
      - first item
      - ["second ", {strong: item}]
  - code: "print('hello')"
  - raw: "\\\\newpage"
"""


@pytest.mark.unit
def test_bottom_up_replaces_only_matching_nodes():
    document = Document(
        blocks=(
            Para((Str("a"), Image(content=(Str("cap"),), src="x.png", title="t"))),
            BulletList(items=((Para((Image(content=(), src="y.png"),)),),)),
        )
    )

    def relocate(node):
        if isinstance(node, Image):
            return Image(content=node.content, src="/tmp/" + node.src, title=node.title)
        return node

    result = bottom_up(relocate, document)

    assert [image.src for image in images(result)] == ["/tmp/x.png", "/tmp/y.png"]
    assert result.blocks[0].content[0] == Str("a")
    assert images(result)[0].content == (Str("cap"),)
    # Original is untouched
    assert [image.src for image in images(document)] == ["x.png", "y.png"]


@pytest.mark.unit
def test_bottom_up_identity_preserves_equality():
    document = document_from_dict({"blocks": ["hello world", {"code": "x = 1"}]})
    assert bottom_up(lambda node: node, document) == document


@pytest.mark.unit
def test_stringify():
    assert stringify((Str("Hello"), Space(), Emph((Str("there"),)))) == "Hello there"


@pytest.mark.unit
def test_parse_inlines_splits_whitespace():
    assert parse_inlines("a  b") == (Str("a"), Space(), Str("b"))
    assert parse_inlines(None) == ()
    assert parse_inlines(42) == (Str("42"),)


@pytest.mark.unit
def test_load_document_from_yaml(tmp_path):
    path = tmp_path / "report.yaml"
    path.write_text(SAMPLE_YAML, encoding="utf-8")

    document = load_document(path)

    assert document.meta == Meta(title="Field Report", author="Hubert Farnsworth", toc=True)
    header, para, bullets, code, raw = document.blocks
    assert header == Header(level=1, content=(Str("Findings"),))
    assert isinstance(para, Para)
    (image,) = images(para)
    assert image == Image(content=(Str("Probe"),), src="probe.png", title="The probe")
    assert isinstance(bullets, BulletList) and len(bullets.items) == 2
    assert code == CodeBlock("print('hello')")
    assert raw == RawBlock(format="latex", text="\\newpage")


@pytest.mark.unit
def test_load_document_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_document(tmp_path / "absent.yaml")


@pytest.mark.unit
@pytest.mark.parametrize(
    "data",
    [
        ["not", "a", "mapping"],
        {"blocks": [{"table": []}]},
        {"blocks": [{"para": [{"underline": "x"}]}]},
        {"blocks": [{"image": {"title": "no src"}}]},
    ],
)
def test_invalid_documents(data):
    with pytest.raises(InvalidDocumentError):
        document_from_dict(data)


@pytest.mark.unit
def test_escape_latex():
    assert escape_latex("50% of $5 & #1_x") == r"50\% of \$5 \& \#1\_x"


@pytest.mark.unit
def test_write_latex_renders_blocks_and_images():
    document = document_from_dict(
        {
            "meta": {"title": "R&D"},
            "blocks": [
                {"header": "Intro"},
                {"para": ["See ", {"image": "plot.pdf"}]},
                {"image": {"src": "/tmp/fig.png", "label": "A figure"}},
                {"raw": "<br>", "format": "html"},
            ],
        }
    )

    latex = write_latex(WriterOptions(), document)

    assert latex.startswith("\\documentclass{article}")
    assert "\\title{R\\&D}" in latex
    assert "\\section{Intro}\\label{sec:intro}" in latex
    assert "{plot.pdf}" in latex
    assert "\\includegraphics[width=\\linewidth,keepaspectratio]{/tmp/fig.png}" in latex
    assert "\\caption{A figure}" in latex
    assert "<br>" not in latex
    assert "\\tableofcontents" not in latex
    assert latex.rstrip().endswith("\\end{document}")


@pytest.mark.unit
def test_write_latex_table_of_contents():
    from_meta = Document(meta=Meta(toc=True))
    from_options = Document()

    assert "\\tableofcontents" in write_latex(WriterOptions(), from_meta)
    assert "\\tableofcontents" in write_latex(WriterOptions(table_of_contents=True), from_options)


@pytest.mark.unit
def test_write_latex_variables_and_custom_template(tmp_path):
    template = tmp_path / "min.tex.jinja"
    template.write_text("\\documentclass{<<< documentclass >>>}\n<<< body >>>\n", encoding="utf-8")
    options = WriterOptions(variables={"documentclass": "report"}, template=template)

    latex = write_latex(options, document_from_dict({"blocks": ["Hi"]}))

    assert latex == "\\documentclass{report}\nHi\n"
