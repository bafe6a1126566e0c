"""
test_patcher.py - Tests for AssemblyInfo attribute rewriting.
"""
import codecs
from pathlib import Path

import pytest

from revstamp_core.errors import UnsupportedOutputFormatError
from revstamp_ops.patcher import (
    attribute_pattern,
    bracket_style_for,
    detect_encoding,
    patch_file,
    patch_lines,
)

CS_TEMPLATE = (
    "using System.Reflection;\r\n"
    "\r\n"
    "[assembly: AssemblyVersion(\"1.0.0.0\")]\r\n"
    "[assembly: AssemblyInformationalVersion(\"MyApp {commit:8}/{date}{!:-dirty}\")]\r\n"
    "// trailing comment\r\n"
)


@pytest.mark.parametrize("name,style", [
    ("AssemblyInfo.cs", ("[", "]")),
    ("AssemblyInfo.CS", ("[", "]")),
    ("AssemblyInfo.vb", ("<", ">")),
])
def test_bracket_style_for(name, style):
    assert bracket_style_for(Path(name)) == style


@pytest.mark.parametrize("name", ["AssemblyInfo.fs", "AssemblyInfo", "version.txt"])
def test_unsupported_extension(name):
    with pytest.raises(UnsupportedOutputFormatError):
        bracket_style_for(Path(name))


def test_attribute_pattern_matches_spacing_and_case():
    pattern = attribute_pattern("[", "]")
    m = pattern.match('  [ Assembly : assemblyinformationalversion ( "v{commit}" ) ] // note')
    assert m is not None
    assert m.group(2) == "v{commit}"
    assert pattern.match('<Assembly: AssemblyInformationalVersion("x")>') is None


def test_patch_lines_only_rewrites_attribute():
    pattern = attribute_pattern("<", ">")
    lines = [
        "Imports System.Reflection\n",
        '<Assembly: AssemblyInformationalVersion("{commit}")>\n',
        '<Assembly: AssemblyVersion("{commit}")>\n',
    ]
    result = list(patch_lines(lines, pattern, lambda v: v.upper()))
    assert result == [
        ("Imports System.Reflection\n", False),
        ('<Assembly: AssemblyInformationalVersion("{COMMIT}")>\n', True),
        ('<Assembly: AssemblyVersion("{commit}")>\n', False),
    ]


@pytest.mark.parametrize("data,name,bom", [
    (codecs.BOM_UTF8 + b"x", "utf-8", codecs.BOM_UTF8),
    (codecs.BOM_UTF16_LE + "x".encode("utf-16-le"), "utf-16-le", codecs.BOM_UTF16_LE),
    (codecs.BOM_UTF16_BE + "x".encode("utf-16-be"), "utf-16-be", codecs.BOM_UTF16_BE),
    (codecs.BOM_UTF32_LE + "x".encode("utf-32-le"), "utf-32-le", codecs.BOM_UTF32_LE),
    ("plain ü".encode("utf-8"), "utf-8", b""),
])
def test_detect_encoding(data, name, bom):
    enc = detect_encoding(data)
    assert enc.name == name
    assert enc.bom == bom


def test_detect_encoding_falls_back_for_legacy_bytes():
    enc = detect_encoding("Grüße".encode("latin-1"))
    assert enc.bom == b""
    assert "Grüße".encode("latin-1").decode(enc.name)


def test_patch_file_rewrites_attribute_and_keeps_line_endings(tmp_path, sample_info):
    src = tmp_path / "AssemblyInfo.cs.in"
    src.write_bytes(CS_TEMPLATE.encode("utf-8"))
    out = tmp_path / "AssemblyInfo.cs"

    result = patch_file(src, out, sample_info)

    assert result.patched == 1
    assert result.lines == 5
    expected = CS_TEMPLATE.replace("MyApp {commit:8}/{date}{!:-dirty}", "MyApp 45d4e32f/20111231")
    assert out.read_bytes() == expected.encode("utf-8")


def test_patch_file_preserves_utf16_bom(tmp_path, dirty_info):
    src = tmp_path / "AssemblyInfo.vb.in"
    text = 'Imports System.Reflection\r\n<Assembly: AssemblyInformationalVersion("{commit:5}{!}")>\r\n'
    src.write_bytes(codecs.BOM_UTF16_LE + text.encode("utf-16-le"))
    out = tmp_path / "AssemblyInfo.vb"

    result = patch_file(src, out, dirty_info)

    assert result.encoding == "utf-16-le"
    data = out.read_bytes()
    assert data.startswith(codecs.BOM_UTF16_LE)
    assert data[2:].decode("utf-16-le") == text.replace("{commit:5}{!}", "45d4e!")


def test_patch_file_without_attribute_copies_input(tmp_path, sample_info):
    src = tmp_path / "in.cs"
    src.write_text("class A {}\n", encoding="utf-8")
    out = tmp_path / "out.cs"
    result = patch_file(src, out, sample_info)
    assert result.patched == 0
    assert out.read_text(encoding="utf-8") == "class A {}\n"


def test_patch_file_rejects_extension_before_io(tmp_path, sample_info):
    out = tmp_path / "AssemblyInfo.txt"
    with pytest.raises(UnsupportedOutputFormatError):
        patch_file(tmp_path / "missing.in", out, sample_info)
    assert not out.exists()
    assert list(tmp_path.iterdir()) == []
