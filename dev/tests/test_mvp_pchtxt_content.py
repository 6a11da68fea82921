from __future__ import annotations

import pytest

from pchtxt.exceptions import ContentDecodeError
from pchtxt.patching import (
    ParseLog,
    PatchType,
    TargetType,
    decode_content_line,
    decode_hex_value,
    parse_pchtxt,
)


def _parse(doc: str):
    log = ParseLog()
    output = parse_pchtxt(doc, log)
    return output, log


def test_sample_document_structure(sample_pchtxt: str) -> None:
    output, log = _parse(sample_pchtxt)

    assert output.meta.title == "Super Game"
    assert [c.build_id for c in output.collections] == [
        "3CA12DFAAF9C82DA064D1698DF79CDA1",
        "0011223344556677",
    ]

    nso, nro = output.collections
    assert nso.target_type is TargetType.NSO
    assert nro.target_type is TargetType.NRO

    fps, blur = nso.patches
    assert (fps.name, fps.author, fps.enabled, fps.type) == ("60 FPS", "Alice", True, PatchType.BINARY)
    assert fps.origin_line == 10
    assert [(c.offset, c.value) for c in fps.contents] == [
        (0xACCD, bytes.fromhex("1F2003D5")),
        (0xACD1, bytes.fromhex("20008052")),
    ]
    assert (blur.name, blur.author, blur.enabled, blur.type) == ("Disable Blur", "", False, PatchType.HEAP)
    assert blur.contents[0].offset == 0x110

    (coins,) = nro.patches
    assert coins.type is PatchType.AMS_CHEAT
    assert coins.name == "Infinite Coins"
    assert coins.contents[0].value == b"04000000 0012A4B0 0001869F"

    assert "L4: # Super Game 1.0.2" in log.lines
    assert "L15: patch read: 60 FPS" in log.lines
    assert "L18: patch read: Disable Blur" in log.lines
    assert "L21: AMS cheat read: Infinite Coins" in log.lines
    assert "L22: done parsing patches (reached tag @stop)" in log.lines
    assert "done parsing patches" not in log.lines


def test_every_patch_and_collection_is_non_empty() -> None:
    doc = (
        "@flag nsobid EMPTY\n"
        "@flag nsobid AAAA\n"
        "// nothing here\n"
        "@enabled\n"
        "// kept\n"
        "@enabled\n"
        "00000000 01\n"
        "@enabled\n"
    )
    output, _ = _parse(doc)

    assert [c.build_id for c in output.collections] == ["AAAA"]
    assert [p.name for p in output.collections[0].patches] == ["kept"]
    for collection in output.collections:
        assert collection.patches
        for patch in collection.patches:
            assert patch.contents


def test_collection_uses_most_recent_build_id() -> None:
    doc = (
        "@flag nsobid AAAA\n"
        "@enabled\n"
        "00 01\n"
        "@flag nrobid BBBB\n"
        "@enabled\n"
        "00 02\n"
        "@nsobid CCCC\n"
        "@enabled\n"
        "00 03\n"
    )
    output, _ = _parse(doc)

    assert [(c.build_id, c.target_type) for c in output.collections] == [
        ("AAAA", TargetType.NSO),
        ("BBBB", TargetType.NRO),
        ("CCCC", TargetType.NSO),
    ]
    assert [c.patches[0].contents[0].value for c in output.collections] == [b"\x01", b"\x02", b"\x03"]


def test_offset_shift_applies_to_later_offsets() -> None:
    doc = (
        "@flag nsobid AAAA\n"
        "@enabled\n"
        "00001000 00\n"
        "@flag offset_shift 0x100\n"
        "00001000 00\n"
        "@flag offset_shift -16\n"
        "00001000 00\n"
        "@flag offset_shift nonsense\n"
        "00001000 00\n"
    )
    output, log = _parse(doc)

    offsets = [c.offset for c in output.collections[0].patches[0].contents]
    assert offsets == [0x1000, 0x1100, 0x1000 - 16, 0x1000 - 16]
    assert "L8: WARNING ignored invalid offset shift: nonsense" in log.lines


def test_offset_shift_resets_with_new_collection() -> None:
    doc = (
        "@flag nsobid AAAA\n"
        "@flag offset_shift 0x10\n"
        "@enabled\n"
        "00 AA\n"
        "@flag nsobid BBBB\n"
        "@enabled\n"
        "00 BB\n"
    )
    output, _ = _parse(doc)

    assert [c.patches[0].contents[0].offset for c in output.collections] == [0x10, 0x00]


def test_endianness_flags() -> None:
    doc = (
        "@flag nsobid AAAA\n"
        "@enabled\n"
        "00 AABBCC\n"
        "@flag be\n"
        "04 AABBCC\n"
        "@flag le\n"
        "08 AABBCC\n"
    )
    output, _ = _parse(doc)

    values = [c.value for c in output.collections[0].patches[0].contents]
    assert values == [b"\xAA\xBB\xCC", b"\xCC\xBB\xAA", b"\xAA\xBB\xCC"]


def test_author_extraction_from_preceding_comment() -> None:
    doc = (
        "@flag nsobid AAAA\n"
        "// Super Patch [Alice]\n"
        "@enabled\n"
        "00 01\n"
        "// Super Patch\n"
        "@enabled\n"
        "00 01\n"
    )
    output, _ = _parse(doc)

    first, second = output.collections[0].patches
    assert (first.name, first.author) == ("Super Patch", "Alice")
    assert (second.name, second.author) == ("Super Patch", "")


def test_patch_without_build_id_is_fatal() -> None:
    output, log = _parse("@enabled\n00000000 00\n")

    assert output.collections == []
    assert log.lines[-1] == "L1: ERROR: missing build id, abort parsing"
    assert "done parsing patches" not in log.lines


def test_cheat_without_build_id_is_fatal() -> None:
    output, log = _parse("[My Cheat]\n04000000 00000000 00000000\n")

    assert output.collections == []
    assert "L1: ERROR: missing build id, abort parsing" in log.lines


def test_fatal_error_keeps_finalized_collections() -> None:
    doc = (
        "@flag nsobid AAAA\n"
        "@enabled\n"
        "00 01\n"
        "@flag nsobid\n"
        "@enabled\n"
        "00 02\n"
    )
    output, log = _parse(doc)

    assert [c.build_id for c in output.collections] == ["AAAA"]
    assert "L5: ERROR: missing build id, abort parsing" in log.lines


def test_legacy_nsobid_without_value_is_fatal() -> None:
    output, log = _parse("@nsobid\n@enabled\n00 01\n")

    assert output.collections == []
    assert "L1: ERROR: missing build id value for @nsobid, abort parsing" in log.lines


def test_legacy_nsobid_with_joined_build_id() -> None:
    output, log = _parse("@nsobid-ABCDEF01\n@enabled\n00 01\n@NSOBID 1234\n@enabled\n00 02\n")

    assert [(c.build_id, c.target_type) for c in output.collections] == [
        ("ABCDEF01", TargetType.NSO),
        ("1234", TargetType.NSO),
    ]
    assert not any("unrecognized tag" in line for line in log.lines)


def test_cheat_name_ignores_trailing_comment() -> None:
    doc = (
        "@flag nsobid AAAA\n"
        "[Foo] // see [x]\n"
        "04000000 00000000 00000000\n"
    )
    output, log = _parse(doc)

    assert output.collections[0].patches[0].name == "Foo"
    assert "L4: AMS cheat read: Foo" in log.lines


def test_ams_cheat_block_ends_at_blank_line() -> None:
    doc = (
        "@flag nsobid AAAA\n"
        "[My Cheat]\n"
        "04000000 00000000 00000000\n"
        "04000000 00000004 00000001\n"
        "\n"
        "04000000 00000008 00000002\n"
    )
    output, log = _parse(doc)

    (cheat,) = output.collections[0].patches
    assert cheat.type is PatchType.AMS_CHEAT
    assert cheat.name == "My Cheat"
    assert cheat.enabled is True
    assert [c.value for c in cheat.contents] == [
        b"04000000 00000000 00000000",
        b"04000000 00000004 00000001",
    ]
    assert all(c.offset == 0 for c in cheat.contents)
    assert "L5: AMS cheat read: My Cheat" in log.lines


def test_ams_cheat_block_ends_at_tag() -> None:
    doc = (
        "@flag nsobid AAAA\n"
        "[First]\n"
        "04000000 00000000 00000000\n"
        "@flag nsobid BBBB\n"
        "[Second]\n"
        "04000000 00000000 00000001\n"
    )
    output, log = _parse(doc)

    assert [c.build_id for c in output.collections] == ["AAAA", "BBBB"]
    assert "L4: WARNING: AMS cheat [First] ended because parsing reached a tag" in log.lines
    assert "L4: AMS cheat read: First" in log.lines
    assert "L7: AMS cheat read: Second" in log.lines


def test_patch_type_keywords() -> None:
    doc = (
        "@flag nsobid AAAA\n"
        "@enabled HEAP\n"
        "00 01\n"
        "@disabled ams\n"
        "580F0000 001C2AE8\n"
        "@enabled\n"
        "@heap\n"
        "00 02\n"
        "@enabled weird\n"
        "00 03\n"
    )
    output, log = _parse(doc)

    types = [p.type for p in output.collections[0].patches]
    assert types == [PatchType.HEAP, PatchType.AMS_CHEAT, PatchType.HEAP, PatchType.BINARY]
    assert output.collections[0].patches[1].contents[0].value == b"580F0000 001C2AE8"
    assert "L9: WARNING ignored unrecognized patch type: weird" in log.lines


def test_directives_are_case_insensitive() -> None:
    output, _ = _parse("@FLAG NsoBid AbCd\n@Enabled\n00 ff\n")

    assert output.collections[0].build_id == "AbCd"
    assert output.collections[0].patches[0].contents[0].value == b"\xff"


def test_unrecognized_tags_and_flags_warn() -> None:
    doc = "@title Ignored Here\n@foo bar\n@flag sideways 1\n"
    output, log = _parse(doc)

    assert output.collections == []
    assert "L2: WARNING ignored unrecognized tag: @foo" in log.lines
    assert "L3: WARNING ignored unrecognized flag type: sideways" in log.lines
    assert not any("@title" in line and "WARNING" in line for line in log.lines)


def test_invalid_content_lines_are_skipped() -> None:
    doc = (
        "@flag nsobid AAAA\n"
        "@enabled\n"
        "00001000 ABC\n"
        "00001000 GG\n"
        "zz 00\n"
        "00001000\n"
        "00001004 \"text\"\n"
        "00001008 DE AD // spaced\n"
    )
    output, log = _parse(doc)

    contents = output.collections[0].patches[0].contents
    assert [(c.offset, c.value) for c in contents] == [(0x1004, b"text"), (0x1008, b"\xDE\xAD")]
    warnings = [line for line in log.lines if "WARNING ignored invalid patch content" in line]
    assert [line.split(":")[0] for line in warnings] == ["L3", "L4", "L5", "L6"]


def test_content_ignored_while_not_accepting() -> None:
    output, log = _parse("@flag nsobid AAAA\n00001000 00\n")

    assert output.collections == []
    assert not any("WARNING" in line for line in log.lines)


def test_debug_info_flag_enables_verbose_transcript() -> None:
    doc = (
        "@flag print_values\n"
        "@flag nsobid AAAA\n"
        "// Named\n"
        "@enabled\n"
        "00001000 AABB\n"
    )
    output, log = _parse(doc)

    assert output.collections[0].patches[0].name == "Named"
    assert "L1: additional debug info enabled" in log.lines
    assert "L2: parsing started for AAAA" in log.lines
    assert "L4: parsing patch: Named" in log.lines
    assert "L5: 00001000: AABB" in log.lines
    assert "L6: parsing completed for AAAA" in log.lines


def test_stop_finalizes_pending_patch() -> None:
    doc = "@flag nsobid AAAA\n@enabled\n00 01\n@stop\n@enabled\n00 02\n"
    output, log = _parse(doc)

    assert len(output.collections[0].patches) == 1
    assert "L5: patch read: " in log.lines


def test_decode_hex_value() -> None:
    assert decode_hex_value("AABBCC") == b"\xAA\xBB\xCC"
    assert decode_hex_value("AABBCC", big_endian=True) == b"\xCC\xBB\xAA"
    with pytest.raises(ValueError):
        decode_hex_value("ABC")
    with pytest.raises(ValueError):
        decode_hex_value("")


def test_decode_content_line_errors_carry_line_number() -> None:
    assert decode_content_line("", 3) is None

    with pytest.raises(ContentDecodeError) as excinfo:
        decode_content_line("00000010 00", 7, offset_shift=-0x20)

    assert excinfo.value.line_no == 7
    assert excinfo.value.error_code == "CONTENT_DECODE_ERROR"
    assert "out of range" in str(excinfo.value)
