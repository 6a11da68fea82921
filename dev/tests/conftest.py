from __future__ import annotations

import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[2]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))


SAMPLE_PCHTXT = """\
@title "Super Game"
@program 0100000000010000
@url "https://example.invalid/super_game.pchtxt"
# Super Game 1.0.2

@flag nsobid 3CA12DFAAF9C82DA064D1698DF79CDA1
@flag offset_shift 0x100

// 60 FPS [Alice]
@enabled
0000ABCD 1F2003D5
0000ABD1 20008052

// Disable Blur
@disabled heap
00000010 FFFF

@flag nrobid 0011223344556677
[Infinite Coins]
04000000 0012A4B0 0001869F

@stop
// never read [Nobody]
@enabled
00000000 00
"""


@pytest.fixture
def sample_pchtxt() -> str:
    return SAMPLE_PCHTXT
