import pytest

from romstatus.common.exceptions import DATParseError
from romstatus.dats.parser import parse_dat_file

# Sample XML DAT content
XML_DAT_CONTENT = """<?xml version="1.0"?>
<datafile>
    <header>
        <name>Nintendo - GameCube</name>
        <description>Nintendo - GameCube (Redump)</description>
        <version>20231224</version>
    </header>
    <game name="Luigi's Mansion (USA)">
        <description>Luigi's Mansion (USA)</description>
        <rom name="Luigi's Mansion (USA).iso" size="1459978240" crc="12345678" md5="AABBCCDDEEFF00112233445566778899" sha1="11223344556677889900aabbccddeeff00112233"/>
    </game>
    <game name="Super Mario Sunshine (USA)" cloneof="Super Mario Sunshine (Japan)">
        <rom name="Super Mario Sunshine (USA).iso" size="1459978240" crc="87654321" md5="99887766554433221100ffeeddccbbaa" sha1="33221100ffeeddccbbaa00998877665544332211"/>
    </game>
</datafile>
"""

# Sample ClrMamePro DAT content
CLRMAMEPRO_DAT_CONTENT = """
clrmamepro (
	name "Nintendo - GameCube"
	description "Nintendo - GameCube (Redump)"
	version "20231224"
)

game (
	name "Luigi's Mansion (USA)"
	description "Luigi's Mansion (USA)"
	rom ( name "Luigi's Mansion (USA).iso" size 1459978240 crc 12345678 md5 AABBCCDDEEFF00112233445566778899 sha1 11223344556677889900aabbccddeeff00112233 )
)

game (
	name "Super Mario Sunshine (USA)"
	cloneof "Super Mario Sunshine (Japan)"
	rom ( name "Super Mario Sunshine (USA).iso" size 1459978240 crc 87654321 md5 99887766554433221100ffeeddccbbaa sha1 33221100ffeeddccbbaa00998877665544332211 )
)
"""


@pytest.mark.parametrize("dat_content", [XML_DAT_CONTENT, CLRMAMEPRO_DAT_CONTENT])
def test_parse_dat_file(tmp_path, dat_content):
    d = tmp_path / "temp.dat"
    d.write_text(dat_content, encoding="utf-8")

    dat = parse_dat_file(d)

    assert dat.name == "Nintendo - GameCube"
    assert dat.description == "Nintendo - GameCube (Redump)"
    assert dat.header.version == "20231224"
    assert [g.name for g in dat.games] == [
        "Luigi's Mansion (USA)",
        "Super Mario Sunshine (USA)",
    ]

    luigi, mario = dat.games
    assert len(luigi.roms) == 1
    assert luigi.roms[0].name == "Luigi's Mansion (USA).iso"
    assert luigi.roms[0].size == 1459978240
    assert luigi.roms[0].crc32 == "12345678"
    # Hashes are normalised to lower case
    assert luigi.roms[0].md5 == "aabbccddeeff00112233445566778899"
    assert luigi.roms[0].hash_code() == "11223344556677889900aabbccddeeff00112233"

    assert mario.cloneof == "Super Mario Sunshine (Japan)"
    # Missing description falls back to the game name
    assert mario.description == "Super Mario Sunshine (USA)"


def test_parse_xml_flags_and_machines(tmp_path):
    d = tmp_path / "mame.dat"
    d.write_text(
        """<?xml version="1.0"?>
<datafile>
    <header><name>MAME</name></header>
    <machine name="neogeo" isbios="yes">
        <rom name="sp-s2.sp1" size="131072" crc="9036d879" status="baddump"/>
    </machine>
    <machine name="z80" isdevice="yes"/>
    <machine name="mslug" romof="neogeo">
        <rom name="201-p1.p1" size="2097152" crc="08d8daa5"/>
    </machine>
</datafile>
""",
        encoding="utf-8",
    )

    dat = parse_dat_file(d)
    games = {g.name: g for g in dat.games}

    assert games["neogeo"].is_bios()
    assert games["neogeo"].roms[0].status == "baddump"
    assert games["z80"].is_device()
    assert games["z80"].roms == ()
    assert games["mslug"].romof == "neogeo"
    assert not games["mslug"].is_bios()


def test_clrmamepro_title_with_keyword_in_quotes(tmp_path):
    d = tmp_path / "tricky.dat"
    d.write_text(
        """clrmamepro (
	name "Tricky"
)

game (
	name "The game (of life)"
	rom ( name "life.bin" size 16 crc DEADBEEF flags verified )
	rom ( name "life (extra).bin" size 32 crc 0badf00d )
)

resource (
	name "Shared"
	rom ( name "shared.bin" size 8 crc 00000001 )
)
""",
        encoding="utf-8",
    )

    dat = parse_dat_file(d)

    assert [g.name for g in dat.games] == ["The game (of life)", "Shared"]
    life = dat.games[0]
    assert [r.name for r in life.roms] == ["life.bin", "life (extra).bin"]
    assert life.roms[0].crc32 == "deadbeef"
    assert life.roms[0].status == "verified"
    assert life.roms[1].size == 32


def test_parse_text_without_blocks_is_empty(tmp_path):
    d = tmp_path / "invalid.dat"
    d.write_text("Not a valid DAT file", encoding="utf-8")

    dat = parse_dat_file(d)

    assert dat.games == ()
    assert dat.name == ""


def test_parse_broken_xml_raises(tmp_path):
    d = tmp_path / "broken.dat"
    d.write_text('<?xml version="1.0"?>\n<datafile><game name="x">', encoding="utf-8")

    with pytest.raises(DATParseError) as exc_info:
        parse_dat_file(d)

    assert exc_info.value.path == str(d)


def test_parse_missing_file_raises(tmp_path):
    with pytest.raises(DATParseError):
        parse_dat_file(tmp_path / "nope.dat")
