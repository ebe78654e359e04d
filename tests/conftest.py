import pytest


SEQ_SECTION = """<seq>
>seqA
MKV
>seqB
MKL
>seqC
MRV
>seqD
MKK
>seqE
MAV
</seq>
"""

GROUP_SECTION = """<seqgroups>
name=Homo|sapiens
type=0
color=255;0;0;255
numbers=1;3;
</seqgroups>
"""

POS_SECTION = """<pos>
0 0.0 0.0 0.0
1 2.0 0.0 0.0
2 4.0 0.0 0.0
3 4.0 0.0 0.0
4 2.0 6.0 0.0
</pos>
"""

HEADER = """sequences=5
<param>
maxmove=0.1
</param>
"""


@pytest.fixture
def clans_text():
    return HEADER + SEQ_SECTION + GROUP_SECTION + POS_SECTION


@pytest.fixture
def clans_sections():
    return {'seq': SEQ_SECTION, 'groups': GROUP_SECTION, 'pos': POS_SECTION, 'header': HEADER}


@pytest.fixture
def pipeline_clans(tmp_path):
    text = """sequences=6
<seq>
s0
s1
s2
s3
s4
s5
</seq>
<seqgroups>
name=A
numbers=0;1;
name=B
numbers=2;3;
name=C
numbers=4
</seqgroups>
<pos>
0 0 0 0
1 2 0 0
2 10 0 0
3 12 0 0
4 0 5 0
5 30 30 0
</pos>
<hsp>
0 1:1e-10
</hsp>
"""
    p = tmp_path / "groups.clans"
    p.write_text(text, encoding="utf-8")
    return p


@pytest.fixture
def pairs_tsv(tmp_path):
    p = tmp_path / "rmsd.tsv"
    p.write_text(
        "name1\tname2\tvalue\n"
        "a\tb\t1.0\n"
        "a\tc\t4.0\n"
        "a\td\t5.0\n"
        "b\tc\t4.5\n"
        "b\td\t5.5\n"
        "c\td\t2.0\n"
    )
    return p
