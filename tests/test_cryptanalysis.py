import random
import pytest
from css.css import CSS
from cryptanalysis.cryptanalysis import Cryptanalysis, pack_register_b
from cryptanalysis.framework import FrameworkProvider, LEGACY_PREFIX_CANDIDATES

KEY = bytes([0xDE, 0xAD, 0xBE, 0x04, 0x00])
# x + y = 255 mit gesetztem Übertrag in den ersten vier Bytes
CARRY_EDGE_KEY = bytes([0x00, 0x00, 0xFB, 0x02, 0x00])
TOP_PREFIX_KEY = bytes([0xFF, 0xFF, 0x12, 0x34, 0x56])

_rng = random.Random(2024)
RANDOM_KEYS = [bytes(_rng.randint(0, 0xFF) for _ in range(5)) for _ in range(2)]


@pytest.mark.parametrize("key", [KEY, CARRY_EDGE_KEY, TOP_PREFIX_KEY] + RANDOM_KEYS)
def test_find_key(key):
    keystream = FrameworkProvider(key).generate_keystream(64)
    recovered = Cryptanalysis(keystream).find_key()
    assert recovered is not None
    assert recovered.key == key
    assert recovered.prefix == key[:2]


def test_recover_prefix_reconstructs_register_b():
    found = Cryptanalysis(CSS(KEY).keystream(64)).recover_prefix()
    assert found.prefix == KEY[:2]
    assert found.register_b_state == 0x33A4FD
    assert found.register_b_state == CSS(KEY).lfsr_b.state
    assert found.candidates == 0x10000


def test_pack_register_b():
    cipher = CSS(KEY)
    state = cipher.lfsr_b.state
    ys = [cipher.lfsr_b.emit_byte() for _ in range(4)]
    assert pack_register_b(ys) == state


def test_legacy_candidate_range_misses_top_prefix():
    keystream = CSS(TOP_PREFIX_KEY).keystream(64)
    assert Cryptanalysis(keystream, prefix_candidates=LEGACY_PREFIX_CANDIDATES).recover_prefix() is None
    assert Cryptanalysis(keystream).recover_prefix().prefix == b"\xff\xff"


def test_legacy_candidate_range_finds_other_prefixes():
    keystream = CSS(KEY).keystream(64)
    found = Cryptanalysis(keystream, prefix_candidates=LEGACY_PREFIX_CANDIDATES).recover_prefix()
    assert found.prefix == KEY[:2]


def test_restricted_candidates_without_match():
    keystream = CSS(KEY).keystream(64)
    assert Cryptanalysis(keystream, prefix_candidates=range(0x100)).recover_prefix() is None
    assert Cryptanalysis(keystream, prefix_candidates=range(0)).find_key() is None


def test_remainder_is_unique():
    for key in [KEY] + RANDOM_KEYS:
        state = CSS(key).lfsr_b.state
        assert list(Cryptanalysis(CSS(key).keystream(8)).matching_remainders(state)) == [key[2:]]


def test_unreachable_state_is_not_found():
    attack = Cryptanalysis(CSS(KEY).keystream(8), chunk_size=1 << 22)
    assert attack.recover_remainder(0) is None


def test_keystream_too_short():
    with pytest.raises(ValueError):
        Cryptanalysis(CSS(KEY).keystream(4))


def test_invalid_chunk_size():
    with pytest.raises(ValueError):
        Cryptanalysis(CSS(KEY).keystream(8), chunk_size=0)
