import pytest
from css.css import CSS, register_a_state, register_b_state

KEY = bytes([0xDE, 0xAD, 0xBE, 0x04, 0x00])
FIRST_8_BYTES = bytes([0xAE, 0x56, 0xB6, 0x35, 0xC3, 0x3A, 0xB1, 0x04])


class FixedOutput:
    def __init__(self, outputs):
        self.outputs = list(outputs)

    def emit_byte(self):
        return self.outputs.pop(0)


def test_fixed_key_regression_vector():
    assert CSS(KEY).keystream(8) == FIRST_8_BYTES


def test_register_initial_states():
    assert register_a_state(0xDE, 0xAD) == 0xF7B5
    assert register_b_state(0xBE, 0x04, 0x00) == 0xFD2000


def test_register_b_state_after_warm_up():
    assert CSS(KEY).lfsr_b.state == 0x33A4FD


def test_iteration_continues_keystream():
    cipher = CSS(KEY)
    assert bytes(next(cipher) for _ in range(4)) == FIRST_8_BYTES[:4]
    assert cipher.keystream(4) == FIRST_8_BYTES[4:]


def test_carry_ignores_incoming_carry():
    cipher = CSS.from_registers(FixedOutput([0xFF, 0xFF, 0x00]), FixedOutput([0x01, 0x00, 0x00]), False)
    # 0xFF + 0x01 läuft über
    assert cipher.produce_byte() == 0x00
    assert cipher.carry
    # 0xFF + 0x00 + 1 ergibt 0, aber kein neuer Übertrag
    assert cipher.produce_byte() == 0x00
    assert not cipher.carry
    assert cipher.produce_byte() == 0x00


def test_from_registers_resumes_cipher():
    reference = CSS(KEY)
    reference.keystream(3)
    cipher = CSS(KEY)
    cipher.keystream(3)
    resumed = CSS.from_registers(cipher.lfsr_a, cipher.lfsr_b, cipher.carry)
    assert resumed.keystream(32) == reference.keystream(32)


def test_encrypt_decrypt():
    plaintext = b"known plaintext attack on a stream cipher"
    ciphertext = CSS(KEY).encrypt(plaintext)
    assert ciphertext != plaintext
    assert ciphertext[:8] == bytes(p ^ k for p, k in zip(plaintext, FIRST_8_BYTES))
    assert CSS(KEY).decrypt(ciphertext) == plaintext


@pytest.mark.parametrize("key", [b"", b"\x00" * 4, b"\x00" * 6])
def test_key_length(key):
    with pytest.raises(ValueError):
        CSS(key)
