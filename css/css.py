from css.lfsr import LFSR, REGISTER_A, REGISTER_B, reverse_bits

"""

Dieses Programm beinhaltet die Stromchiffre CSS, welche aus zwei linearen
Schieberegistern (17 und 25 Bit) besteht, deren Ausgabebytes mit Übertrag
addiert werden. Der Schlüssel ist 5 Bytes lang: die ersten zwei Bytes
initialisieren Register A, die letzten drei Bytes Register B.

Nach der Initialisierung werden die Register "aufgewärmt": Register A gibt
ein Byte, Register B zwei Bytes aus, welche verworfen werden.

"""

KEY_LENGTH = 5
WARM_UP_A = 1
WARM_UP_B = 2


def register_a_state(k0, k1):
    """
    Zustand von Register A: gespiegeltes k0 in den oberen 8 Bits,
    eine feste 1 an Position 8 und gespiegeltes k1 in den unteren 8 Bits.
    """
    return (reverse_bits(k0) << 9) | (1 << 8) | reverse_bits(k1)


def register_b_state(k2, k3, k4):
    """
    Zustand von Register B: eine feste 1 an Position 21, um welche
    die gespiegelten Bytes k2, k3 und k4 angeordnet werden.

    [_|__1_____|__k3____|__k4____]
     \\ MSB                       \\ LSB
    """
    r2 = reverse_bits(k2)
    return (((r2 & 0xE0) << 17)
            | (1 << 21)
            | ((r2 & 0x1F) << 16)
            | (reverse_bits(k3) << 8)
            | reverse_bits(k4))


def warm_up(lfsr, emissions):
    for _ in range(emissions):
        lfsr.emit_byte()
    return lfsr


class CSS:
    def __init__(self, key):
        """
        Initialisiert beide Register aus dem Schlüssel und führt
        die Aufwärmphase durch.
        """
        if len(key) != KEY_LENGTH:
            raise ValueError(f"key must be {KEY_LENGTH} bytes, got {len(key)}")
        self.lfsr_a = LFSR(int(register_a_state(key[0], key[1])), REGISTER_A)
        self.lfsr_b = LFSR(int(register_b_state(key[2], key[3], key[4])), REGISTER_B)
        warm_up(self.lfsr_a, WARM_UP_A)
        warm_up(self.lfsr_b, WARM_UP_B)
        self.carry = False

    @classmethod
    def from_registers(cls, lfsr_a, lfsr_b, carry):
        """
        Setzt die Chiffre mit bereits getakteten Registern und
        Übertrag fort, ohne Initialisierung und Aufwärmphase.
        """
        css = cls.__new__(cls)
        css.lfsr_a = lfsr_a
        css.lfsr_b = lfsr_b
        css.carry = carry
        return css

    def produce_byte(self):
        """
        Gibt das nächste Byte des Schlüsselstroms aus. Der neue Übertrag
        hängt nur von x + y ab, nicht vom eingehenden Übertrag.
        """
        x = self.lfsr_a.emit_byte()
        y = self.lfsr_b.emit_byte()
        output = (x + y + self.carry) & 0xFF
        self.carry = x + y > 0xFF
        return output

    def keystream(self, num_bytes):
        return bytes(self.produce_byte() for _ in range(num_bytes))

    def encrypt(self, data):
        """
        Verknüpft die Daten mit dem Schlüsselstrom (XOR). Die
        Entschlüsselung ist dieselbe Operation.
        """
        return bytes(b ^ k for b, k in zip(data, self.keystream(len(data))))

    decrypt = encrypt

    def __iter__(self):
        return self

    def __next__(self):
        return self.produce_byte()
