from collections import namedtuple
import numpy as np

"""

Dieses Modul beinhaltet das lineare Schieberegister (LFSR), aus welchem
die Chiffre zusammengesetzt wird. Die Rückkopplung wird nicht als Funktion,
sondern als Menge von Bitpositionen (Taps) beschrieben, welche miteinander
XOR-verknüpft werden.

Der Zustand kann ein einzelner Integer oder ein numpy-Array von Zuständen
sein. Im zweiten Fall werden alle Zustände gleichzeitig getaktet, was die
Kryptanalyse für das Durchsuchen ganzer Kandidatenräume verwendet.

"""

RegisterSpec = namedtuple('RegisterSpec', ['width', 'taps'])

REGISTER_A = RegisterSpec(width=17, taps=(0, 14))
REGISTER_B = RegisterSpec(width=25, taps=(0, 3, 4, 12))

REVERSED_BYTES = np.array([int(f'{b:08b}'[::-1], 2) for b in range(256)], dtype=np.uint32)


def reverse_bits(byte):
    """
    Spiegelt die Bitreihenfolge eines Bytes (oder eines Arrays von Bytes).
    """
    return REVERSED_BYTES[byte]


class LFSR:
    def __init__(self, state, spec: RegisterSpec):
        """
        Initialisiert das Register mit einem Startzustand und der
        Beschreibung (Breite und Taps) des Registers.
        """
        for tap in spec.taps:
            if not 0 <= tap < spec.width:
                raise ValueError(f"tap {tap} outside of a {spec.width}-bit register")
        self.state = state
        self.spec = spec
        self.width = spec.width
        self.taps = spec.taps

    def _feedback(self, state):
        """
        Berechnet das Rückkopplungsbit aus dem Zustand vor dem Schieben.
        """
        bit = 0
        for tap in self.taps:
            bit = bit ^ ((state >> tap) & 1)
        assert np.all(bit <= 1), "feedback bit must be 0 or 1"
        return bit

    def emit_byte(self):
        """
        Führt acht Schiebeschritte durch. Das jeweils niederwertigste Bit
        des Zustands wird ausgegeben und MSB zuerst zu einem Byte zusammen-
        gesetzt, das Rückkopplungsbit wird an Position width - 1 eingefügt.
        """
        output = 0
        for _ in range(8):
            output = (output << 1) | (self.state & 1)
            bit = self._feedback(self.state)
            self.state = (self.state >> 1) | (bit << (self.width - 1))
        return output
