from collections import namedtuple
import numpy as np
from css.css import CSS, WARM_UP_A, WARM_UP_B, register_a_state, register_b_state, warm_up
from css.lfsr import LFSR, REGISTER_A, REGISTER_B, reverse_bits
from cryptanalysis.framework import (
    MIN_KEYSTREAM_LENGTH, PREFIX_CANDIDATES, REMAINDER_SPACE, key_from_index, sub_with_borrow,
)

"""

Dieses Modul implementiert den Known-Plaintext-Angriff auf CSS in zwei Stufen.

In der ersten Stufe werden alle 2^16 möglichen Werte der ersten zwei
Schlüsselbytes getestet. Diese bestimmen Register A vollständig, sodass die
Ausgabe von Register B aus dem Schlüsselstrom zurückgerechnet und daraus
dessen Zustand direkt rekonstruiert werden kann. In der zweiten Stufe wird
derjenige Rest des Schlüssels (3 Bytes) gesucht, welcher Register B nach der
Aufwärmphase in genau diesen Zustand versetzt.

Beide Stufen testen alle Kandidaten gleichzeitig mit numpy-Arrays.

"""

PrefixResult = namedtuple('PrefixResult', ['prefix', 'register_b_state', 'candidates'])
KeyRecovery = namedtuple('KeyRecovery', ['key', 'prefix', 'register_b_state'])


def pack_register_b(ys):
    """
    Setzt den Zustand von Register B aus den Ausgaben y1, y2, y3 und
    dem ersten Ausgabebit von y4 zusammen. Da das Register LSB zuerst
    ausgibt, ist jedes gespiegelte Ausgabebyte ein Abschnitt des Zustands.
    """
    y1, y2, y3, y4 = ys
    return (reverse_bits(y1)
            | (reverse_bits(y2) << 8)
            | (reverse_bits(y3) << 16)
            | ((reverse_bits(y4) & 1) << 24))


class Cryptanalysis:
    def __init__(self, keystream, prefix_candidates=PREFIX_CANDIDATES, chunk_size: int = 1 << 20):
        """
        Initialisiert die Kryptoanalyse mit dem bekannten Schlüsselstrom.

        Args:
            keystream: bekannter Anfang des Schlüsselstroms (mindestens 5 Bytes)
            prefix_candidates: zu testende Werte für die ersten zwei Schlüsselbytes
            chunk_size: Anzahl gleichzeitig getesteter Kandidaten der zweiten Stufe
        """
        keystream = bytes(keystream)
        if len(keystream) < MIN_KEYSTREAM_LENGTH:
            raise ValueError(f"keystream must be at least {MIN_KEYSTREAM_LENGTH} bytes, got {len(keystream)}")
        if chunk_size <= 0:
            raise ValueError("chunk_size must be positive")
        self.keystream = keystream
        self.prefix_candidates = prefix_candidates
        self.chunk_size = chunk_size

    def _invert_combiner(self, xs):
        """
        Rechnet die Ausgaben y1..y4 von Register B aus dem Schlüsselstrom
        und den Ausgaben x1..x4 von Register A zurück.

        y wird per Subtraktion mit Borrow bestimmt. Der Übertrag für das
        nächste Byte ergibt sich danach aus x + y > 255, wie bei der
        Chiffre selbst; das Borrow weicht davon ab, falls x + y = 255 und
        der eingehende Übertrag gesetzt ist.
        """
        ys = []
        carry = np.zeros(len(xs[0]), dtype=bool)
        for output, x in zip(self.keystream, xs):
            y, _ = sub_with_borrow(output, x, carry)
            carry = x + y > 0xFF
            ys.append(y)
        return ys, carry

    def recover_prefix(self, show_results=False):
        """
        Diese Methode ist der Kern der Analyse. Für jeden Kandidaten der
        ersten zwei Schlüsselbytes wird Register A aufgebaut und aufgewärmt,
        vier Bytes x1..x4 werden erzeugt und die Addition mit Übertrag
        invertiert. Aus y1..y4 wird der Zustand von Register B gepackt und
        die Chiffre mit diesem Zustand fortgesetzt. Kandidaten, deren
        Ausgabe von der Fortsetzung des Schlüsselstroms abweicht, werden
        verworfen.

        Zurückgegeben wird der Kandidat mit kleinstem Index als PrefixResult
        (zwei Schlüsselbytes und Zustand von Register B) oder None.

        Args:
            show_results: optionale Ausgabe des Resultats
        """
        prefixes = np.asarray(self.prefix_candidates, dtype=np.uint32)
        if len(prefixes) == 0:
            return None

        lfsr_a = LFSR(register_a_state(prefixes & 0xFF, prefixes >> 8), REGISTER_A)
        warm_up(lfsr_a, WARM_UP_A)
        xs = [lfsr_a.emit_byte() for _ in range(4)]

        ys, carry = self._invert_combiner(xs)
        state_b = pack_register_b(ys)

        lfsr_b = LFSR(state_b, REGISTER_B)
        for y in ys[:3]:
            assert np.array_equal(lfsr_b.emit_byte(), y), "register B does not re-emit its packed output"
        lfsr_b.emit_byte()

        index = np.arange(len(prefixes))
        cipher = CSS.from_registers(lfsr_a, lfsr_b, carry)
        for expected in self.keystream[4:]:
            match = cipher.produce_byte() == expected
            if not match.all():
                index = index[match]
                lfsr_a.state = lfsr_a.state[match]
                lfsr_b.state = lfsr_b.state[match]
                cipher.carry = cipher.carry[match]
            if len(index) == 0:
                if show_results:
                    print("Keine passenden ersten zwei Schlüsselbytes gefunden.")
                return None

        best = index[0]
        prefix = key_from_index(int(prefixes[best]), 2)
        result = PrefixResult(prefix, int(state_b[best]), len(prefixes))

        if show_results:
            print(f"first 2 key bytes: {prefix.hex(' ').upper()}, register B state: {result.register_b_state:07x}")
        return result

    def matching_remainders(self, target_state):
        """
        Durchsucht alle 2^24 Werte der letzten drei Schlüsselbytes in
        Blöcken von chunk_size und gibt jeden Wert zurück, für welchen
        Register B nach der Aufwärmphase den Zustand target_state hat.
        """
        stop = len(REMAINDER_SPACE)
        for start in range(0, stop, self.chunk_size):
            values = np.arange(start, min(start + self.chunk_size, stop), dtype=np.uint32)
            lfsr_b = LFSR(register_b_state(values & 0xFF, (values >> 8) & 0xFF, values >> 16), REGISTER_B)
            warm_up(lfsr_b, WARM_UP_B)
            for value in values[lfsr_b.state == target_state]:
                yield key_from_index(int(value), 3)

    def recover_remainder(self, target_state, show_results=False):
        """
        Sucht die letzten drei Schlüsselbytes zum rekonstruierten Zustand
        von Register B. Falls keiner existiert, wird None zurückgegeben.
        """
        for remainder in self.matching_remainders(target_state):
            if show_results:
                print(f"last 3 key bytes: {remainder.hex(' ').upper()}")
            return remainder
        if show_results:
            print("Keine passenden letzten drei Schlüsselbytes gefunden.")
        return None

    def find_key(self, show_results=False):
        """
        Führt beide Stufen nacheinander aus und setzt den Schlüssel aus
        den ersten zwei und den letzten drei Bytes zusammen.
        """
        found = self.recover_prefix(show_results)
        if found is None:
            return None
        remainder = self.recover_remainder(found.register_b_state, show_results)
        if remainder is None:
            return None
        return KeyRecovery(found.prefix + remainder, found.prefix, found.register_b_state)
