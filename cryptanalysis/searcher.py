from z3 import *
from functools import reduce
from css.css import WARM_UP_B
from css.lfsr import REGISTER_B

"""

Der Zweck dieses Programmes ist das symbolische Lösen der zweiten Angriffs-
stufe. Anstatt alle 2^24 Werte der letzten drei Schlüsselbytes zu testen,
wird die Initialisierung und Aufwärmphase von Register B dem Z3 Solver von
Microsoft Research als Gleichungssystem über Bitvektoren übergeben.

Da die Rückkopplung nur aus Taps besteht, ist das System linear und wird
sofort gelöst.

"""


class RemainderSearcher:
    """
    Diese Klasse sucht die letzten drei Schlüsselbytes, welche Register B
    nach der Aufwärmphase in einen gegebenen Zustand versetzen.
    """
    def __init__(self, target_state: int, warm_up: int = WARM_UP_B):
        """
        Initialisiert den RemainderSearcher.

        Args:
            target_state: rekonstruierter Zustand von Register B
            warm_up: Anzahl verworfener Ausgabebytes nach der Initialisierung
        """
        self.target_state = target_state
        self.warm_up = warm_up
        self.spec = REGISTER_B

        self.solver = Solver()
        self._define_variables()
        self._add_constraints()

    def _define_variables(self):
        """
        Definiert Z3-Variablen:
        key_bytes: je ein 8-Bit-Vektor für die Schlüsselbytes 2, 3 und 4.
        """
        self.key_bytes = [BitVec(f"key_{i}", 8) for i in (2, 3, 4)]

    def _reverse(self, byte):
        """
        Spiegelt die Bits eines symbolischen Bytes und erweitert es auf 32 Bit.
        """
        return ZeroExt(24, Concat(*[Extract(i, i, byte) for i in range(8)]))

    def _add_constraints(self):
        """
        Baut den Startzustand von Register B symbolisch auf, taktet ihn
        durch die Aufwärmphase und fordert Gleichheit mit dem Zielzustand.
        """
        r2, r3, r4 = [self._reverse(b) for b in self.key_bytes]
        state = ((r2 & 0xE0) << 17) | (1 << 21) | ((r2 & 0x1F) << 16) | (r3 << 8) | r4

        for _ in range(8 * self.warm_up):
            bit = reduce(lambda x, y: x ^ y, [Extract(tap, tap, state) for tap in self.spec.taps])
            state = LShR(state, 1) | (ZeroExt(31, bit) << (self.spec.width - 1))

        self.solver.add(state == self.target_state)

    def search_remainders(self, num_solutions=1, show_results=False):
        """
        Sucht bis zu num_solutions verschiedene Lösungen und gibt sie als
        Liste von 3-Byte-Werten zurück. Jede gefundene Lösung wird danach
        ausgeschlossen, sodass eine leere zweite Suche die Eindeutigkeit zeigt.

        Args:
            num_solutions: Anzahl gewünschter Lösungen
            show_results: optional können Zwischenergebnisse gezeigt werden
        """
        results = []

        for _ in range(num_solutions):
            if self.solver.check() != sat:
                if show_results:
                    print("Keine weitere Lösung für den Zustand gefunden.")
                break

            model = self.solver.model()
            values = [model.evaluate(b, model_completion=True).as_long() for b in self.key_bytes]
            results.append(bytes(values))

            self.solver.add(Or(*[b != v for b, v in zip(self.key_bytes, values)]))

            if show_results:
                print(f"[{len(results)}] last 3 key bytes: {bytes(values).hex(' ').upper()}")

        return results
