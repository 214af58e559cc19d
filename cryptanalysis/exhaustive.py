from multiprocessing import Pool
from css.css import CSS
from cryptanalysis.framework import KEY_SPACE, index_from_key, key_from_index

"""

Dieses Programm beinhaltet die naive Brute-Force-Suche über den gesamten
Schlüsselraum von 2^40 Schlüsseln. Sie dient nur als Referenz für die
Korrektheit und Komplexität des algebraischen Angriffs und ist für den
vollen Schlüsselraum nicht praktikabel.

Die Suche kann auf mehrere Prozesse verteilt werden. Jeder Prozess durchsucht
eine eigene Restklasse des Schlüsselraums und gibt seinen ersten Treffer
oder None zurück.

"""


def _scan_residue_class(args):
    """
    Durchsucht die Schlüssel key_space[worker::num_workers] und gibt den
    ersten Schlüssel zurück, dessen Schlüsselstrom mit dem gegebenen
    übereinstimmt.
    """
    keystream, worker, num_workers, key_space = args
    for index in key_space[worker::num_workers]:
        key = key_from_index(index)
        if all(a == b for a, b in zip(keystream, CSS(key))):
            return key
    return None


class ExhaustiveSearch:
    def __init__(self, keystream, num_workers: int = 1, key_space=KEY_SPACE):
        """
        Initialisiert die Brute-Force-Suche.

        Args:
            keystream: bekannter Anfang des Schlüsselstroms
            num_workers: Anzahl paralleler Prozesse
            key_space: zu durchsuchende Schlüsselindizes (range)
        """
        if num_workers < 1:
            raise ValueError("num_workers must be at least 1")
        self.keystream = bytes(keystream)
        self.num_workers = num_workers
        self.key_space = key_space

    def search(self, show_results=False):
        """
        Führt die Suche durch und gibt den Schlüssel mit kleinstem Index
        unter allen Treffern der Prozesse zurück, oder None.
        """
        args = [(self.keystream, worker, self.num_workers, self.key_space)
                for worker in range(self.num_workers)]

        if self.num_workers == 1:
            results = [_scan_residue_class(args[0])]
        else:
            with Pool(processes=self.num_workers) as pool:
                results = pool.map(_scan_residue_class, args)

        found = [key for key in results if key is not None]
        if not found:
            if show_results:
                print("Kein Schlüssel gefunden.")
            return None

        key = min(found, key=index_from_key)
        if show_results:
            print(f"Found key {key.hex(' ').upper()} with {self.num_workers} worker(s)")
        return key
