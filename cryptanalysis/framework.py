import random
from css.css import CSS, KEY_LENGTH

"""

Dieses Programm beinhaltet die Klasse FrameworkProvider, welche die nötigen
Informationen und Ressourcen für die spätere Kryptoanalyse bereitstellt,
sowie die arithmetischen Hilfsfunktionen (Addition mit Übertrag und
Subtraktion mit Borrow) und die Kandidatenräume der Angriffe.

"""

MIN_KEYSTREAM_LENGTH = 5

PREFIX_CANDIDATES = range(0x10000)
# Grenze der Referenzimplementierung, 0xFFFF wird dort nie getestet
LEGACY_PREFIX_CANDIDATES = range(0xFFFF)
REMAINDER_SPACE = range(1 << 24)
KEY_SPACE = range(1 << 40)


def key_from_index(index: int, length: int = KEY_LENGTH):
    """
    Wandelt einen Kandidatenindex in Schlüsselbytes um (Little Endian),
    sodass das niederwertigste Byte das erste Schlüsselbyte ist.
    """
    return index.to_bytes(length, 'little')


def index_from_key(key):
    return int.from_bytes(bytes(key), 'little')


def add_with_carry(x, y, c):
    """
    Addiert zwei Bytes und den eingehenden Übertrag. Zurückgegeben werden
    das Ergebnisbyte und der Übertrag der vollen Summe x + y + c.
    """
    total = x + y + c
    return total & 0xFF, total > 0xFF


def sub_with_borrow(a, b, c):
    """
    Berechnet a - b - c modulo 256 und das Borrow. Ein Borrow entsteht,
    falls a < b ist, oder falls a == b und c gesetzt ist.

    Funktioniert mit Integern und numpy-Arrays gleichermassen.

    Args:
        a: bekanntes Byte des Schlüsselstroms
        b: bekanntes Ausgabebyte von Register A
        c: eingehender Übertrag (bool)
    """
    y = (a - b - c) & 0xFF
    borrow = (a < b) | ((a == b) & c)
    return y, borrow


class FrameworkProvider:
    """
    Diese Klasse spielt das angegriffene System: sie kennt den geheimen
    Schlüssel und stellt dem Angreifer beliebig lange Präfixe des
    Schlüsselstroms, bzw. bekannte Klartext-Geheimtext-Paare, zur Verfügung.
    """
    def __init__(self, key=None, seed=None):
        """
        Initialisiert den FrameworkProvider.

        Args:
            key: geheimer Schlüssel (5 Bytes); zufällig, falls nicht angegeben
            seed: optionaler Seed für die Zufallsschlüssel
        """
        self.rng = random.Random(seed)
        if key is None:
            key = self.random_key()
        if len(key) != KEY_LENGTH:
            raise ValueError(f"key must be {KEY_LENGTH} bytes, got {len(key)}")
        self.key = bytes(key)

    def random_key(self):
        return bytes(self.rng.randint(0, 0xFF) for _ in range(KEY_LENGTH))

    def generate_keystream(self, num_bytes):
        """
        Diese Methode generiert die ersten num_bytes Bytes des Schlüssel-
        stroms mit einer frisch initialisierten Chiffre.
        """
        return CSS(self.key).keystream(num_bytes)

    def generate_pair(self, num_bytes):
        """
        Generiert ein zufälliges Klartext-Geheimtext-Paar der Länge num_bytes.
        """
        plaintext = bytes(self.rng.randint(0, 0xFF) for _ in range(num_bytes))
        ciphertext = CSS(self.key).encrypt(plaintext)
        return plaintext, ciphertext

    @staticmethod
    def keystream_from_pair(plaintext, ciphertext):
        """
        Rekonstruiert den Schlüsselstrom aus einem bekannten Klartext-
        Geheimtext-Paar. Die Länge entspricht dem kürzeren der beiden.
        """
        return bytes(p ^ c for p, c in zip(plaintext, ciphertext))
