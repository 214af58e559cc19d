from cryptanalysis.framework import FrameworkProvider
from cryptanalysis.cryptanalysis import Cryptanalysis

"""

basic execution sample

"""


def basic_execution_sample():
    key = bytes([0xDE, 0xAD, 0xBE, 0x04, 0x00])

    num_bytes = 1024

    framework = FrameworkProvider(key)
    keystream = framework.generate_keystream(num_bytes)
    attack = Cryptanalysis(keystream)

    recovered = attack.find_key(show_results=True)
    print(f"recovered key: {recovered.key.hex(' ').upper()}")


if __name__ == '__main__':
    basic_execution_sample()
