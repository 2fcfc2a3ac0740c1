"""
BinFHE Runtime - Bit-sliced ciphertext arithmetic on OpenFHE's FHEW/BinFHE scheme

Every encrypted integer is a list of LWE ciphertexts, least significant bit
first. Arithmetic is built from bootstrapped boolean gates, so the circuit
evaluated for a guess is the same whatever the encrypted operands are.
"""
from typing import List, Tuple

from openfhe import BINFHE_METHOD, BINFHE_PARAMSET, BINGATE, BinFHEContext

from realityrift.compute.base import ConfidentialRuntime, EncryptedType

BINFHE_PROTOCOL_ID = 10001


# ============================================================================
# BinFHE Context
# ============================================================================

def create_binfhe_context(paramset: str = "TOY", method: str = "GINX"):
    """
    Create a BinFHE context and its bootstrapping keys.

    Args:
        paramset: BINFHE_PARAMSET member name (TOY for tests, STD128 for real use)
        method: BINFHE_METHOD member name (GINX, AP or LMKCDEY)

    Returns:
        (context, secret_key)
    """
    cc = BinFHEContext()
    cc.GenerateBinFHEContext(getattr(BINFHE_PARAMSET, paramset), getattr(BINFHE_METHOD, method))

    sk = cc.KeyGen()
    # Bootstrapping keys are required for every gate evaluation
    cc.BTKeyGen(sk)

    return cc, sk


class BinFheRuntime(ConfidentialRuntime):
    """
    Runtime backed by OpenFHE boolean-circuit FHE.

    The runtime holds the secret key, playing the role of the key
    management service; only decrypt() uses it outside encryption.
    """

    name = "binfhe"
    default_protocol_id = BINFHE_PROTOCOL_ID

    def __init__(self, paramset: str = "TOY", method: str = "GINX", **kwargs):
        super().__init__(**kwargs)
        self.cc, self._sk = create_binfhe_context(paramset, method)

    # ------------------------------------------------------------------
    # Gates
    # ------------------------------------------------------------------

    def _gate(self, gate, a, b):
        if a is b:
            # EvalBinGate refuses identical input ciphertexts
            b = self.cc.EvalNOT(self.cc.EvalNOT(b))
        return self.cc.EvalBinGate(gate, a, b)

    def _bit(self, value: int):
        return self.cc.Encrypt(self._sk, value & 1)

    def _full_adder(self, a, b, carry) -> Tuple[object, object]:
        """
        One bit of a ripple-carry adder.

        Returns:
            (sum_bit, carry_out)
        """
        a_xor_b = self._gate(BINGATE.XOR, a, b)
        sum_bit = self._gate(BINGATE.XOR, a_xor_b, carry)
        carry_out = self._gate(
            BINGATE.OR,
            self._gate(BINGATE.AND, a, b),
            self._gate(BINGATE.AND, carry, a_xor_b)
        )
        return sum_bit, carry_out

    def _ripple(self, xs: List, ys: List, carry) -> Tuple[List, object]:
        bits = []
        for a, b in zip(xs, ys):
            s, carry = self._full_adder(a, b, carry)
            bits.append(s)
        return bits, carry

    # ------------------------------------------------------------------
    # Native arithmetic
    # ------------------------------------------------------------------

    def _encrypt(self, value: int, ctype: EncryptedType) -> List:
        return [self._bit(value >> i) for i in range(ctype.value)]

    def _decrypt(self, native: List, ctype: EncryptedType) -> int:
        return sum((self.cc.Decrypt(self._sk, ct) & 1) << i for i, ct in enumerate(native))

    def _eq(self, x: List, y: List, ctype: EncryptedType) -> List:
        same = [self._gate(BINGATE.XNOR, a, b) for a, b in zip(x, y)]
        result = same[0]
        for s in same[1:]:
            result = self._gate(BINGATE.AND, result, s)
        return [result]

    def _ge(self, x: List, y: List, ctype: EncryptedType) -> List:
        # x >= y  <=>  x + ~y + 1 carries out of the top bit
        not_y = [self.cc.EvalNOT(b) for b in y]
        _, carry = self._ripple(x, not_y, self._bit(1))
        return [carry]

    def _not(self, c: List) -> List:
        return [self.cc.EvalNOT(c[0])]

    def _add(self, x: List, y: List, ctype: EncryptedType) -> List:
        bits, _ = self._ripple(x, y, self._bit(0))
        return bits

    def _sub(self, x: List, y: List, ctype: EncryptedType) -> List:
        not_y = [self.cc.EvalNOT(b) for b in y]
        bits, _ = self._ripple(x, not_y, self._bit(1))
        return bits

    def _select(self, c: List, x: List, y: List, ctype: EncryptedType) -> List:
        """
        Per-bit multiplexer: y ^ (c & (x ^ y)).

        Both inputs are consumed bit by bit regardless of c.
        """
        cond = c[0]
        return [
            self._gate(BINGATE.XOR, b, self._gate(BINGATE.AND, cond, self._gate(BINGATE.XOR, a, b)))
            for a, b in zip(x, y)
        ]
