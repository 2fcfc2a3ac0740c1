from realityrift.compute.base import ConfidentialRuntime, EncryptedType

MOCK_PROTOCOL_ID = 31337


class PlaintextRuntime(ConfidentialRuntime):
    """
    Mock runtime for local testing: "ciphertexts" are plain ints held
    behind handles. Arithmetic mirrors the encrypted backends exactly,
    including wrap-around and the multiplexer used by select.
    """

    name = "mock"
    default_protocol_id = MOCK_PROTOCOL_ID

    def _encrypt(self, value: int, ctype: EncryptedType) -> int:
        return value & ctype.max_value

    def _decrypt(self, native: int, ctype: EncryptedType) -> int:
        return native

    def _eq(self, x: int, y: int, ctype: EncryptedType) -> int:
        return int(x == y)

    def _ge(self, x: int, y: int, ctype: EncryptedType) -> int:
        return int(x >= y)

    def _not(self, c: int) -> int:
        return 1 - c

    def _add(self, x: int, y: int, ctype: EncryptedType) -> int:
        return (x + y) & ctype.max_value

    def _sub(self, x: int, y: int, ctype: EncryptedType) -> int:
        return (x - y) & ctype.max_value

    def _select(self, c: int, x: int, y: int, ctype: EncryptedType) -> int:
        return c * x + (1 - c) * y
