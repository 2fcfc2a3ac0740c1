import hashlib
import hmac
import secrets
from abc import ABC, abstractmethod
from enum import IntEnum
from typing import Any, Dict, List, Optional, Sequence, Tuple

from realityrift.game.errors import CiphertextTypeError, InvalidProof, UnknownHandle
from realityrift.game.models import EncryptedInput, Handle, ZERO_HANDLE, checksum


HANDLE_BYTES = 32
MAC_BYTES = 32


class EncryptedType(IntEnum):
    """Encrypted value types, valued by their bit width."""
    EBOOL = 1
    EUINT8 = 8
    EUINT32 = 32

    @property
    def max_value(self) -> int:
        return (1 << self.value) - 1


class ConfidentialRuntime(ABC):
    """
    Owns every ciphertext of a game and exposes them only through opaque handles.

    Subclasses supply the native arithmetic (_encrypt, _eq, _add, ...). This
    base class keeps the handle table, checks operand types, binds encrypted
    inputs to (contract, user) and records an operation trace.

    All operations evaluate every operand; there is no method that returns a
    plaintext to the caller except decrypt(), which is reserved for the
    off-chain decryption service.
    """

    name = "abstract"
    default_protocol_id = 0

    def __init__(self, protocol_id: Optional[int] = None, input_key: Optional[bytes] = None):
        self.protocol_id = self.default_protocol_id if protocol_id is None else protocol_id
        self._input_key = input_key or secrets.token_bytes(32)
        self._ciphertexts: Dict[Handle, Tuple[EncryptedType, Any]] = {}
        self._input_bindings: Dict[Handle, Tuple[str, str]] = {}
        self._constants: Dict[Tuple[int, EncryptedType], Handle] = {}
        self._counter = 0
        self.trace: List[str] = []

    # ------------------------------------------------------------------
    # Native arithmetic
    # ------------------------------------------------------------------

    @abstractmethod
    def _encrypt(self, value: int, ctype: EncryptedType) -> Any:
        pass

    @abstractmethod
    def _decrypt(self, native: Any, ctype: EncryptedType) -> int:
        pass

    @abstractmethod
    def _eq(self, x: Any, y: Any, ctype: EncryptedType) -> Any:
        """Returns an EBOOL native ciphertext."""

    @abstractmethod
    def _ge(self, x: Any, y: Any, ctype: EncryptedType) -> Any:
        """Returns an EBOOL native ciphertext, unsigned comparison."""

    @abstractmethod
    def _not(self, c: Any) -> Any:
        pass

    @abstractmethod
    def _add(self, x: Any, y: Any, ctype: EncryptedType) -> Any:
        """Wrapping addition modulo 2**bits."""

    @abstractmethod
    def _sub(self, x: Any, y: Any, ctype: EncryptedType) -> Any:
        """Wrapping subtraction modulo 2**bits."""

    @abstractmethod
    def _select(self, c: Any, x: Any, y: Any, ctype: EncryptedType) -> Any:
        """Oblivious multiplexer: x where c is true, y otherwise."""

    # ------------------------------------------------------------------
    # Handle table
    # ------------------------------------------------------------------

    def _store(self, ctype: EncryptedType, native: Any) -> Handle:
        self._counter += 1
        digest = hashlib.sha256(
            f"{self.name}|{self.protocol_id}|{self._counter}|{int(ctype)}".encode("utf-8")
        ).hexdigest()
        handle = "0x" + digest
        self._ciphertexts[handle] = (ctype, native)
        return handle

    def _load(self, handle: Handle) -> Tuple[EncryptedType, Any]:
        try:
            return self._ciphertexts[handle]
        except KeyError:
            raise UnknownHandle(handle) from None

    def _load_pair(self, a: Handle, b: Handle) -> Tuple[EncryptedType, Any, Any]:
        a_type, x = self._load(a)
        b_type, y = self._load(b)
        if a_type != b_type:
            raise CiphertextTypeError(f"Operand types differ: {a_type.name} vs {b_type.name}")
        return a_type, x, y

    def __contains__(self, handle: Handle) -> bool:
        return handle in self._ciphertexts

    def type_of(self, handle: Handle) -> EncryptedType:
        return self._load(handle)[0]

    # ------------------------------------------------------------------
    # Encryption
    # ------------------------------------------------------------------

    def trivial_encrypt(self, value: int, ctype: EncryptedType) -> Handle:
        """Encrypts a public value under a fresh handle."""
        if not 0 <= value <= ctype.max_value:
            raise ValueError(f"{value} does not fit in {ctype.name}")
        return self._store(ctype, self._encrypt(value, ctype))

    def constant(self, value: int, ctype: EncryptedType) -> Handle:
        """
        Shared handle for a public operand. Cached so repeated use does not
        grow the handle table; never hand it out as player state.
        """
        key = (value, ctype)
        if key not in self._constants:
            self._constants[key] = self.trivial_encrypt(value, ctype)
        return self._constants[key]

    def encrypt_inputs(
        self,
        values: Sequence[Tuple[int, EncryptedType]],
        contract: str,
        user: str
    ) -> EncryptedInput:
        """
        Encrypts caller inputs and produces a proof binding them to (contract, user).

        Proof layout: 1 byte handle count, the 32-byte handles, then a
        HMAC-SHA256 over contract|user|handles under the runtime input key.
        """
        if not values:
            raise ValueError("Cannot encrypt an empty input")
        if len(values) > 255:
            raise ValueError("At most 255 values per encrypted input")

        contract, user = checksum(contract), checksum(user)
        handles = []
        for value, ctype in values:
            if not 0 <= value <= ctype.max_value:
                raise ValueError(f"{value} does not fit in {ctype.name}")
            handle = self._store(ctype, self._encrypt(value, ctype))
            self._input_bindings[handle] = (contract, user)
            handles.append(handle)

        raw_handles = b"".join(bytes.fromhex(h[2:]) for h in handles)
        proof = bytes([len(handles)]) + raw_handles + self._mac(contract, user, raw_handles)
        return EncryptedInput(handles=handles, input_proof=proof)

    def verify_input(
        self,
        handle: Handle,
        proof: bytes,
        contract: str,
        user: str,
        ctype: EncryptedType
    ) -> Handle:
        """
        Checks that `handle` is an input ciphertext of type `ctype` covered by
        `proof` and bound to (contract, user). Raises InvalidProof otherwise.
        """
        contract, user = checksum(contract), checksum(user)
        if not proof:
            raise InvalidProof("Empty input proof")

        count = proof[0]
        body_len = 1 + count * HANDLE_BYTES
        if count == 0 or len(proof) != body_len + MAC_BYTES:
            raise InvalidProof("Malformed input proof")

        raw_handles = proof[1:body_len]
        expected = self._mac(contract, user, raw_handles)
        if not hmac.compare_digest(expected, proof[body_len:]):
            raise InvalidProof("Input proof is not bound to this contract and user")

        covered = {
            "0x" + raw_handles[i:i + HANDLE_BYTES].hex()
            for i in range(0, len(raw_handles), HANDLE_BYTES)
        }
        if handle not in covered:
            raise InvalidProof(f"Handle {handle} is not covered by the input proof")
        if self._input_bindings.get(handle) != (contract, user):
            raise InvalidProof(f"Handle {handle} was not encrypted for this contract and user")
        if self.type_of(handle) != ctype:
            raise InvalidProof(f"Handle {handle} is not an {ctype.name}")
        return handle

    def _mac(self, contract: str, user: str, raw_handles: bytes) -> bytes:
        message = contract.encode("utf-8") + b"|" + user.encode("utf-8") + b"|" + raw_handles
        return hmac.new(self._input_key, message, hashlib.sha256).digest()

    # ------------------------------------------------------------------
    # Homomorphic operations
    # ------------------------------------------------------------------

    def eq(self, a: Handle, b: Handle) -> Handle:
        ctype, x, y = self._load_pair(a, b)
        self.trace.append(f"eq.{ctype.name}")
        return self._store(EncryptedType.EBOOL, self._eq(x, y, ctype))

    def ge(self, a: Handle, b: Handle) -> Handle:
        ctype, x, y = self._load_pair(a, b)
        self.trace.append(f"ge.{ctype.name}")
        return self._store(EncryptedType.EBOOL, self._ge(x, y, ctype))

    def gt(self, a: Handle, b: Handle) -> Handle:
        # a > b  <=>  not (b >= a)
        ctype, x, y = self._load_pair(a, b)
        self.trace.append(f"gt.{ctype.name}")
        return self._store(EncryptedType.EBOOL, self._not(self._ge(y, x, ctype)))

    def add(self, a: Handle, b: Handle) -> Handle:
        ctype, x, y = self._load_pair(a, b)
        self.trace.append(f"add.{ctype.name}")
        return self._store(ctype, self._add(x, y, ctype))

    def sub(self, a: Handle, b: Handle) -> Handle:
        ctype, x, y = self._load_pair(a, b)
        self.trace.append(f"sub.{ctype.name}")
        return self._store(ctype, self._sub(x, y, ctype))

    def select(self, condition: Handle, if_true: Handle, if_false: Handle) -> Handle:
        c_type, c = self._load(condition)
        if c_type != EncryptedType.EBOOL:
            raise CiphertextTypeError(f"Select condition must be EBOOL, got {c_type.name}")
        ctype, x, y = self._load_pair(if_true, if_false)
        self.trace.append(f"select.{ctype.name}")
        return self._store(ctype, self._select(c, x, y, ctype))

    # ------------------------------------------------------------------
    # Decryption (key holder side)
    # ------------------------------------------------------------------

    def decrypt(self, handle: Handle) -> int:
        if handle == ZERO_HANDLE:
            raise ValueError("Cannot decrypt the empty handle")
        ctype, native = self._load(handle)
        return self._decrypt(native, ctype)
