"""
Decryption Service - User decryption of ciphertext handles against the access ledger
"""
import logging
from typing import Dict, List, Union

from eth_account import Account
from eth_account.messages import encode_defunct

from realityrift.acl.ledger import AccessControlLedger
from realityrift.compute.base import ConfidentialRuntime, EncryptedType
from realityrift.game.errors import DecryptionNotAuthorized
from realityrift.game.models import Handle, UserDecryptRequest, ZERO_HANDLE, checksum

logger = logging.getLogger(__name__)


def user_decrypt_message(contract: str, handles: List[Handle]) -> str:
    """
    Text the player signs to authorize decryption of `handles` from `contract`.
    """
    lines = ["Encrypted Reality Rift user decryption", f"contract: {checksum(contract)}"]
    lines.extend(f"handle: {h}" for h in handles)
    return "\n".join(lines)


def sign_user_decrypt(account, contract: str, handles: List[Handle]) -> UserDecryptRequest:
    """
    Sign a user decryption request with an eth_account LocalAccount.
    """
    message = encode_defunct(text=user_decrypt_message(contract, handles))
    signed = Account.sign_message(message, private_key=account.key)
    return UserDecryptRequest(
        player=account.address,
        contract=checksum(contract),
        handles=list(handles),
        signature=bytes(signed.signature)
    )


class DecryptionService:
    """Key holder side: decrypts handles for principals the ledger authorizes"""

    def __init__(self, runtime: ConfidentialRuntime, ledger: AccessControlLedger):
        self.runtime = runtime
        self.ledger = ledger

    def _verify_signer(self, request: UserDecryptRequest) -> str:
        message = encode_defunct(text=user_decrypt_message(request.contract, request.handles))
        try:
            signer = Account.recover_message(message, signature=request.signature)
        except Exception as e:
            raise DecryptionNotAuthorized(f"Unreadable signature: {e}") from e
        if checksum(signer) != checksum(request.player):
            raise DecryptionNotAuthorized(f"Request signed by {signer}, not {request.player}")
        return checksum(signer)

    def user_decrypt(self, request: UserDecryptRequest) -> Dict[Handle, Union[int, bool]]:
        """
        Decrypt every handle in the request.

        Both the signing player and the contract must hold a grant on each
        handle; otherwise nothing is decrypted.

        Returns:
            Mapping handle -> plaintext (bool for EBOOL handles)
        """
        if not request.handles:
            raise ValueError("No handles to decrypt")
        if ZERO_HANDLE in request.handles:
            raise ValueError("Cannot decrypt the empty handle")

        player = self._verify_signer(request)
        for handle in request.handles:
            for principal in (player, request.contract):
                if not self.ledger.is_authorized(handle, principal):
                    raise DecryptionNotAuthorized(f"{principal} may not decrypt {handle}")

        results = {}
        for handle in request.handles:
            value = self.runtime.decrypt(handle)
            if self.runtime.type_of(handle) == EncryptedType.EBOOL:
                value = bool(value)
            results[handle] = value

        logger.info(f"Decrypted {len(results)} handle(s) for {player}")
        return results

    def decrypt_one(self, account, contract: str, handle: Handle) -> Union[int, bool]:
        """Convenience: sign and decrypt a single handle."""
        request = sign_user_decrypt(account, contract, [handle])
        return self.user_decrypt(request)[handle]
