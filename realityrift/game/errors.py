class RiftError(Exception):
    """
    Base class for every error raised by the rift game and its runtimes.
    """


class AlreadyRegistered(RiftError):
    def __init__(self, player: str):
        super().__init__(f"Player {player} is already registered")
        self.player = player


class PlayerNotRegistered(RiftError):
    def __init__(self, player: str):
        super().__init__(f"Player {player} is not registered")
        self.player = player


class InvalidProof(RiftError):
    """
    The input proof does not cover the handle or is not bound to (contract, user).
    """


class ProtocolUnsupported(RiftError):
    """
    Raised caller-side when the encryption client and the game disagree on the protocol.
    """

    def __init__(self, expected: int, actual: int):
        super().__init__(f"Game runs protocol {actual}, client speaks {expected}")
        self.expected = expected
        self.actual = actual


class DecryptionNotAuthorized(RiftError):
    pass


class UnknownHandle(RiftError):
    def __init__(self, handle: str):
        super().__init__(f"Unknown ciphertext handle {handle}")
        self.handle = handle


class CiphertextTypeError(RiftError):
    pass
