from realityrift.compute.base import ConfidentialRuntime
from realityrift.compute.mock import PlaintextRuntime

BACKENDS = ("mock", "binfhe")


def create_runtime(backend: str, **kwargs) -> ConfidentialRuntime:
    backend = backend.lower()
    if backend == "mock":
        return PlaintextRuntime(**kwargs)
    elif backend == "binfhe":
        # openfhe is an optional, platform-specific install
        from realityrift.compute.binfhe import BinFheRuntime
        return BinFheRuntime(**kwargs)
    else:
        raise ValueError(f"Unknown backend: {backend}")
