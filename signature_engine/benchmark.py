import logging
import time
from dataclasses import dataclass, field
from statistics import fmean

from signature_algorithm import Message

from .factory import AlgorithmFactory, supported_algorithms

logger = logging.getLogger(__name__)

DEFAULT_ITERATIONS = 5
DEFAULT_MESSAGE = 'A message used to measure signing performance'


@dataclass
class BenchmarkResult:
    algorithm: str
    key_generation_ms: list[float] = field(default_factory=list)
    signing_ms: list[float] = field(default_factory=list)
    verification_ms: list[float] = field(default_factory=list)
    signature_size: int = 0
    verified: bool = False

    @property
    def key_generation_avg(self) -> float:
        return fmean(self.key_generation_ms)

    @property
    def signing_avg(self) -> float:
        return fmean(self.signing_ms)

    @property
    def verification_avg(self) -> float:
        return fmean(self.verification_ms)


def _elapsed_ms(start: float) -> float:
    return (time.perf_counter() - start) * 1000


def run_benchmark(
    name: str,
    iterations: int = DEFAULT_ITERATIONS,
    message: Message = DEFAULT_MESSAGE,
    factory: AlgorithmFactory | None = None,
) -> BenchmarkResult:
    """Time key generation, signing and verification of one algorithm.

    Signing and verification use the key pair and the signature from the last
    iteration of the previous phase.
    """
    if iterations < 1:
        msg = f'Iterations should be positive, but got: {iterations}'
        raise ValueError(msg)

    algorithm = (factory or AlgorithmFactory()).get_algorithm(name)
    result = BenchmarkResult(algorithm.name)

    for _ in range(iterations):
        start = time.perf_counter()
        key_pair = algorithm.generate_keys()
        result.key_generation_ms.append(_elapsed_ms(start))

    for _ in range(iterations):
        start = time.perf_counter()
        signature = algorithm.sign(message, key_pair)
        result.signing_ms.append(_elapsed_ms(start))
    result.signature_size = signature.size

    for _ in range(iterations):
        start = time.perf_counter()
        result.verified = algorithm.verify(message, signature, key_pair)
        result.verification_ms.append(_elapsed_ms(start))

    logger.info(
        '%s: keygen %.2f ms, sign %.2f ms, verify %.2f ms, signature %d bytes',
        result.algorithm,
        result.key_generation_avg,
        result.signing_avg,
        result.verification_avg,
        result.signature_size,
    )
    return result


def run_all(
    iterations: int = DEFAULT_ITERATIONS,
    message: Message = DEFAULT_MESSAGE,
    factory: AlgorithmFactory | None = None,
) -> dict[str, BenchmarkResult]:
    factory = factory or AlgorithmFactory()
    return {name: run_benchmark(name, iterations, message, factory) for name in supported_algorithms()}
