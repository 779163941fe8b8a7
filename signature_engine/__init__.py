from .benchmark import BenchmarkResult, run_all, run_benchmark
from .config import EngineConfig
from .factory import (
    Algorithm,
    AlgorithmFactory,
    generate_keys,
    get_algorithm,
    sign,
    supported_algorithms,
    verify,
)

__all__ = [
    'Algorithm',
    'AlgorithmFactory',
    'BenchmarkResult',
    'EngineConfig',
    'generate_keys',
    'get_algorithm',
    'run_all',
    'run_benchmark',
    'sign',
    'supported_algorithms',
    'verify',
]
