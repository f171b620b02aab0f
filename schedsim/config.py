from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from typing import List, Mapping, Optional

from .algorithms import ALGORITHMS, validate_quantum
from .errors import InvalidConfiguration

DEFAULT_QUANTUM = 2
DEFAULT_LOG_LEVEL = "WARNING"

ENV_QUANTUM = "SCHEDSIM_QUANTUM"
ENV_LOG_LEVEL = "SCHEDSIM_LOG_LEVEL"


@dataclass
class SimulationConfig:
    """
    Settings for one invocation: which policies to run and with what quantum.
    """

    algorithms: List[str] = field(default_factory=lambda: list(ALGORITHMS))
    quantum: int = DEFAULT_QUANTUM
    log_level: str = DEFAULT_LOG_LEVEL

    def validate(self) -> "SimulationConfig":
        if not self.algorithms:
            raise InvalidConfiguration("At least one algorithm must be selected")
        unknown = [a for a in self.algorithms if a not in ALGORITHMS]
        if unknown:
            raise InvalidConfiguration(f"Unknown algorithm(s): {', '.join(unknown)}")
        if "rr" in self.algorithms:
            validate_quantum(self.quantum)
        if not isinstance(logging.getLevelName(self.log_level.upper()), int):
            raise InvalidConfiguration(f"Unknown log level '{self.log_level}'")
        return self

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "SimulationConfig":
        environ = os.environ if environ is None else environ
        config = cls()

        raw_quantum = environ.get(ENV_QUANTUM)
        if raw_quantum:
            try:
                config.quantum = int(raw_quantum)
            except ValueError as exc:
                raise InvalidConfiguration(f"{ENV_QUANTUM} must be an integer, got {raw_quantum!r}") from exc

        config.log_level = environ.get(ENV_LOG_LEVEL, config.log_level)
        return config
