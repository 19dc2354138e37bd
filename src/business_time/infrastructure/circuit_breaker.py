"""
Circuit Breaker Pattern.

Protects external service calls from cascading failures.
"""

import time
from dataclasses import dataclass
from enum import Enum
from threading import Lock
from typing import Any, Callable, Optional

from business_time.infrastructure.logging import get_logger
from business_time.infrastructure.metrics import get_metrics


logger = get_logger(__name__)


class CircuitState(str, Enum):
    """Circuit breaker states."""
    CLOSED = "CLOSED"        # Normal operation
    OPEN = "OPEN"            # Failing, reject requests
    HALF_OPEN = "HALF_OPEN"  # Testing if service recovered

    @property
    def gauge_value(self) -> int:
        return {"CLOSED": 0, "HALF_OPEN": 1, "OPEN": 2}[self.value]


@dataclass
class CircuitBreakerConfig:
    """Circuit breaker configuration."""
    failure_threshold: int = 3       # Failures before opening
    timeout_seconds: float = 300.0   # Time before trying again


@dataclass(frozen=True)
class CircuitSnapshot:
    """Point-in-time view of a circuit breaker."""
    state: CircuitState
    failure_count: int
    last_failure_time: Optional[float]


class CircuitBreakerOpenError(Exception):
    """Raised when circuit breaker is open."""
    pass


class CircuitBreaker:
    """
    Circuit breaker for external service calls.

    Opens after ``failure_threshold`` consecutive failures and rejects
    calls until ``timeout_seconds`` have passed since the last failure.
    The next call is then a half-open trial: success closes the circuit,
    failure reopens it and restarts the timer.
    """

    def __init__(
        self,
        name: str,
        config: Optional[CircuitBreakerConfig] = None,
    ) -> None:
        self._name = name
        self._config = config or CircuitBreakerConfig()
        self._state = CircuitState.CLOSED
        self._failure_count = 0
        self._last_failure_time: Optional[float] = None
        self._lock = Lock()

    @property
    def name(self) -> str:
        return self._name

    @property
    def state(self) -> CircuitState:
        """Get current state, checking for timeout."""
        with self._lock:
            if self._state == CircuitState.OPEN and self._should_attempt_reset():
                self._set_state(CircuitState.HALF_OPEN)
                logger.info(
                    f"Circuit breaker '{self._name}' entering half-open state",
                    extra={"extra_fields": {"circuit": self._name}}
                )
            return self._state

    def snapshot(self) -> CircuitSnapshot:
        """Read the breaker without triggering any state transition."""
        with self._lock:
            return CircuitSnapshot(
                state=self._state,
                failure_count=self._failure_count,
                last_failure_time=self._last_failure_time,
            )

    def _should_attempt_reset(self) -> bool:
        """Check if enough time has passed to try again."""
        if self._last_failure_time is None:
            return True
        elapsed = time.time() - self._last_failure_time
        return elapsed >= self._config.timeout_seconds

    def _set_state(self, state: CircuitState) -> None:
        self._state = state
        get_metrics().circuit_breaker_state.set(state.gauge_value, circuit=self._name)

    def record_success(self) -> None:
        """Record a successful call, closing the circuit."""
        with self._lock:
            if self._failure_count > 0 or self._state != CircuitState.CLOSED:
                logger.info(
                    f"Circuit breaker '{self._name}' reset - service recovered",
                    extra={"extra_fields": {
                        "circuit": self._name,
                        "previous_state": self._state.value,
                        "failure_count": self._failure_count,
                    }}
                )
            self._failure_count = 0
            self._set_state(CircuitState.CLOSED)

    def record_failure(self, exception: Exception) -> None:
        """Record a failed call."""
        with self._lock:
            self._failure_count += 1
            self._last_failure_time = time.time()

            if self._state == CircuitState.HALF_OPEN:
                # Single failure in half-open reopens the circuit
                self._set_state(CircuitState.OPEN)
                logger.warning(
                    f"Circuit breaker '{self._name}' reopened after half-open failure",
                    extra={"extra_fields": {
                        "circuit": self._name,
                        "failure_count": self._failure_count,
                        "error": str(exception),
                    }}
                )
            elif (
                self._state == CircuitState.CLOSED
                and self._failure_count >= self._config.failure_threshold
            ):
                self._set_state(CircuitState.OPEN)
                logger.warning(
                    f"Circuit breaker '{self._name}' opened after {self._failure_count} failures",
                    extra={"extra_fields": {
                        "circuit": self._name,
                        "failure_count": self._failure_count,
                        "error": str(exception),
                    }}
                )

    def call(self, func: Callable, *args: Any, **kwargs: Any) -> Any:
        """
        Execute a function through the circuit breaker.

        Args:
            func: Function to execute.
            *args: Function arguments.
            **kwargs: Function keyword arguments.

        Returns:
            Function result.

        Raises:
            CircuitBreakerOpenError: If circuit is open.
            Exception: Any exception from the function.
        """
        if self.state == CircuitState.OPEN:
            raise CircuitBreakerOpenError(
                f"Circuit breaker '{self._name}' is open"
            )

        try:
            result = func(*args, **kwargs)
        except Exception as e:
            self.record_failure(e)
            raise
        self.record_success()
        return result

    def reset(self) -> None:
        """Manually reset the circuit breaker."""
        with self._lock:
            self._failure_count = 0
            self._last_failure_time = None
            self._set_state(CircuitState.CLOSED)
            logger.info(
                f"Circuit breaker '{self._name}' manually reset",
                extra={"extra_fields": {"circuit": self._name}}
            )
