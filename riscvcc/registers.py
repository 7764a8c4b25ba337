"""Allocation of the temporary integer and floating-point registers."""

from __future__ import annotations

INT_REGISTER_COUNT = 7
FLOAT_REGISTER_COUNT = 8
FLOAT_BASE = INT_REGISTER_COUNT


class RegisterExhaustedError(RuntimeError):
    """Raised when every temporary register of the requested kind is in use."""


class RegisterPool:
    """Temporaries t0-t6 as numbers 0-6 and ft0-ft7 as numbers 7-14."""

    def __init__(self) -> None:
        self._int_used = [False] * INT_REGISTER_COUNT
        self._float_used = [False] * FLOAT_REGISTER_COUNT

    def acquire(self) -> int:
        """Take the lowest free integer temporary."""
        for number, used in enumerate(self._int_used):
            if not used:
                self._int_used[number] = True
                return number
        raise RegisterExhaustedError("out of register")

    def acquire_float(self) -> int:
        """Take the lowest free floating-point temporary, numbered from 7."""
        for number, used in enumerate(self._float_used):
            if not used:
                self._float_used[number] = True
                return number + FLOAT_BASE
        raise RegisterExhaustedError("out of float register")

    def release(self, reg: int) -> None:
        """Give a register back; numbers from 7 up are floating-point ones."""
        if not 0 <= reg < FLOAT_BASE + FLOAT_REGISTER_COUNT:
            raise ValueError(f"no such register: {reg}")
        if reg < FLOAT_BASE:
            self._int_used[reg] = False
        else:
            self._float_used[reg - FLOAT_BASE] = False