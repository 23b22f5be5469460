"""
Login credentials with a password that can be wiped.
"""

from __future__ import annotations

from dataclasses import dataclass


class SecretPassword:
    """
    Password held in a mutable buffer that is zeroed on release.

    Python strings are immutable, so the plaintext handed to the SSH layer by
    ``reveal()`` cannot be wiped; the buffer owned here can, and nothing in
    sftpdash keeps the revealed value after a login attempt.
    """

    __slots__ = ("_buffer", "_released")

    def __init__(self, value: str | bytes | bytearray):
        if isinstance(value, str):
            value = value.encode("utf-8")
        self._buffer = bytearray(value)
        self._released = False

    @property
    def released(self) -> bool:
        return self._released

    def reveal(self) -> str:
        if self._released:
            raise ValueError("Secret has already been released")
        return self._buffer.decode("utf-8")

    def release(self) -> None:
        """Overwrite the buffer with zeros. Safe to call more than once."""
        for i in range(len(self._buffer)):
            self._buffer[i] = 0
        self._buffer = bytearray()
        self._released = True

    def __len__(self) -> int:
        return len(self._buffer)

    def __enter__(self) -> SecretPassword:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.release()

    def __repr__(self) -> str:
        state = "released" if self._released else "set"
        return f"SecretPassword(<{state}>)"


@dataclass
class Credentials:
    """Username and password for one login attempt."""

    username: str
    password: SecretPassword

    @classmethod
    def from_plain(cls, username: str, password: str) -> Credentials:
        return cls(username=username, password=SecretPassword(password))

    def release(self) -> None:
        self.password.release()
