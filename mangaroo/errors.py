"""Application error carrying an HTTP status code."""

from __future__ import annotations


class AppError(Exception):
    """An error with an HTTP status code, a message and an optional cause."""

    def __init__(self, code: int, message: str, err: BaseException | None = None) -> None:
        super().__init__(message)
        self.code, self.message, self.err = code, message, err

    def __str__(self) -> str:
        return self.message if self.err is None else f"{self.message}: {self.err}"


def is_not_found(err: BaseException | None) -> bool:
    """Tell whether ``err`` or an exception it was raised from is a 404 AppError."""
    while err is not None and not isinstance(err, AppError):
        err = err.__cause__
    return err is not None and err.code == 404