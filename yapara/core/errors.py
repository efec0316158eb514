from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class ParameterizeError(Exception):
    """Base error envelope. Every expansion failure is raised as one of these."""

    code: str
    message: str
    file: Optional[str] = None
    line: Optional[int] = None
    path: Optional[str] = None

    def __str__(self) -> str:
        parts: list[str] = []
        if self.file:
            parts.append(self.file)
            if self.line is not None:
                parts.append(str(self.line))
        if self.path:
            parts.append(self.path)
        loc = ":".join(parts) if parts else "<declaration>"
        return f"{loc}: {self.code}: {self.message}"


class ParameterLoadError(ParameterizeError):
    pass


class DeclarationError(ParameterizeError):
    pass


class ArityMismatchError(DeclarationError):
    pass


class UnsupportedContainerError(DeclarationError):
    pass


class ParameterNameError(DeclarationError):
    pass


class DuplicateNameError(DeclarationError):
    pass


class BodySourceError(DeclarationError):
    pass
