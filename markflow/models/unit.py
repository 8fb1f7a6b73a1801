"""Translation unit model."""

from __future__ import annotations

from dataclasses import dataclass

from markflow.models.token import TokenKind


@dataclass(frozen=True)
class UnitAddress:
    segment_index: int
    token_index: int
    line_index: int | None = None

    def __str__(self) -> str:
        if self.line_index is None:
            return f"{self.segment_index}:{self.token_index}"
        return f"{self.segment_index}:{self.line_index}:{self.token_index}"


@dataclass(frozen=True)
class TranslationUnit:
    """Smallest piece of inner text sent to the translator."""

    segment_index: int
    token_index: int
    kind: TokenKind
    source_text: str
    line_index: int | None = None

    @property
    def address(self) -> UnitAddress:
        return UnitAddress(
            segment_index=self.segment_index,
            token_index=self.token_index,
            line_index=self.line_index,
        )


TranslationMap = dict[UnitAddress, str]
