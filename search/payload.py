"""
Pydantic schemas for the highlight data returned by the search engine.

Expected data per language:
    snippets: ["{<pageKey>} <snippet text>", ...]
    passages: [{"startOffsetUtf16": <number>,
                "matchStartsUtf16": "[<number>, <number>, ...]",
                "matchEndsUtf16": "[<number>, <number>, ...]"}, ...]
"""
from typing import Any, List, Optional, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from core.constants import (
    PAYLOAD_OFFSETS,
    TEXT_START_OFFSET,
    HIT_START_OFFSETS,
    HIT_END_OFFSETS,
)
from core.exceptions import MalformedEnginePayload


def parse_offset_list(value: Union[str, List[int]]) -> List[int]:
    """
    Parse an offset list.

    Args:
        value: Either a list of numbers or text like "[12, 40, 97]"

    Returns:
        List of integers
    """
    if isinstance(value, (list, tuple)):
        return [int(number) for number in value]
    if not isinstance(value, str):
        raise ValueError(f"expected a bracketed number list, got {type(value).__name__}")

    text = value.strip()
    if not (text.startswith('[') and text.endswith(']')):
        raise ValueError(f"expected a bracketed number list, got {value!r}")
    numbers = text[1:-1].strip()
    if not numbers:
        return []
    return [int(number.strip()) for number in numbers.split(',')]


class PassageOffsets(BaseModel):
    """Engine offsets for one snippet, in the engine's document-global coordinates."""
    model_config = ConfigDict(populate_by_name=True)

    text_start_offset: int = Field(
        validation_alias=AliasChoices(TEXT_START_OFFSET, 'textStartOffset', 'text_start_offset')
    )
    match_starts: List[int] = Field(
        validation_alias=AliasChoices(HIT_START_OFFSETS, 'matchStartOffsets', 'match_starts')
    )
    match_ends: List[int] = Field(
        validation_alias=AliasChoices(HIT_END_OFFSETS, 'matchEndOffsets', 'match_ends')
    )

    @field_validator('match_starts', 'match_ends', mode='before')
    @classmethod
    def _parse_numbers(cls, value: Any) -> List[int]:
        return parse_offset_list(value)

    @model_validator(mode='after')
    def _check_pairs(self) -> 'PassageOffsets':
        if len(self.match_starts) != len(self.match_ends):
            raise ValueError(
                f"{len(self.match_starts)} match starts but {len(self.match_ends)} match ends"
            )
        return self


class HighlightPayload(BaseModel):
    """Snippets of one language plus their (optional) parallel offsets."""
    snippets: List[str]
    passages: Optional[List[PassageOffsets]] = Field(
        default=None,
        validation_alias=AliasChoices(PAYLOAD_OFFSETS, 'offsets')
    )

    @model_validator(mode='after')
    def _check_parallel(self) -> 'HighlightPayload':
        if self.passages is not None and len(self.passages) != len(self.snippets):
            raise ValueError(
                f"{len(self.snippets)} snippets but {len(self.passages)} offset entries"
            )
        return self

    @classmethod
    def from_raw(cls, raw: Any) -> 'HighlightPayload':
        """
        Validate a raw highlight object.

        Raises:
            MalformedEnginePayload: If the object does not have the expected shape
        """
        if isinstance(raw, cls):
            return raw
        if not isinstance(raw, dict):
            raise MalformedEnginePayload(
                f"Unexpected highlights object type: {type(raw).__name__}"
            )
        try:
            return cls.model_validate(raw)
        except ValidationError as e:
            raise MalformedEnginePayload(f"Invalid highlight payload: {e}") from e
