"""Instruction presets used when the caller does not type a prompt."""

from __future__ import annotations

from pydantic import Field, model_validator

from docdigest.config.base import BaseConfig

DEFAULT_INSTRUCTION = (
    "Summarise the following document concisely and clearly. "
    "Organise the summary as bullets covering the document number, the proposer, "
    "the background of the proposal and the proposal itself."
)


class PromptPreset(BaseConfig):
    """A named, reusable instruction."""

    name: str = Field(..., min_length=1, description="Preset name used on the command line")
    text: str = Field(..., min_length=1, description="Instruction text sent with each document")


class PromptConfig(BaseConfig):
    """Default instruction plus the saved preset list."""

    default: str = Field(DEFAULT_INSTRUCTION, min_length=1, description="Instruction used when none is given")
    presets: list[PromptPreset] = Field(default_factory=list, description="Saved instruction presets")

    @model_validator(mode="after")
    def _ensure_unique_names(self) -> "PromptConfig":
        names = [preset.name for preset in self.presets]
        duplicates = sorted({name for name in names if names.count(name) > 1})
        if duplicates:
            raise ValueError(f"Duplicate prompt preset names: {', '.join(duplicates)}")
        return self

    def lookup(self, name: str) -> PromptPreset:
        for preset in self.presets:
            if preset.name == name:
                return preset
        raise KeyError(name)


__all__ = ["DEFAULT_INSTRUCTION", "PromptConfig", "PromptPreset"]
