from enum import Enum
from typing import ClassVar


class InputStrategy(str, Enum):
    """How the heat sheet is presented to the model."""

    NATIVE_FILE = "native_file"
    RENDERED_IMAGES = "rendered_images"


class ModelDispatcher:
    """Chooses the input strategy for a configured model.

    Models in a known family accept a direct reference to an uploaded PDF;
    everything else, including unrecognized names, gets rendered page images.
    """

    NATIVE_FILE_MODEL_PREFIXES: ClassVar[tuple[str, ...]] = (
        "gpt-4o",
        "gpt-4.1",
        "gpt-5",
        "o1",
        "o3",
        "o4",
    )

    # Reasoning models reject any temperature other than the default.
    FIXED_TEMPERATURE_MODEL_PREFIXES: ClassVar[tuple[str, ...]] = ("gpt-5", "o1", "o3", "o4")

    def __init__(self, native_file_prefixes: tuple[str, ...] | None = None) -> None:
        self._prefixes = (
            native_file_prefixes
            if native_file_prefixes is not None
            else self.NATIVE_FILE_MODEL_PREFIXES
        )

    def strategy_for(self, model: str) -> InputStrategy:
        if self.supports_native_file(model):
            return InputStrategy.NATIVE_FILE
        return InputStrategy.RENDERED_IMAGES

    def supports_native_file(self, model: str) -> bool:
        name = _bare_model_name(model)
        return any(name.startswith(prefix) for prefix in self._prefixes)

    def accepts_temperature(self, model: str) -> bool:
        name = _bare_model_name(model)
        return not any(name.startswith(p) for p in self.FIXED_TEMPERATURE_MODEL_PREFIXES)


def _bare_model_name(model: str) -> str:
    # "openai/gpt-4o" style names from OpenAI-compatible routers
    return model.strip().lower().rsplit("/", 1)[-1]
