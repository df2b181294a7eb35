import pytest

from heatsync.extraction.dispatcher import InputStrategy, ModelDispatcher


class TestModelDispatcher:
    @pytest.mark.parametrize("model", ["gpt-4o", "gpt-4o-mini", "gpt-4.1", "o3-mini", "GPT-4O"])
    def test_known_family_uses_native_file(self, model: str) -> None:
        assert ModelDispatcher().strategy_for(model) is InputStrategy.NATIVE_FILE

    @pytest.mark.parametrize("model", ["llava-13b", "claude-3-haiku", "", "mystery-model"])
    def test_other_models_use_rendered_images(self, model: str) -> None:
        assert ModelDispatcher().strategy_for(model) is InputStrategy.RENDERED_IMAGES

    def test_strips_router_prefix(self) -> None:
        assert ModelDispatcher().supports_native_file("openai/gpt-4o")

    def test_custom_prefixes(self) -> None:
        dispatcher = ModelDispatcher(native_file_prefixes=("my-model",))
        assert dispatcher.supports_native_file("my-model-v2")
        assert not dispatcher.supports_native_file("gpt-4o")

    @pytest.mark.parametrize("model", ["o1", "o3-mini", "o4-mini", "gpt-5", "openai/gpt-5-mini"])
    def test_reasoning_models_keep_default_temperature(self, model: str) -> None:
        assert not ModelDispatcher().accepts_temperature(model)

    @pytest.mark.parametrize("model", ["gpt-4o", "gpt-4.1-mini", "llava-13b"])
    def test_other_models_accept_temperature(self, model: str) -> None:
        assert ModelDispatcher().accepts_temperature(model)
