from heatsync.config.exceptions import ConfigurationError
from heatsync.config.settings import Settings
from heatsync.extraction.client_base import BaseExtractionClient
from heatsync.extraction.example_client_adapter import ExampleClientAdapter
from heatsync.extraction.extractor import HeatSheetExtractor
from heatsync.extraction.openai_client_adapter import OpenAIClientAdapter

SUPPORTED_PROVIDERS = ("example", "openai", "openai_compatible")


class ExtractionClientFactory:
    """Creates the configured extraction client and extractor."""

    @classmethod
    def create_client(cls, settings: Settings) -> BaseExtractionClient:
        provider = settings.llm_provider.lower()
        if provider == "example":
            return ExampleClientAdapter()
        if provider not in SUPPORTED_PROVIDERS:
            raise ConfigurationError(
                f"Unknown LLM provider '{provider}'. Choose from: {list(SUPPORTED_PROVIDERS)}"
            )
        if not settings.openai_api_key:
            raise ConfigurationError(f"openai_api_key is required for llm_provider={provider}")
        return OpenAIClientAdapter(
            api_key=settings.openai_api_key,
            timeout_seconds=settings.openai_timeout_seconds,
            base_url=cls._resolve_base_url(provider, settings),
        )

    @classmethod
    def create_extractor(cls, settings: Settings) -> HeatSheetExtractor:
        return HeatSheetExtractor(
            client=cls.create_client(settings),
            model=settings.openai_model_name,
            image_detail=settings.openai_image_detail,
            max_output_tokens=settings.openai_max_output_tokens,
        )

    @classmethod
    def _resolve_base_url(cls, provider: str, settings: Settings) -> str | None:
        url = (settings.openai_base_url or "").strip()
        if provider == "openai_compatible" and not url:
            raise ConfigurationError(
                "openai_base_url is required for llm_provider=openai_compatible"
            )
        return url or None
