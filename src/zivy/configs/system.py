import os
from datetime import timedelta
from typing import Literal

from pydantic import BaseModel, Field

Provider = Literal["openai", "gemini", "assistant"]

DEFAULT_DOMAIN_KEYWORDS = [
    "travdif",
    "zivy",
    "travel",
    "trip",
    "package",
    "booking",
    "book",
    "price",
    "pricing",
    "cost",
    "discount",
    "refund",
    "order",
    "shipping",
    "store",
    "product",
    "contact",
    "support",
]

DEFAULT_FALLBACK_KNOWLEDGE = (
    "TravDif is an online travel store offering curated travel packages, "
    "travel gear and booking support. Customers can reach the TravDif support "
    "team through the contact form on travdif.com."
)


class LLMConfig(BaseModel):
    """Vendor and model selection."""

    provider: Provider = Field(
        default="openai",
        description="Which vendor relay to run: openai, gemini or assistant",
    )
    openai_api_key: str = Field(
        default_factory=lambda: os.environ.get("OPENAI_API_KEY", ""),
        description="OpenAI API key (falls back to OPENAI_API_KEY)",
    )
    google_api_key: str = Field(
        default_factory=lambda: os.environ.get("GOOGLE_API_KEY", ""),
        description="Google AI Studio key for Gemini (falls back to GOOGLE_API_KEY)",
    )
    model_name: str = Field(default="gpt-4o", description="Initial model name")
    allowed_models: list[str] = Field(
        default_factory=lambda: [
            "gpt-4o",
            "gpt-4o-mini",
            "gpt-4.1-mini",
            "gemini-2.0-flash",
            "gemini-1.5-flash",
        ],
        description="Models accepted by /admin/switch-model",
    )
    temperature: float = Field(default=0.7, description="Sampling temperature")
    max_tokens: int = Field(default=600, description="Maximum tokens per reply")
    model_timeout: timedelta = Field(
        default_factory=lambda: timedelta(seconds=60),
        description="Per-call vendor timeout. YAML may use seconds as int.",
    )
    max_retries: int = Field(
        default=0, description="Vendor SDK retry count (0 disables retries)"
    )

    @property
    def api_key(self) -> str:
        if self.provider == "gemini":
            return self.google_api_key
        return self.openai_api_key


class AssistantConfig(BaseModel):
    """OpenAI Assistants (file search) relay settings."""

    assistant_id: str = Field(
        default="",
        description="Reuse an existing assistant instead of creating one",
    )
    name: str = Field(default="Zivy", description="Assistant display name")
    vector_store_name: str = Field(
        default="zivy-knowledge", description="Vector store created for knowledge"
    )
    poll_interval: timedelta = Field(
        default_factory=lambda: timedelta(seconds=1),
        description="Delay between run status polls",
    )
    max_poll_attempts: int = Field(
        default=30, description="Run status polls before giving up"
    )


class KnowledgeConfig(BaseModel):
    """Static knowledge text loaded at startup."""

    directory: str = Field(default="knowledge", description="Knowledge directory")
    filename: str = Field(
        default="travdif_knowledge.txt", description="Knowledge file name"
    )
    fallback: str = Field(
        default=DEFAULT_FALLBACK_KNOWLEDGE,
        description="Text used when the knowledge file is missing",
    )

    @property
    def path(self) -> str:
        return os.path.join(self.directory, self.filename)


class PromptConfig(BaseModel):
    """Persona and keyword routing for system prompts."""

    assistant_name: str = Field(default="Zivy", description="Persona name")
    product_name: str = Field(default="TravDif", description="Business name")
    support_contact: str = Field(
        default="support@travdif.com",
        description="Contact shown to users for escalations",
    )
    domain_keywords: list[str] = Field(
        default_factory=lambda: list(DEFAULT_DOMAIN_KEYWORDS),
        description="Case-insensitive substrings that route to the domain prompt",
    )


class FallbackConfig(BaseModel):
    """User-facing replies for each vendor error kind.

    ``{name}`` and ``{contact}`` are substituted from ``PromptConfig``.
    """

    auth: str = "Sorry, {name} has a configuration issue right now. Please contact {contact}."
    quota: str = "{name} is very busy at the moment. Please try again in a minute."
    model_unavailable: str = "{name} is being updated. Please try again shortly."
    timeout: str = (
        "{name} is still processing your question. Please send it again in a moment."
    )
    unknown: str = "Sorry, {name} is having trouble right now."


class ModelPrice(BaseModel):
    input_per_million: float = Field(description="USD per 1M input tokens")
    output_per_million: float = Field(description="USD per 1M output tokens")


class PricingConfig(BaseModel):
    """Hardcoded per-million-token prices used for the cost estimate."""

    default: ModelPrice = Field(
        default_factory=lambda: ModelPrice(
            input_per_million=2.5, output_per_million=10.0
        )
    )
    models: dict[str, ModelPrice] = Field(
        default_factory=lambda: {
            "gpt-4o": ModelPrice(input_per_million=2.5, output_per_million=10.0),
            "gpt-4o-mini": ModelPrice(
                input_per_million=0.15, output_per_million=0.6
            ),
            "gpt-4.1-mini": ModelPrice(
                input_per_million=0.4, output_per_million=1.6
            ),
            "gemini-2.0-flash": ModelPrice(
                input_per_million=0.1, output_per_million=0.4
            ),
            "gemini-1.5-flash": ModelPrice(
                input_per_million=0.075, output_per_million=0.3
            ),
        }
    )
    notes: list[str] = Field(
        default_factory=lambda: [
            "Costs are estimated from characters / 4, not vendor tokenization.",
            "Switch to a mini/flash model from /admin/switch-model to cut cost.",
        ],
        description="Static notes echoed by /stats",
    )


class SessionConfig(BaseModel):
    """Visitor session to vendor thread map."""

    capacity: int = Field(
        default=1000, description="Max tracked sessions before FIFO eviction"
    )


class APIConfig(BaseModel):
    """HTTP surface settings."""

    admin_token: str = Field(
        default="",
        description="When set, admin routes require a matching X-Admin-Token",
    )


class CORSConfig(BaseModel):
    """CORS policy: wildcard or exact origin allow-list."""

    allow_all: bool = Field(default=False, description="Allow any origin")
    allow_origins: list[str] = Field(
        default_factory=lambda: [
            "https://travdif.com",
            "https://www.travdif.com",
            "http://localhost:3000",
        ],
        description="Exact Origin values allowed when allow_all is off",
    )


class LoggingConfig(BaseModel):
    level: str = Field(default="INFO", description="Root log level")
    json_output: bool = Field(default=True, description="Emit JSON log lines")


class TracingConfig(BaseModel):
    """OpenTelemetry OTLP exporter settings (disabled by default)."""

    enabled: bool = Field(default=False)
    endpoint: str = Field(default="", description="OTLP HTTP traces endpoint")
    service_name: str = Field(default="zivy")
    sample_rate: float = Field(default=1.0)
    excluded_urls: list[str] = Field(
        default_factory=lambda: ["/health", "/metrics"]
    )


class ServerConfig(BaseModel):
    host: str = Field(default="0.0.0.0", description="Bind host")
    port: int = Field(default=3000, description="Bind port")
    public_base_url: str = Field(
        default="", description="Externally visible base URL, logged at startup"
    )
