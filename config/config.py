import os
from pathlib import Path

from dotenv import load_dotenv

CONFIG_DIR = Path(__file__).parent

GENERATION_KEY_VARS = (
    "OPENROUTER_API_KEY",
    "HUGGINGFACE_API_KEY",
    "GROQ_API_KEY",
    "GOOGLE_GEMINI_API_KEY",
)


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return int(raw)


def _float_env(name: str, default: float | None) -> float | None:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return float(raw)


class Config:
    """Configuration management for the research engine."""

    def __init__(self):
        """Initialize configuration with environment variables."""
        env_path = CONFIG_DIR.parent / ".env"
        if env_path.exists():
            load_dotenv(dotenv_path=env_path)

        # Generation providers
        self.OPENROUTER_API_KEY = os.getenv("OPENROUTER_API_KEY")
        self.HUGGINGFACE_API_KEY = os.getenv("HUGGINGFACE_API_KEY")
        self.GROQ_API_KEY = os.getenv("GROQ_API_KEY")
        self.GOOGLE_GEMINI_API_KEY = os.getenv("GOOGLE_GEMINI_API_KEY")

        # Web search engines
        self.BRAVE_API_KEY = os.getenv("BRAVE_API_KEY")
        self.TAVILY_API_KEY = os.getenv("TAVILY_API_KEY")
        self.ENABLE_DUCKDUCKGO = os.getenv("ENABLE_DUCKDUCKGO", "true").lower() == "true"

        # Routing
        self.PROVIDER_REGISTRY_PATH = os.getenv(
            "PROVIDER_REGISTRY_PATH", str(CONFIG_DIR / "provider_registry.yaml")
        )
        self.PROVIDER_COOLDOWN_SECONDS = _float_env("PROVIDER_COOLDOWN_SECONDS", None)
        self.PROVIDER_TIMEOUT_S = _float_env("PROVIDER_TIMEOUT_S", 60.0)

        # Archives and snapshots
        self.ARCHIVE_CATALOG_PATH = os.getenv(
            "ARCHIVE_CATALOG_PATH", str(CONFIG_DIR / "archive_catalog.yaml")
        )
        self.SNAPSHOT_TIMEOUT_S = _float_env("SNAPSHOT_TIMEOUT_S", 15.0)
        self.SNAPSHOT_DOMAINS = [
            d.strip()
            for d in os.getenv(
                "SNAPSHOT_DOMAINS",
                "cia.gov,fbi.gov,archives.gov,nsa.gov,whitehouse.gov,defense.gov,state.gov",
            ).split(",")
            if d.strip()
        ]

        # Web aggregation
        self.WEB_ENGINE_TIMEOUT_S = _float_env("WEB_ENGINE_TIMEOUT_S", 10.0)
        self.WEB_CACHE_TTL_SECONDS = _int_env("WEB_CACHE_TTL_SECONDS", 900)

        # Conversation + request
        self.MAX_CONTEXT_MESSAGES = _int_env("MAX_CONTEXT_MESSAGES", 10)
        self.REQUEST_DEADLINE_S = _float_env("REQUEST_DEADLINE_S", None)

    def validate(self) -> bool:
        """
        Check that at least one generation provider has credentials.

        Returns:
            bool: True if a provider key is set, False otherwise
        """
        if not any(os.getenv(var) for var in GENERATION_KEY_VARS):
            print(
                "Error: no AI provider key is set. Set one of "
                f"{', '.join(GENERATION_KEY_VARS)} in the .env file."
            )
            return False
        return True

    def get_engine_info(self) -> str:
        engines = []
        if self.ENABLE_DUCKDUCKGO:
            engines.append("duckduckgo")
        if self.BRAVE_API_KEY:
            engines.append("brave")
        if self.TAVILY_API_KEY:
            engines.append("tavily")
        return ", ".join(engines) or "none"
