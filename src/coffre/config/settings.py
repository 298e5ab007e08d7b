"""
Coffre settings.

Values come from, highest priority first: environment variables (a
.env.<env> file is loaded into the environment), config/<env>.yaml,
config/default.yaml, then the field defaults below.
"""

import os
from ipaddress import ip_network
from pathlib import Path
from typing import List, Optional

import yaml
from dotenv import load_dotenv
from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

# Supported networks and their EIP-155 chain ids
CHAIN_IDS = {"mainnet": 1, "sepolia": 11155111, "holesky": 17000}


class Settings(BaseSettings):
    """
    Application settings with environment variable support.

    Secrets (JWT key, RPC credentials, explorer API key) should come from
    environment variables, not from YAML files.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="allow",
    )

    # Application
    APP_NAME: str = "Coffre"
    APP_VERSION: str = "0.1.0"
    ENV: str = Field(default="development", description="Environment name")
    DEBUG: bool = Field(default=False, description="Debug mode")

    # API Server
    API_HOST: str = Field(default="0.0.0.0")
    API_PORT: int = Field(default=8000, ge=1024, le=65535)
    API_RELOAD: bool = Field(default=False)

    # CORS Configuration
    CORS_ORIGINS: List[str] = Field(
        default=["http://localhost:3000"],
        description="Allowed CORS origins",
    )

    # Database (from environment - REQUIRED in production)
    DATABASE_URL: str = Field(..., description="Database connection URL")
    DATABASE_ECHO: bool = Field(default=False)

    # JWT Authentication (from environment - REQUIRED in production)
    JWT_SECRET_KEY: str = Field(..., description="JWT secret key")
    JWT_ALGORITHM: str = Field(default="HS256")
    JWT_EXPIRATION_HOURS: int = Field(default=24, ge=1)
    JWT_ISSUER: str = Field(default="coffre-api")
    JWT_AUDIENCE: str = Field(default="coffre")
    MAX_SESSIONS_PER_USER: int = Field(
        default=5,
        ge=1,
        description="Active sessions kept per wallet (oldest evicted)",
    )

    # Ethereum (from environment - REQUIRED in production)
    ETHEREUM_RPC_URL: str = Field(..., description="Ethereum JSON-RPC URL")
    ETHEREUM_NETWORK: str = Field(default="mainnet")
    ETHEREUM_CHAIN_ID: int = Field(default=1, ge=1)
    BLOCKCHAIN_QUERY_TIMEOUT: float = Field(
        default=15.0,
        description="Chain oracle per-call timeout in seconds",
    )

    # Etherscan
    ETHERSCAN_API_URL: str = Field(default="https://api.etherscan.io/api")
    ETHERSCAN_API_KEY: Optional[str] = Field(default=None)
    ETHERSCAN_TIMEOUT: float = Field(
        default=10.0,
        description="Etherscan request timeout in seconds",
    )

    # Transfer Simulation
    SIMULATION_RETENTION_HOURS: int = Field(
        default=24,
        ge=1,
        description="Simulation records expire this long after creation",
    )
    SIMULATION_EXECUTION_TIMEOUT: float = Field(
        default=30.0,
        description="Upper bound for one simulation execution in seconds",
    )
    SIMULATION_WORKERS: int = Field(
        default=4,
        ge=1,
        description="Concurrent simulation executions",
    )
    SIMULATION_SWEEP_INTERVAL_SECONDS: float = Field(
        default=300.0,
        ge=0.0,
        description="Expired simulation purge interval (0 disables sweeper)",
    )
    SIMULATION_DEFAULT_GAS_LIMIT: str = Field(default="21000")
    SIMULATION_DEFAULT_GAS_PRICE_GWEI: str = Field(
        default="20",
        description="Gas price used when neither caller nor network provide one",
    )
    SIMULATION_LIST_MAX_LIMIT: int = Field(default=50, ge=1)
    SIMULATION_STATS_WINDOW: int = Field(default=100, ge=1)

    # Logging
    LOG_LEVEL: str = Field(default="INFO")

    # Upstream resilience (chain oracle and explorer)
    CB_FAILURE_THRESHOLD: int = Field(
        default=5,
        ge=1,
        description="Consecutive upstream failures before the breaker opens",
    )
    CB_SUCCESS_THRESHOLD: int = Field(
        default=2,
        ge=1,
        description="Half-open probe successes needed to close again",
    )
    CB_TIMEOUT_SECONDS: float = Field(
        default=60.0,
        gt=0,
        description="Seconds an open breaker refuses calls",
    )
    RETRY_MAX_ATTEMPTS: int = Field(
        default=3,
        ge=1,
        description="Attempts per upstream call, first one included",
    )
    RETRY_INITIAL_DELAY: float = Field(default=0.5, ge=0)
    RETRY_MAX_DELAY: float = Field(default=5.0, ge=0)

    # Per-IP request throttling
    RATE_LIMIT_ENABLED: bool = Field(default=True)
    RATE_LIMIT_REQUESTS_PER_SECOND: float = Field(
        default=10.0,
        gt=0,
        description="Token refill rate per client IP",
    )
    RATE_LIMIT_BURST_SIZE: int = Field(
        default=20,
        ge=1,
        description="Token bucket capacity per client IP",
    )
    TRUSTED_PROXIES: List[str] = Field(
        default_factory=list,
        description="Proxy IPs or CIDRs whose X-Forwarded-For is honored",
    )

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"LOG_LEVEL must be one of {', '.join(LOG_LEVELS)}")
        return level

    @field_validator("ETHEREUM_NETWORK")
    @classmethod
    def validate_ethereum_network(cls, v: str) -> str:
        network = v.lower()
        if network not in CHAIN_IDS:
            raise ValueError(
                f"ETHEREUM_NETWORK must be one of {', '.join(CHAIN_IDS)}"
            )
        return network

    @field_validator("TRUSTED_PROXIES")
    @classmethod
    def validate_trusted_proxies(cls, v: List[str]) -> List[str]:
        for proxy in v:
            try:
                ip_network(proxy, strict=False)
            except ValueError:
                raise ValueError(f"TRUSTED_PROXIES entry is not an IP/CIDR: {proxy}")
        return v

    @model_validator(mode="after")
    def check_chain_id_matches_network(self) -> "Settings":
        """Reject a chain id that belongs to a different network."""
        expected = CHAIN_IDS[self.ETHEREUM_NETWORK]
        if self.ETHEREUM_CHAIN_ID != expected:
            raise ValueError(
                f"ETHEREUM_CHAIN_ID {self.ETHEREUM_CHAIN_ID} does not match "
                f"{self.ETHEREUM_NETWORK} (chain id {expected})"
            )
        return self


# environment -> (dotenv file, YAML overlay)
ENVIRONMENT_FILES = {
    "production": (".env.production", "production.yaml"),
    "development": (".env.development", "development.yaml"),
    "test": (".env.test", "test.yaml"),
}

PROJECT_ROOT = Path(__file__).resolve().parents[3]


def _read_yaml(path: Path) -> dict:
    if not path.exists():
        return {}
    with open(path, "r") as f:
        return yaml.safe_load(f) or {}


def load_config(
    config_file: Optional[str] = None,
    env_file: Optional[str] = None,
    env: Optional[str] = None,
) -> Settings:
    """
    Build Settings from config/*.yaml, a dotenv file and the environment.

    Priority: environment variables > config/<env>.yaml > config/default.yaml
    > field defaults. The dotenv file is loaded into the environment first,
    so its values count as environment variables.

    Args:
        config_file: YAML overlay under config/ (defaults per environment)
        env_file: dotenv file under the project root (defaults per environment)
        env: Environment name; falls back to $ENV, then "production"

    Returns:
        Settings instance

    Raises:
        ValidationError: If a required value is missing or invalid
    """
    environment = env or os.getenv("ENV", "production")
    default_env_file, default_config_file = ENVIRONMENT_FILES.get(
        environment, ENVIRONMENT_FILES["production"]
    )

    dotenv_path = PROJECT_ROOT / (env_file or default_env_file)
    if dotenv_path.exists():
        load_dotenv(dotenv_path, override=True)

    config_dir = PROJECT_ROOT / "config"
    values = _read_yaml(config_dir / "default.yaml")
    values.update(_read_yaml(config_dir / (config_file or default_config_file)))

    # pydantic-settings reads the environment itself; drop shadowed YAML keys
    for key in list(values):
        if key in os.environ:
            del values[key]

    return Settings(**values)


_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Process-wide settings, loaded on first use."""
    global _settings
    if _settings is None:
        _settings = load_config()
    return _settings


def override_settings(new_settings: Settings) -> None:
    """Replace the process-wide settings (tests)."""
    global _settings
    _settings = new_settings


def reset_settings() -> None:
    """Forget the process-wide settings so the next access reloads them."""
    global _settings
    _settings = None
