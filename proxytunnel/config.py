from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .errors import ConfigError


class ProxyConfig(BaseModel):
    """Where the proxy lives and which extra headers go on the CONNECT request."""

    model_config = ConfigDict(frozen=True)

    host: str = Field(min_length=1)
    port: int = Field(default=8080, ge=1, le=65535)
    headers: dict[str, str] = Field(default_factory=dict)
    timeout: float | None = Field(default=10.0, gt=0)
    read_chunk_size: int = Field(default=4096, gt=0)
    max_response_size: int = Field(default=65536, gt=0)


def load_config(path: str | Path) -> ProxyConfig:
    path = Path(path)
    try:
        return ProxyConfig.model_validate_json(path.read_text())
    except FileNotFoundError as e:
        raise ConfigError(f"Config file '{path}' not found.") from e
    except OSError as e:
        raise ConfigError(f"Cannot read config file '{path}': {e}") from e
    except ValidationError as e:
        raise ConfigError(f"Invalid proxy config in '{path}': {e}") from e
