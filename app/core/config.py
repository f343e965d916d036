import os
from typing import Mapping, Optional
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

class ConfigError(Exception):
    """Raised when an environment value cannot be turned into settings."""

def _env(environ: Mapping[str, str], name: str, default: str) -> str:
    value = environ.get(name)
    return value if value is not None else default

def _check_port(value: str) -> str:
    if not (value.isascii() and value.isdigit()) or not 1 <= int(value) <= 65535:
        raise ValueError("port must be a number between 1 and 65535")
    return value

class _FrozenSettings(BaseModel):
    model_config = ConfigDict(frozen=True)

    @classmethod
    def _build(cls, env_names: Mapping[str, str], **values):
        """Validate values, reporting failures by the env var they came from."""
        try:
            return cls(**values)
        except ValidationError as e:
            problems = []
            for err in e.errors():
                field = str(err["loc"][0]) if err["loc"] else "?"
                name = env_names.get(field, field)
                problems.append(f"{name}={values.get(field)!r}: {err['msg']}")
            raise ConfigError("; ".join(problems)) from e

class ProducerSettings(_FrozenSettings):
    service_name: str = "producer"
    port: int = Field(8080, ge=1, le=65535)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "ProducerSettings":
        environ = os.environ if environ is None else environ
        return cls._build(
            {"port": "PORT"},
            port=_env(environ, "PORT", "8080"),
        )

class ProcessorSettings(_FrozenSettings):
    service_name: str = "processor"
    port: int = Field(8081, ge=1, le=65535)
    producer_host: str = Field("producer", min_length=1)
    producer_port: str = "8080"
    request_timeout: float = Field(5.0, gt=0)

    @field_validator("producer_port")
    @classmethod
    def check_producer_port(cls, value: str) -> str:
        return _check_port(value)

    @property
    def producer_url(self) -> str:
        return f"http://{self.producer_host}:{self.producer_port}"

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "ProcessorSettings":
        environ = os.environ if environ is None else environ
        return cls._build(
            {
                "port": "PORT",
                "producer_host": "PRODUCER_HOST",
                "producer_port": "PRODUCER_PORT",
                "request_timeout": "REQUEST_TIMEOUT_SECONDS",
            },
            port=_env(environ, "PORT", "8081"),
            producer_host=_env(environ, "PRODUCER_HOST", "producer"),
            producer_port=_env(environ, "PRODUCER_PORT", "8080"),
            request_timeout=_env(environ, "REQUEST_TIMEOUT_SECONDS", "5"),
        )

class ConsumerSettings(_FrozenSettings):
    service_name: str = "consumer"
    port: int = Field(8082, ge=1, le=65535)
    processor_host: str = Field("processor", min_length=1)
    processor_port: str = "8081"
    poll_interval_seconds: int = Field(5, ge=1)
    request_timeout: float = Field(5.0, gt=0)
    # Only delays the first poll so its log lines follow the server banner.
    startup_delay: float = Field(1.0, ge=0)

    @field_validator("processor_port")
    @classmethod
    def check_processor_port(cls, value: str) -> str:
        return _check_port(value)

    @property
    def processor_url(self) -> str:
        return f"http://{self.processor_host}:{self.processor_port}"

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "ConsumerSettings":
        environ = os.environ if environ is None else environ
        return cls._build(
            {
                "port": "PORT",
                "processor_host": "PROCESSOR_HOST",
                "processor_port": "PROCESSOR_PORT",
                "poll_interval_seconds": "POLL_INTERVAL_SECONDS",
                "request_timeout": "REQUEST_TIMEOUT_SECONDS",
                "startup_delay": "STARTUP_DELAY_SECONDS",
            },
            port=_env(environ, "PORT", "8082"),
            processor_host=_env(environ, "PROCESSOR_HOST", "processor"),
            processor_port=_env(environ, "PROCESSOR_PORT", "8081"),
            poll_interval_seconds=_env(environ, "POLL_INTERVAL_SECONDS", "5"),
            request_timeout=_env(environ, "REQUEST_TIMEOUT_SECONDS", "5"),
            startup_delay=_env(environ, "STARTUP_DELAY_SECONDS", "1"),
        )
