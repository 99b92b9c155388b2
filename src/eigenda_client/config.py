from pydantic import BaseModel, Field, ValidationError, model_validator
from typing import Optional
import yaml
import os

from eigenda_client.errors import ConfigurationError
from eigenda_client.parser import ParsePolicy
from eigenda_client.payload import PayloadVersion
from eigenda_client.retry import PollPolicy

DEFAULT_SERVER_ADDRESS = "disperser-holesky.eigenda.xyz:443"
DEFAULT_PROTO_PATH = "eigenda/api/proto"
DEFAULT_DISPERSER_PROTO = "disperser/disperser.proto"


class DisperserConfig(BaseModel):
    server_address: str = DEFAULT_SERVER_ADDRESS
    proto_path: str = DEFAULT_PROTO_PATH # grpcurl -import-path
    disperser_proto: str = DEFAULT_DISPERSER_PROTO # relative to proto_path
    grpcurl_path: str = "grpcurl"
    plaintext: bool = False
    max_time: Optional[float] = None
    payload_version: PayloadVersion = PayloadVersion.V2
    transport_retries: int = Field(default=0, ge=0)
    retry_delay_seconds: float = Field(default=1.0, ge=0)

class SecurityConfig(BaseModel):
    quorum_id: int = Field(default=0, ge=0, le=255)
    adversary_threshold: int = 40
    quorum_threshold: int = 60

    @model_validator(mode="after")
    def _check_thresholds(self):
        if not 0 <= self.adversary_threshold < self.quorum_threshold <= 100:
            raise ValueError(
                "thresholds must satisfy 0 <= adversary_threshold < quorum_threshold <= 100"
            )
        return self

class PollingConfig(BaseModel):
    interval_seconds: float = Field(default=30.0, ge=0)
    max_attempts: Optional[int] = Field(default=120, ge=1)
    timeout_seconds: Optional[float] = Field(default=None, gt=0)

    @model_validator(mode="after")
    def _check_bounded(self):
        if self.max_attempts is None and self.timeout_seconds is None:
            raise ValueError("polling needs max_attempts or timeout_seconds")
        return self

    def to_policy(self) -> PollPolicy:
        return PollPolicy(
            interval=self.interval_seconds,
            max_attempts=self.max_attempts,
            timeout=self.timeout_seconds,
        )

class CacheConfig(BaseModel):
    capacity: int = Field(default=1024, ge=1)

class ParsingConfig(BaseModel):
    on_error: ParsePolicy = ParsePolicy.USE_DEFAULT
    validate_proofs: bool = False

class MonitoringConfig(BaseModel):
    prometheus_port: int = 9090
    log_level: str = "INFO"
    json_logs: bool = True

class ClientConfig(BaseModel):
    """Settings for one DisperserClient.

    Invalid values raise pydantic's ValidationError when the model is built
    directly; load_config reports them as ConfigurationError.
    """

    disperser: DisperserConfig = Field(default_factory=DisperserConfig)
    security: SecurityConfig = Field(default_factory=SecurityConfig)
    polling: PollingConfig = Field(default_factory=PollingConfig)
    cache: CacheConfig = Field(default_factory=CacheConfig)
    parsing: ParsingConfig = Field(default_factory=ParsingConfig)
    monitoring: MonitoringConfig = Field(default_factory=MonitoringConfig)

class Config(BaseModel):
    client: ClientConfig = Field(default_factory=ClientConfig)

def load_config(config_path: Optional[str] = None) -> Config:
    config_data = {}
    if config_path and os.path.exists(config_path):
        with open(config_path, 'r') as f:
            config_data = yaml.safe_load(f) or {}
        if not isinstance(config_data, dict):
            raise ConfigurationError(f"Configuration file {config_path} must contain a mapping")

    # Environment variables override YAML values; pydantic coerces the strings
    env_overrides = {
        "EIGENDA_SERVER_ADDRESS": "client.disperser.server_address",
        "EIGENDA_PROTO_PATH": "client.disperser.proto_path",
        "EIGENDA_PAYLOAD_VERSION": "client.disperser.payload_version",
        "EIGENDA_QUORUM_ID": "client.security.quorum_id",
        "EIGENDA_ADVERSARY_THRESHOLD": "client.security.adversary_threshold",
        "EIGENDA_QUORUM_THRESHOLD": "client.security.quorum_threshold",
        "EIGENDA_POLL_INTERVAL": "client.polling.interval_seconds",
        "EIGENDA_POLL_MAX_ATTEMPTS": "client.polling.max_attempts",
        "EIGENDA_CACHE_CAPACITY": "client.cache.capacity",
        "EIGENDA_LOG_LEVEL": "client.monitoring.log_level",
    }

    for env_var, config_key in env_overrides.items():
        if env_var in os.environ:
            value = os.environ[env_var]
            keys = config_key.split('.')
            current_dict = config_data
            for i, key in enumerate(keys):
                if i == len(keys) - 1:
                    current_dict[key] = value
                else:
                    if key not in current_dict or not isinstance(current_dict[key], dict):
                        current_dict[key] = {}
                    current_dict = current_dict[key]

    try:
        return Config(**config_data)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration: {e}") from e
