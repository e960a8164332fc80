"""Configuration management for findip.

The YAML file uses camelCase keys and carries exactly one notifier:

    cron: "0 */5 * * * *"
    notifyOnChangeOnly: true
    services:
      - https://api.ipify.org/
    notifiers:
      - notifierType: File
        properties:
          overwrite: false
          filePath: /var/lib/findip/ip.txt
    loggingConfig:
      logLevel: debug
"""

import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Union

import yaml
from aiohttp import hdrs
from croniter import croniter

from findip.errors import InvalidInputError


DEFAULT_SERVICES = [
    "https://api.ipify.org/",
    "https://diagnostic.opendns.com/myip",
]

DEFAULT_LOG_FILE = "/tmp/ip_notifier.log"
DEFAULT_LOG_LEVEL = "info"

# Accepted logLevel values and the logging level each maps to.
LOG_LEVELS = {
    "off": logging.CRITICAL + 10,
    "error": logging.ERROR,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "info": logging.INFO,
    "debug": logging.DEBUG,
    "trace": logging.DEBUG,
}

ARN_PATTERN = re.compile(r"^arn:[\w-]+:[\w-]+:[\w-]*:\d*:.+$")


class NotifierType(Enum):
    """Notifier backends, valued by their config file names."""

    FILE = "File"
    S3 = "S3"
    REST_API = "RestApi"
    STDOUT = "Stdout"


@dataclass(frozen=True)
class FileNotifierConfig:
    """Write the IP address to a local file."""

    overwrite: bool
    file_path: str
    notifier_type: NotifierType = field(default=NotifierType.FILE, init=False)


@dataclass(frozen=True)
class S3NotifierConfig:
    """Upload the IP address to an S3 bucket under an assumed role."""

    access_key_id: str
    secret_access_key: str = field(repr=False)
    assume_role_arn: str
    region: str
    bucket_name: str
    notifier_type: NotifierType = field(default=NotifierType.S3, init=False)


@dataclass(frozen=True)
class RestApiNotifierConfig:
    """Call a REST endpoint with the IP address templated in."""

    url: str
    method: str
    body: dict[str, str] = field(default_factory=dict)
    headers: dict[str, str] = field(default_factory=dict)
    notifier_type: NotifierType = field(default=NotifierType.REST_API, init=False)


@dataclass(frozen=True)
class StdoutNotifierConfig:
    """Print the IP address to the console."""

    notifier_type: NotifierType = field(default=NotifierType.STDOUT, init=False)


NotifierConfig = Union[
    FileNotifierConfig,
    S3NotifierConfig,
    RestApiNotifierConfig,
    StdoutNotifierConfig,
]


@dataclass(frozen=True)
class LoggingConfig:
    """Log sink configuration."""

    log_file: str = DEFAULT_LOG_FILE
    log_level: str = DEFAULT_LOG_LEVEL
    decorate: bool = True


@dataclass(frozen=True)
class Config:
    """Run configuration, built once at startup."""

    cron: str
    notify_on_change_only: bool
    notifier: NotifierConfig
    services: list[str] = field(default_factory=lambda: DEFAULT_SERVICES.copy())
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def get_config_path(custom_path: Path | None = None) -> Path:
    """Get the configuration file path.

    Args:
        custom_path: Override path. If None, returns default.

    Returns:
        Path to config file.
    """
    if custom_path is not None:
        return custom_path
    return Path.home() / ".config" / "findip" / "config.yaml"


def _default_file_reader(path: Path) -> dict[str, Any] | None:
    """Default file reader that loads YAML from disk."""
    if not path.exists():
        raise InvalidInputError(f"config file not found: {path}")
    try:
        content = path.read_text()
        if not content.strip():
            return None
        return yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise InvalidInputError(f"config file {path} is not valid YAML: {e}")


def load_config(
    path: Path | None = None,
    file_reader: Callable[[Path], dict[str, Any] | None] | None = None,
) -> Config:
    """Load and validate configuration from file.

    Args:
        path: Path to config file. If None, uses default path.
        file_reader: Injectable file reader for testing.

    Returns:
        Validated Config.

    Raises:
        InvalidInputError: If the file is missing, malformed or invalid.
    """
    config_path = get_config_path(path)
    reader = file_reader or _default_file_reader

    data = reader(config_path)
    if data is None:
        raise InvalidInputError(f"config file {config_path} is empty")

    return parse_config(data)


def parse_config(data: Any) -> Config:
    """Build a Config from already-decoded YAML data."""
    if not isinstance(data, dict):
        raise InvalidInputError("config must be a mapping")

    cron = _require(data, "cron", str, "config")
    if not croniter.is_valid(cron):
        raise InvalidInputError(f"cron expression is not valid: {cron!r}")

    notify_on_change_only = _require(data, "notifyOnChangeOnly", bool, "config")

    services = data.get("services", DEFAULT_SERVICES.copy())
    if not isinstance(services, list) or not services:
        raise InvalidInputError("services must be a non-empty list")
    if not all(isinstance(s, str) and s.strip() for s in services):
        raise InvalidInputError("services must only contain non-empty strings")

    notifiers = data.get("notifiers")
    if not isinstance(notifiers, list) or len(notifiers) != 1:
        raise InvalidInputError("notifiers must contain exactly one entry")

    return Config(
        cron=cron,
        notify_on_change_only=notify_on_change_only,
        notifier=parse_notifier(notifiers[0]),
        services=[s.strip() for s in services],
        logging=parse_logging_config(data.get("loggingConfig")),
    )


def parse_notifier(data: Any) -> NotifierConfig:
    """Build a notifier config from a ``{notifierType, properties}`` entry."""
    if not isinstance(data, dict):
        raise InvalidInputError("notifier entry must be a mapping")

    raw_type = data.get("notifierType")
    try:
        notifier_type = NotifierType(raw_type)
    except ValueError:
        raise InvalidInputError(f"unknown notifierType: {raw_type!r}")

    if notifier_type is NotifierType.STDOUT:
        return StdoutNotifierConfig()

    props = data.get("properties")
    if not isinstance(props, dict):
        raise InvalidInputError(f"{notifier_type.value} notifier requires properties")

    if notifier_type is NotifierType.FILE:
        return FileNotifierConfig(
            overwrite=_require(props, "overwrite", bool, "File"),
            file_path=_require(props, "filePath", str, "File"),
        )

    if notifier_type is NotifierType.S3:
        role_arn = _require(props, "assumeRoleArn", str, "S3")
        if not ARN_PATTERN.match(role_arn):
            raise InvalidInputError(f"assumeRoleArn is not a valid ARN: {role_arn!r}")
        return S3NotifierConfig(
            access_key_id=_require(props, "accessKeyId", str, "S3"),
            secret_access_key=_require(props, "secretAccessKey", str, "S3"),
            assume_role_arn=role_arn,
            region=_require(props, "region", str, "S3"),
            bucket_name=_require(props, "bucketName", str, "S3"),
        )

    method = _require(props, "method", str, "RestApi").upper()
    if method not in hdrs.METH_ALL:
        raise InvalidInputError(f"unsupported HTTP method: {method!r}")
    return RestApiNotifierConfig(
        url=_require(props, "url", str, "RestApi"),
        method=method,
        body=_string_map(props.get("body"), "body"),
        headers=_string_map(props.get("headers"), "headers"),
    )


def parse_logging_config(data: Any) -> LoggingConfig:
    """Build LoggingConfig, filling in defaults for missing fields."""
    if data is None:
        return LoggingConfig()
    if not isinstance(data, dict):
        raise InvalidInputError("loggingConfig must be a mapping")

    log_level = str(data.get("logLevel", LoggingConfig.log_level)).lower()
    if log_level not in LOG_LEVELS:
        raise InvalidInputError(f"unknown logLevel: {log_level!r}")

    decorate = data.get("decorate", LoggingConfig.decorate)
    if not isinstance(decorate, bool):
        raise InvalidInputError("loggingConfig.decorate must be a boolean")

    return LoggingConfig(
        log_file=str(data.get("logFile", LoggingConfig.log_file)),
        log_level=log_level,
        decorate=decorate,
    )


def _require(data: dict[str, Any], key: str, kind: type, where: str) -> Any:
    """Fetch a required key and check its type."""
    if key not in data or data[key] is None:
        raise InvalidInputError(f"{where}: missing required field {key!r}")
    value = data[key]
    if not isinstance(value, kind):
        raise InvalidInputError(
            f"{where}: field {key!r} must be of type {kind.__name__}"
        )
    return value


def _string_map(data: Any, name: str) -> dict[str, str]:
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise InvalidInputError(f"RestApi: {name} must be a mapping")
    result = {}
    for k, v in data.items():
        if v is None:
            raise InvalidInputError(f"RestApi: {name} value for {k!r} is empty")
        if isinstance(v, bool):
            v = "true" if v else "false"
        elif isinstance(v, (dict, list)):
            raise InvalidInputError(f"RestApi: {name} value for {k!r} must be a scalar")
        result[str(k)] = str(v)
    return result
