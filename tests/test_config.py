"""Tests for config module."""

from pathlib import Path
from unittest.mock import Mock

import pytest
import yaml

from findip.config import (
    DEFAULT_SERVICES,
    Config,
    FileNotifierConfig,
    LoggingConfig,
    NotifierType,
    RestApiNotifierConfig,
    S3NotifierConfig,
    StdoutNotifierConfig,
    get_config_path,
    load_config,
    parse_config,
)
from findip.errors import InvalidInputError


ROLE_ARN = "arn:aws:iam::123456789012:role/namespace/assume-role"


def base_config(**overrides):
    """Minimal valid config data with a Stdout notifier."""
    data = {
        "cron": "0 */5 * * *",
        "notifyOnChangeOnly": True,
        "notifiers": [{"notifierType": "Stdout"}],
    }
    data.update(overrides)
    return data


def write_config(tmp_path, data) -> Path:
    config_file = tmp_path / "config.yaml"
    config_file.write_text(yaml.dump(data))
    return config_file


class TestGetConfigPath:
    """Test config path resolution."""

    def test_get_config_path_default(self):
        """Default config path is ~/.config/findip/config.yaml."""
        path = get_config_path()
        assert path == Path.home() / ".config" / "findip" / "config.yaml"

    def test_get_config_path_custom(self):
        """Can override config path."""
        custom = Path("/custom/config.yaml")
        assert get_config_path(custom) == custom


class TestLoadConfig:
    """Test config loading from disk."""

    def test_load_config_from_file(self, tmp_path):
        """Config loads values from YAML file."""
        config = load_config(write_config(tmp_path, base_config()))

        assert config.cron == "0 */5 * * *"
        assert config.notify_on_change_only is True
        assert config.notifier == StdoutNotifierConfig()

    def test_missing_file_is_invalid(self, tmp_path):
        """A missing config file is a startup error."""
        with pytest.raises(InvalidInputError, match="not found"):
            load_config(tmp_path / "nonexistent.yaml")

    def test_invalid_yaml_is_invalid(self, tmp_path):
        """Unparsable YAML is a startup error."""
        config_file = tmp_path / "config.yaml"
        config_file.write_text("invalid: yaml: content: [")

        with pytest.raises(InvalidInputError, match="not valid YAML"):
            load_config(config_file)

    def test_empty_file_is_invalid(self, tmp_path):
        """An empty file is a startup error."""
        config_file = tmp_path / "config.yaml"
        config_file.write_text("")

        with pytest.raises(InvalidInputError, match="empty"):
            load_config(config_file)

    def test_load_config_with_injectable_reader(self, tmp_path):
        """Config loading supports injectable file reader for testing."""
        mock_reader = Mock(return_value=base_config(cron="*/10 * * * *"))

        config = load_config(tmp_path / "config.yaml", file_reader=mock_reader)

        assert config.cron == "*/10 * * * *"
        mock_reader.assert_called_once_with(tmp_path / "config.yaml")


class TestServices:
    """Test the services list."""

    def test_missing_services_use_defaults(self):
        config = parse_config(base_config())

        assert config.services == DEFAULT_SERVICES
        assert config.services == [
            "https://api.ipify.org/",
            "https://diagnostic.opendns.com/myip",
        ]

    def test_default_services_are_not_shared(self):
        """Each config gets its own copy of the default list."""
        config = parse_config(base_config())
        config.services.append("https://example.com")

        assert parse_config(base_config()).services == DEFAULT_SERVICES

    def test_included_services(self):
        config = parse_config(base_config(services=["https://ipinfo.io/ip"]))

        assert config.services == ["https://ipinfo.io/ip"]

    def test_empty_services_rejected(self):
        with pytest.raises(InvalidInputError, match="services"):
            parse_config(base_config(services=[]))

    def test_non_string_services_rejected(self):
        with pytest.raises(InvalidInputError, match="services"):
            parse_config(base_config(services=["https://ipinfo.io/ip", 42]))


class TestRequiredFields:
    """Test top-level validation."""

    @pytest.mark.parametrize("key", ["cron", "notifyOnChangeOnly"])
    def test_required_keys(self, key):
        data = base_config()
        del data[key]

        with pytest.raises(InvalidInputError, match=key):
            parse_config(data)

    def test_invalid_cron_rejected(self):
        with pytest.raises(InvalidInputError, match="cron"):
            parse_config(base_config(cron="every five minutes"))

    def test_cron_with_seconds_accepted(self):
        config = parse_config(base_config(cron="*/5 * * * * 30"))

        assert config.cron == "*/5 * * * * 30"

    def test_notify_flag_must_be_bool(self):
        with pytest.raises(InvalidInputError, match="bool"):
            parse_config(base_config(notifyOnChangeOnly="yes"))

    def test_config_must_be_mapping(self):
        with pytest.raises(InvalidInputError):
            parse_config(["not", "a", "mapping"])


class TestNotifierCount:
    """Exactly one notifier must be configured."""

    def test_no_notifiers(self):
        with pytest.raises(InvalidInputError, match="exactly one"):
            parse_config(base_config(notifiers=[]))

    def test_missing_notifiers(self):
        data = base_config()
        del data["notifiers"]

        with pytest.raises(InvalidInputError, match="exactly one"):
            parse_config(data)

    def test_two_notifiers(self):
        notifiers = [{"notifierType": "Stdout"}, {"notifierType": "Stdout"}]

        with pytest.raises(InvalidInputError, match="exactly one"):
            parse_config(base_config(notifiers=notifiers))


class TestNotifierParsing:
    """Test each notifier variant."""

    def test_stdout_notifier(self):
        config = parse_config(base_config())

        assert isinstance(config.notifier, StdoutNotifierConfig)
        assert config.notifier.notifier_type is NotifierType.STDOUT

    def test_file_notifier(self):
        notifier = {
            "notifierType": "File",
            "properties": {"overwrite": False, "filePath": "testfile.log"},
        }
        config = parse_config(base_config(notifiers=[notifier]))

        assert config.notifier == FileNotifierConfig(
            overwrite=False, file_path="testfile.log"
        )
        assert config.notifier.notifier_type is NotifierType.FILE

    def test_s3_notifier(self):
        notifier = {
            "notifierType": "S3",
            "properties": {
                "accessKeyId": "something",
                "secretAccessKey": "shhh",
                "assumeRoleArn": ROLE_ARN,
                "region": "us-west-2",
                "bucketName": "bucketName",
            },
        }
        config = parse_config(base_config(notifiers=[notifier]))

        assert config.notifier == S3NotifierConfig(
            access_key_id="something",
            secret_access_key="shhh",
            assume_role_arn=ROLE_ARN,
            region="us-west-2",
            bucket_name="bucketName",
        )

    def test_s3_secret_not_in_repr(self):
        notifier = S3NotifierConfig(
            access_key_id="id",
            secret_access_key="shhh",
            assume_role_arn=ROLE_ARN,
            region="us-west-2",
            bucket_name="bucket",
        )

        assert "shhh" not in repr(notifier)

    def test_s3_invalid_arn_rejected(self):
        notifier = {
            "notifierType": "S3",
            "properties": {
                "accessKeyId": "something",
                "secretAccessKey": "shhh",
                "assumeRoleArn": "not-an-arn",
                "region": "us-west-2",
                "bucketName": "bucketName",
            },
        }

        with pytest.raises(InvalidInputError, match="ARN"):
            parse_config(base_config(notifiers=[notifier]))

    def test_rest_notifier(self):
        notifier = {
            "notifierType": "RestApi",
            "properties": {
                "url": "https://something.com/some/api",
                "method": "post",
                "body": {"ip": "{{TOKEN_IP_ADDRESS}}"},
                "headers": {
                    "Authorization": "Bearer mysecrettoken",
                    "Content-Type": "application/json",
                },
            },
        }
        config = parse_config(base_config(notifiers=[notifier]))

        assert isinstance(config.notifier, RestApiNotifierConfig)
        assert config.notifier.url == "https://something.com/some/api"
        assert config.notifier.method == "POST"
        assert config.notifier.body == {"ip": "{{TOKEN_IP_ADDRESS}}"}
        assert config.notifier.headers["Authorization"] == "Bearer mysecrettoken"
        assert config.notifier.headers["Content-Type"] == "application/json"

    def test_rest_notifier_defaults_body_and_headers(self):
        notifier = {
            "notifierType": "RestApi",
            "properties": {"url": "https://example.com", "method": "GET"},
        }
        config = parse_config(base_config(notifiers=[notifier]))

        assert config.notifier.body == {}
        assert config.notifier.headers == {}

    def test_rest_notifier_scalar_values_use_yaml_spelling(self):
        notifier = {
            "notifierType": "RestApi",
            "properties": {
                "url": "https://example.com",
                "method": "POST",
                "body": {"ip": "{{TOKEN_IP_ADDRESS}}", "flag": True, "count": 3},
                "headers": {"X-Debug": False},
            },
        }
        config = parse_config(base_config(notifiers=[notifier]))

        assert config.notifier.body == {
            "ip": "{{TOKEN_IP_ADDRESS}}",
            "flag": "true",
            "count": "3",
        }
        assert config.notifier.headers == {"X-Debug": "false"}

    @pytest.mark.parametrize("field", ["body", "headers"])
    def test_rest_notifier_null_value_rejected(self, field):
        notifier = {
            "notifierType": "RestApi",
            "properties": {
                "url": "https://example.com",
                "method": "POST",
                field: {"note": None},
            },
        }

        with pytest.raises(InvalidInputError, match="note"):
            parse_config(base_config(notifiers=[notifier]))

    def test_rest_notifier_unknown_method(self):
        notifier = {
            "notifierType": "RestApi",
            "properties": {"url": "https://example.com", "method": "FETCH"},
        }

        with pytest.raises(InvalidInputError, match="method"):
            parse_config(base_config(notifiers=[notifier]))

    def test_unknown_notifier_type(self):
        with pytest.raises(InvalidInputError, match="notifierType"):
            parse_config(base_config(notifiers=[{"notifierType": "Carrier"}]))

    def test_missing_properties(self):
        with pytest.raises(InvalidInputError, match="properties"):
            parse_config(base_config(notifiers=[{"notifierType": "File"}]))

    def test_missing_property_field(self):
        notifier = {"notifierType": "File", "properties": {"overwrite": True}}

        with pytest.raises(InvalidInputError, match="filePath"):
            parse_config(base_config(notifiers=[notifier]))


class TestLoggingConfig:
    """Test logging configuration loading."""

    def test_defaults_when_missing(self):
        config = parse_config(base_config())

        assert config.logging == LoggingConfig()
        assert config.logging.log_file == "/tmp/ip_notifier.log"
        assert config.logging.log_level == "info"
        assert config.logging.decorate is True

    def test_full_logging_config(self):
        logging_config = {
            "logFile": "./var/log/notifier.log",
            "logLevel": "warn",
            "decorate": False,
        }
        config = parse_config(base_config(loggingConfig=logging_config))

        assert config.logging.log_file == "./var/log/notifier.log"
        assert config.logging.log_level == "warn"
        assert config.logging.decorate is False

    def test_partial_logging_config(self):
        logging_config = {"logFile": "./var/log/notifier.log", "logLevel": "TRACE"}
        config = parse_config(base_config(loggingConfig=logging_config))

        assert config.logging.log_file == "./var/log/notifier.log"
        assert config.logging.log_level == "trace"
        assert config.logging.decorate is True

    def test_unknown_level_rejected(self):
        with pytest.raises(InvalidInputError, match="logLevel"):
            parse_config(base_config(loggingConfig={"logLevel": "loud"}))


class TestConfigImmutability:
    """Config is frozen after construction."""

    def test_config_is_frozen(self):
        config = parse_config(base_config())

        with pytest.raises(AttributeError):
            config.cron = "* * * * *"

    def test_config_dataclass_defaults(self):
        config = Config(
            cron="* * * * *",
            notify_on_change_only=False,
            notifier=StdoutNotifierConfig(),
        )

        assert config.services == DEFAULT_SERVICES
        assert config.logging == LoggingConfig()
