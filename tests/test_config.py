

import pytest
from dbfcsv.config import (ConversionConfig, DeletionPolicy, FieldCountStrategy,
                           parse_escaped_char, parse_line_terminator)
from dbfcsv.exceptions import ConfigurationError


def test_defaults():
    config = ConversionConfig()
    assert config.delimiter == ','
    assert config.quote == '"'
    assert config.deletion_policy is None
    assert config.field_count_strategy is FieldCountStrategy.TERMINATOR_SCAN


def test_config_is_immutable():
    config = ConversionConfig()
    with pytest.raises(AttributeError):
        config.delimiter = ';'


def test_parse_escaped_char():
    assert parse_escaped_char('\\t') == '\t'
    assert parse_escaped_char('|') == '|'
    assert parse_escaped_char('\\"') == '"'
    assert parse_escaped_char('') == ''


def test_parse_line_terminator():
    assert parse_line_terminator('\\r\\n') == '\r\n'
    assert parse_line_terminator('CRLF') == '\r\n'
    assert parse_line_terminator('\\n') == '\n'
    with pytest.raises(ConfigurationError):
        parse_line_terminator('\\r')


def test_from_options():
    config = ConversionConfig.from_options(encoding='gbk', delimiter='\\t', deletion_policy='SKIP',
                                           field_count='computed', progress_interval='100')
    assert config.delimiter == '\t'
    assert config.deletion_policy is DeletionPolicy.SKIP
    assert config.field_count_strategy is FieldCountStrategy.COMPUTED
    assert config.progress_interval == 100


@pytest.mark.parametrize("kwargs", [
    {'encoding': 'latin-9'},
    {'delimiter': ''},
    {'delimiter': ';;'},
    {'delimiter': '\n'},
    {'quote': ','},
    {'line_terminator': '\r'},
    {'progress_interval': -1},
])
def test_invalid_config(kwargs):
    with pytest.raises(ConfigurationError):
        ConversionConfig(**kwargs)


def test_invalid_policy_name():
    with pytest.raises(ConfigurationError):
        ConversionConfig.from_options(deletion_policy='purge')


def test_require_deletion_policy():
    with pytest.raises(ConfigurationError):
        ConversionConfig().require_deletion_policy()
    assert ConversionConfig(deletion_policy=DeletionPolicy.EXPORT).require_deletion_policy() is DeletionPolicy.EXPORT
