import pytest

from banco.config import Config, parse_config, read_config


SAMPLE = """# configuracion del banco
LIMITE_RETIRO=5000
LIMITE_TRANSFERENCIA=10000
UMBRAL_RETIROS=3
UMBRAL_TRANSFERENCIAS=5

NUM_HILOS=4
ARCHIVO_CUENTAS=cuentas.dat
ARCHIVO_LOG=application.log
"""


def test_parse_all_keys():
    config = parse_config(SAMPLE)
    assert config == Config(
        withdrawal_limit=5000,
        transfer_limit=10000,
        withdrawal_threshold=3,
        transfer_threshold=5,
        num_threads=4,
        accounts_file="cuentas.dat",
        log_file="application.log",
    )


def test_missing_keys_default_to_zero_and_empty():
    config = parse_config("NUM_HILOS=2\n")
    assert config.num_threads == 2
    assert config.withdrawal_limit == 0
    assert config.transfer_threshold == 0
    assert config.accounts_file == ""


def test_comments_are_ignored():
    config = parse_config("#NUM_HILOS=9\nNUM_HILOS=3\n")
    assert config.num_threads == 3


def test_trailing_garbage_after_number_is_ignored():
    config = parse_config("LIMITE_RETIRO=250abc\n")
    assert config.withdrawal_limit == 250


def test_negative_values_are_read():
    config = parse_config("NUM_HILOS=-1\n")
    assert config.num_threads == -1


def test_unparseable_value_leaves_default():
    config = parse_config("NUM_HILOS=abc\nLIMITE_RETIRO=\n")
    assert config.num_threads == 0
    assert config.withdrawal_limit == 0


def test_key_must_start_the_line():
    config = parse_config("  NUM_HILOS=7\n")
    assert config.num_threads == 0


def test_string_value_stops_at_whitespace():
    config = parse_config("ARCHIVO_LOG=app.log extra\n")
    assert config.log_file == "app.log"


def test_string_value_truncated_to_49_characters():
    name = "a" * 60
    config = parse_config(f"ARCHIVO_CUENTAS={name}\n")
    assert config.accounts_file == name[:49]


def test_later_value_overrides_earlier():
    config = parse_config("UMBRAL_RETIROS=2\nUMBRAL_RETIROS=6\n")
    assert config.withdrawal_threshold == 6


def test_read_config_from_file(tmp_path):
    path = tmp_path / "config.txt"
    path.write_text(SAMPLE, encoding="utf-8")
    assert read_config(path) == parse_config(SAMPLE)


def test_read_config_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        read_config(tmp_path / "missing.txt")