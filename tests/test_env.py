import os

import pytest

from env_decrypt.env import EnvFileError, EnvironStore, load_env_file, parse_env_file, parse_env_lines


def test_parse_env_lines_skips_comments_and_blank_lines():
    pairs = parse_env_lines(
        [
            "# database",
            "",
            "DB_HOST=localhost",
            "   ",
            "DB_PORT = 5432",
        ]
    )

    assert pairs == [("DB_HOST", "localhost"), ("DB_PORT", "5432")]


def test_parse_env_lines_handles_quotes_and_export():
    pairs = parse_env_lines(
        [
            "export API_TOKEN=abc123",
            "SINGLE='literal \\n value'",
            'DOUBLE="line\\nbreak \\"quoted\\""',
            "EMPTY=",
            'EMPTY_QUOTED=""',
            "INLINE=value # trailing comment",
            "HASHED=pass#word",
            "QUOTED_COMMENT='x y' # note",
        ]
    )

    assert dict(pairs) == {
        "API_TOKEN": "abc123",
        "SINGLE": "literal \\n value",
        "DOUBLE": 'line\nbreak "quoted"',
        "EMPTY": "",
        "EMPTY_QUOTED": "",
        "INLINE": "value",
        "HASHED": "pass#word",
        "QUOTED_COMMENT": "x y",
    }


def test_parse_env_lines_preserves_file_order():
    pairs = parse_env_lines(["B=2", "A=1", "B=3"])

    assert pairs == [("B", "2"), ("A", "1"), ("B", "3")]


@pytest.mark.parametrize(
    "line",
    ["NO_EQUALS_SIGN", "1BAD=value", "SPACE NAME=value", 'OPEN="unterminated', "OPEN='unterminated", "Q='a' b"],
)
def test_parse_env_lines_rejects_malformed_lines(line):
    with pytest.raises(EnvFileError) as excinfo:
        parse_env_lines(["OK=1", line])

    assert excinfo.value.line_number == 2


def test_environ_store_never_overwrites_existing_names():
    mapping = {"NAME": "original", "BLANK": ""}
    store = EnvironStore(mapping)

    assert store.set_if_absent("NAME", "fromfile") is False
    assert store.set_if_absent("BLANK", "fromfile") is False
    assert store.set_if_absent("NEW", "value") is True
    assert mapping == {"NAME": "original", "BLANK": "", "NEW": "value"}
    assert store.get("NEW") == "value"
    assert store.get("MISSING") is None


def test_environ_store_defaults_to_process_environment(monkeypatch):
    fake_environ = {"EXISTING": "1"}
    monkeypatch.setattr(os, "environ", fake_environ)
    store = EnvironStore()

    assert store.set_if_absent("ENV_DECRYPT_TEST_VALUE", "set") is True
    assert store.set_if_absent("EXISTING", "2") is False
    assert fake_environ == {"EXISTING": "1", "ENV_DECRYPT_TEST_VALUE": "set"}


def test_load_env_file_applies_only_absent_names(tmp_path):
    dotenv = tmp_path / ".env"
    dotenv.write_text("NAME=fromfile\nOTHER=value\nOTHER=second\n", encoding="utf-8")
    mapping = {"NAME": "original"}

    applied = load_env_file(dotenv, EnvironStore(mapping))

    assert applied == ["OTHER"]
    assert mapping == {"NAME": "original", "OTHER": "value"}


def test_load_env_file_missing_file_is_noop(tmp_path):
    mapping = {}

    assert load_env_file(tmp_path / ".env.missing", EnvironStore(mapping)) == []
    assert mapping == {}


def test_parse_env_file_reads_utf8(tmp_path):
    dotenv = tmp_path / ".env"
    dotenv.write_text("GREETING=héllo\n", encoding="utf-8")

    assert parse_env_file(dotenv) == [("GREETING", "héllo")]


def test_parse_env_lines_strips_comment_after_any_whitespace():
    pairs = parse_env_lines(["TABBED=value\t# note", "SPACED=value  # note"])

    assert pairs == [("TABBED", "value"), ("SPACED", "value")]
