import io
import json
import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from catena_decoder import cli


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for env_var in ("CATENA_STRICT", "CATENA_LOG_LEVEL", "CATENA_INDENT"):
        monkeypatch.delenv(env_var, raising=False)


def _lines(text: str) -> list[dict]:
    return [json.loads(line) for line in text.splitlines() if line.strip()]


def test_decodes_hex_arguments(capsys):
    assert cli.main(["14 01 18 00", "17 20 F9 07"]) == 0
    out = _lines(capsys.readouterr().out)
    assert out == [
        {"status": "ok", "port": 1, "fmt": 0x14, "decoded": {"vBat": 1.5}},
        {"status": "ok", "port": 1, "fmt": 0x17, "decoded": {"aqi": 288.875}},
    ]


def test_other_port_is_reported_not_failed(capsys):
    assert cli.main(["--port", "2", "14011800"]) == 0
    (out,) = _lines(capsys.readouterr().out)
    assert out["status"] == "unrecognized_port"
    assert out["decoded"] == {}


def test_reads_hex_and_json_lines_from_stdin(capsys):
    stdin = io.StringIO(
        "14 05 F8 00 42\n"
        "\n"
        '{"uplink_message": {"f_port": 1, "frm_payload": "FAEYAA=="}}\n'
    )
    assert cli.main(["--stdin"], stdin=stdin) == 0
    out = _lines(capsys.readouterr().out)
    assert [o["decoded"] for o in out] == [{"vBat": -0.5, "boot": 66}, {"vBat": 1.5}]


def test_truncated_payload_fails_in_strict_mode(capsys):
    assert cli.main(["14 01 18"]) == 1
    captured = capsys.readouterr()
    assert captured.out == ""
    assert "need 2 byte(s) at offset 2" in captured.err


def test_lenient_flag_prints_partial_record(capsys):
    assert cli.main(["--lenient", "14 05 F8 00"]) == 1
    (out,) = _lines(capsys.readouterr().out)
    assert out["status"] == "truncated"
    assert out["decoded"] == {"vBat": -0.5}


def test_lenient_from_environment(monkeypatch, capsys):
    monkeypatch.setenv("CATENA_STRICT", "false")
    assert cli.main(["14 05 F8 00"]) == 1
    (out,) = _lines(capsys.readouterr().out)
    assert out["status"] == "truncated"


def test_invalid_input_is_reported_and_others_still_decode(capsys):
    assert cli.main(["zz", "14 01 18 00"]) == 1
    captured = capsys.readouterr()
    assert "error: zz" in captured.err
    assert _lines(captured.out)[0]["decoded"] == {"vBat": 1.5}


def test_indent_option(capsys):
    assert cli.main(["--indent", "2", "14 01 18 00"]) == 0
    out = capsys.readouterr().out
    assert out.startswith("{\n  ")
    assert json.loads(out)["decoded"] == {"vBat": 1.5}


@pytest.mark.parametrize("argv", [[], ["--stdin", "14 01 18 00"]])
def test_needs_exactly_one_input_source(argv):
    with pytest.raises(SystemExit) as excinfo:
        cli.main(argv, stdin=io.StringIO(""))
    assert excinfo.value.code == 2
