import json

import pytest

from billsplit import cli

BILL = {
    "date": "2024-03-21",
    "location": "Taipei",
    "tipPercentage": 20,
    "items": [
        {"name": "Steak", "price": 100, "isShared": False, "person": "Alice"},
    ],
}


def test_cli_single_file_json(tmp_path, capsys):
    src = tmp_path / "bill.json"
    src.write_text(json.dumps(BILL), encoding="utf-8")
    dst = tmp_path / "out" / "result.json"

    code = cli.main([f"--input={src}", f"--output={dst}"])

    assert code == 0
    printed = json.loads(capsys.readouterr().out)
    assert printed["success"] is True
    assert printed["data"]["items"] == [{"name": "Alice", "amount": 120}]
    assert json.loads(dst.read_text(encoding="utf-8"))["totalAmount"] == 120


def test_cli_directory_text(tmp_path, capsys):
    in_dir = tmp_path / "bills"
    in_dir.mkdir()
    (in_dir / "one.json").write_text(json.dumps(BILL), encoding="utf-8")
    out_dir = tmp_path / "reports"

    code = cli.main(["--input", str(in_dir), "--output", str(out_dir), "--format", "text"])

    assert code == 0
    printed = json.loads(capsys.readouterr().out)
    assert [r["source"] for r in printed] == ["one.json"]
    assert (out_dir / "one.txt").read_text(encoding="utf-8").endswith("Alice: 120")


def test_cli_failure_exit_code(tmp_path, capsys):
    code = cli.main(["--input", str(tmp_path / "missing.json"), "--output", str(tmp_path / "o.json")])
    assert code == 1
    printed = json.loads(capsys.readouterr().out)
    assert printed["success"] is False
    assert printed["kind"] == "unreadable_source"


def test_cli_directory_with_bad_file_exit_code(tmp_path, capsys):
    in_dir = tmp_path / "bills"
    in_dir.mkdir()
    (in_dir / "good.json").write_text(json.dumps(BILL), encoding="utf-8")
    (in_dir / "bad.json").write_text(json.dumps({**BILL, "items": []}), encoding="utf-8")

    code = cli.main(["--input", str(in_dir), "--output", str(tmp_path / "out")])

    assert code == 1
    printed = json.loads(capsys.readouterr().out)
    assert [r["success"] for r in printed] == [False, True]


def test_cli_requires_input_and_output():
    with pytest.raises(SystemExit) as exc:
        cli.main(["--input=bill.json"])
    assert exc.value.code == 2


def test_cli_rejects_unknown_format(tmp_path):
    with pytest.raises(SystemExit):
        cli.main(["--input", str(tmp_path), "--output", str(tmp_path), "--format", "xml"])
