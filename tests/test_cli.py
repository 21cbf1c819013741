import json

from nostr_bunker.cli import main


def test_cli_init_json(tmp_path, capsys) -> None:
    exit_code = main(["init", "--home", str(tmp_path), "--json"])

    captured = capsys.readouterr()
    assert exit_code == 0
    assert captured.err == ""
    payload = json.loads(captured.out.strip())
    assert payload["command"] == "init"
    assert payload["created"] is True
    assert payload["npub"].startswith("npub1")
    record = json.loads((tmp_path / "nostr_identity.json").read_text(encoding="utf-8"))
    assert record["nsec"] not in captured.out


def test_cli_init_refuses_to_overwrite_without_force(tmp_path, capsys) -> None:
    assert main(["init", "--home", str(tmp_path), "--json"]) == 0
    first = json.loads(capsys.readouterr().out.strip())

    assert main(["init", "--home", str(tmp_path)]) == 1
    assert "--force" in capsys.readouterr().err

    assert main(["init", "--home", str(tmp_path), "--json", "--force"]) == 0
    second = json.loads(capsys.readouterr().out.strip())
    assert second["npub"] != first["npub"]


def test_cli_allow_show_revoke(tmp_path, capsys) -> None:
    main(["init", "--home", str(tmp_path)])
    capsys.readouterr()

    assert main(["allow", "https://App.Example/page", "--home", str(tmp_path), "--json"]) == 0
    allowed = json.loads(capsys.readouterr().out.strip())
    assert allowed["allowed_origins"] == ["https://app.example"]

    assert main(["show", "--home", str(tmp_path)]) == 0
    shown = capsys.readouterr().out
    assert "https://app.example" in shown
    record = json.loads((tmp_path / "nostr_identity.json").read_text(encoding="utf-8"))
    assert record["nsec"] not in shown

    assert main(["revoke", "https://app.example", "--home", str(tmp_path), "--json"]) == 0
    revoked = json.loads(capsys.readouterr().out.strip())
    assert revoked["allowed_origins"] == []


def test_cli_show_without_identity(tmp_path, capsys) -> None:
    exit_code = main(["show", "--home", str(tmp_path)])

    captured = capsys.readouterr()
    assert exit_code == 1
    assert "No identity found" in captured.err


def test_cli_allow_rejects_invalid_origin(tmp_path, capsys) -> None:
    main(["init", "--home", str(tmp_path)])
    capsys.readouterr()

    assert main(["allow", "not-an-origin", "--home", str(tmp_path)]) == 1
    assert "scheme and host" in capsys.readouterr().err
