import json

from conftest import TEST_SECRET_HEX
from generate_keys import main


def test_generate_json(capsys):
    assert main(["--json"]) == 0
    keys = json.loads(capsys.readouterr().out)

    assert len(keys["private_key_hex"]) == 64
    assert keys["nsec"].startswith("nsec1")
    assert keys["npub"].startswith("npub1")


def test_from_secret(capsys, private_key):
    assert main(["--from-secret", TEST_SECRET_HEX]) == 0
    out = capsys.readouterr().out

    assert f"NOSTR_PRIVATE_KEY={TEST_SECRET_HEX}" in out
    assert private_key.public_key.hex() in out
    assert "https://njump.me/npub1" in out


def test_from_bad_secret(capsys):
    assert main(["--from-secret", "xyz"]) == 1
    assert "[FAIL]" in capsys.readouterr().err
