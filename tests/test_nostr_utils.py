import pytest
from nostr.event import Event
from nostr.key import PrivateKey, PublicKey

from conftest import TEST_SECRET_HEX
from nostr_utils import (
    build_note_template,
    generate_private_key,
    load_private_key,
    public_key_hex,
    resolve_private_key,
    sign_event,
)


def test_signed_event_has_wire_fields(signed_event):
    assert set(signed_event) == {"id", "pubkey", "created_at", "kind", "tags", "content", "sig"}
    assert signed_event["kind"] == 1
    assert signed_event["tags"] == []
    assert signed_event["created_at"] == 1700000000


def test_event_id_is_content_addressed(signed_event):
    expected = Event.compute_id(
        signed_event["pubkey"],
        signed_event["created_at"],
        signed_event["kind"],
        signed_event["tags"],
        signed_event["content"],
    )
    assert signed_event["id"] == expected
    assert len(signed_event["id"]) == 64


def test_signature_verifies(signed_event):
    pk = PublicKey(bytes.fromhex(signed_event["pubkey"]))
    assert pk.verify_signed_message_hash(signed_event["id"], signed_event["sig"])


def test_same_template_same_id(private_key):
    template = build_note_template("Wake your ass up!", created_at=1700000000)
    assert sign_event(template, private_key)["id"] == sign_event(template, private_key)["id"]


def test_id_changes_with_content(private_key):
    a = sign_event(build_note_template("a", created_at=1), private_key)
    b = sign_event(build_note_template("b", created_at=1), private_key)
    assert a["id"] != b["id"]


def test_template_defaults_created_at_to_now():
    template = build_note_template("hi")
    assert isinstance(template["created_at"], int) and template["created_at"] > 1700000000


def test_template_rejects_non_string():
    with pytest.raises(TypeError):
        build_note_template(42)


def test_load_private_key_hex():
    assert load_private_key(TEST_SECRET_HEX).hex() == TEST_SECRET_HEX


def test_load_private_key_nsec():
    key = PrivateKey()
    assert load_private_key(key.bech32()).hex() == key.hex()


@pytest.mark.parametrize("secret", ["", "abc", "zz" * 32, "nsec1notvalid"])
def test_load_private_key_rejects(secret):
    with pytest.raises(ValueError):
        load_private_key(secret)


def test_resolve_private_key_generates_when_unset(caplog):
    key = resolve_private_key("")
    assert len(public_key_hex(key)) == 64
    assert "NOSTR_PRIVATE_KEY" in caplog.text


def test_generated_keys_differ():
    assert generate_private_key().hex() != generate_private_key().hex()
