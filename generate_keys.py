#!/usr/bin/env python3
"""
Generate (or inspect) a Nostr key pair for the bot.

Run with: python generate_keys.py
          python generate_keys.py --from-secret <hex|nsec> --json
"""

import argparse
import json
import sys

from nostr_utils import generate_private_key, load_private_key


def describe_key(private_key) -> dict:
    return {
        "private_key_hex": private_key.hex(),
        "public_key_hex": private_key.public_key.hex(),
        "nsec": private_key.bech32(),
        "npub": private_key.public_key.bech32(),
    }


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Generate a Nostr key pair for the posting bot")
    parser.add_argument("--from-secret", help="Show keys for an existing hex or nsec private key")
    parser.add_argument("--json", action="store_true", help="Print keys as JSON")
    args = parser.parse_args(argv)

    if args.from_secret:
        try:
            private_key = load_private_key(args.from_secret)
        except ValueError as e:
            print(f"[FAIL] {e}", file=sys.stderr)
            return 1
    else:
        private_key = generate_private_key()

    keys = describe_key(private_key)
    if args.json:
        print(json.dumps(keys, indent=2))
        return 0

    print("Generated keys:" if not args.from_secret else "Keys:")
    print("Private Key (hex):", keys["private_key_hex"])
    print("Private Key (nsec):", keys["nsec"])
    print("Public Key (hex):", keys["public_key_hex"])
    print("Public Key (npub):", keys["npub"])
    print("")
    print("To use these keys, set the private key in the bot environment:")
    print(f"   NOSTR_PRIVATE_KEY={keys['private_key_hex']}")
    print("")
    print("Your Nostr profile can be viewed at:")
    print(f"   https://njump.me/{keys['npub']}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
