#!/usr/bin/env python3
"""
Seed Shards CLI — shard an Ed25519 signing seed across M-of-N shards.

Usage:
    cli.py wallet-key
    cli.py create-key [--seed 32-character-seed]
    cli.py split --owner <verkey> -n 5 -m 3 [--msg '{"note": "backup"}']
    cli.py shards --owner <verkey>
    cli.py shard --owner <verkey> --index 2
    cli.py recover --shards s1.json s3.json

All wallet commands use --wallet (default $SSS_WALLET_DIR) and --scope.
Wallet files are encrypted when $SSS_WALLET_KEY holds a base58 key.
"""

import argparse
import json
import logging
import sys

from seed_shards import config, crypto
from seed_shards.errors import DecodeError, ParseError, ShardError
from seed_shards.keys import WalletKeyService
from seed_shards.sss import ShardService
from seed_shards.wallet import FileWallet, InMemoryWallet


def _open(args):
    key = crypto.b58decode(config.WALLET_KEY) if config.WALLET_KEY else None
    if key is not None and len(key) != 32:
        raise DecodeError("SSS_WALLET_KEY must decode to 32 bytes")
    wallet = FileWallet(args.wallet, key=key)
    keys = WalletKeyService(wallet)
    return wallet, keys, ShardService(wallet, keys)


def _read_shards(paths) -> str:
    """Gather shard objects from files (or stdin) into one JSON array."""
    items = []
    sources = paths or ['-']
    for p in sources:
        try:
            raw = sys.stdin.buffer.read() if p == '-' else open(p, 'rb').read()
            value = json.loads(raw.decode('utf-8'))
        except ValueError as e:
            raise ParseError(f"{p}: not valid JSON: {e}") from e
        if isinstance(value, list):
            items.extend(value)
        else:
            items.append(value)
    return json.dumps(items)


def cmd_wallet_key(args):
    """Print a fresh wallet encryption key."""
    print(crypto.b58encode(crypto.generate_key()))
    return 0


def cmd_create_key(args):
    """Create a signing key in the wallet."""
    seed = None
    if args.seed:
        seed = args.seed.encode('utf-8')
        if len(seed) != crypto.SEED_SIZE:
            print(f"Error: seed must be {crypto.SEED_SIZE} bytes", file=sys.stderr)
            return 1
    _, keys, _ = _open(args)
    print(keys.create_key(args.scope, seed=seed))
    return 0


def cmd_split(args):
    """Shard the seed of a key and store the shards."""
    _, _, service = _open(args)
    owner = service.split_and_store(args.scope, args.threshold, args.shares, args.msg, args.owner)
    print(f"Stored {args.threshold}-of-{args.shares} shards under {service.storage_key(owner)}")
    return 0


def cmd_shards(args):
    """Print all stored shards of a key."""
    _, _, service = _open(args)
    print(service.get_all_shards(args.scope, args.owner))
    return 0


def cmd_shard(args):
    """Print one stored shard of a key."""
    _, _, service = _open(args)
    print(service.get_shard(args.scope, args.owner, args.index))
    return 0


def cmd_recover(args):
    """Recover the covering payload from shard files."""
    # recovery never touches the wallet
    wallet = InMemoryWallet()
    service = ShardService(wallet, WalletKeyService(wallet))
    covering = service.recover(_read_shards(args.shards))
    if args.output:
        with open(args.output, 'w') as f:
            f.write(covering)
        print(f"Saved to: {args.output}")
    else:
        print(covering)
    return 0


def main(argv=None):
    parser = argparse.ArgumentParser(
        description='Seed Shards — Shamir secret sharing for signing seeds.',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Create a key and shard its seed (2-of-3)
  %(prog)s create-key
  %(prog)s split --owner <verkey> -n 3 -m 2

  # Hand out shard 1 and shard 3
  %(prog)s shard --owner <verkey> --index 1 > s1.json
  %(prog)s shard --owner <verkey> --index 3 > s3.json

  # Recover the seed
  %(prog)s recover --shards s1.json s3.json
        """
    )
    parser.add_argument('--wallet', '-w', default=str(config.WALLET_DIR), help='Wallet directory')
    parser.add_argument('--scope', default='default', help='Wallet name inside the directory')
    parser.add_argument('--verbose', '-v', action='store_true', help='Log progress to stderr')

    sub = parser.add_subparsers(dest='command', help='Command')

    sub.add_parser('wallet-key', help='Generate a wallet encryption key')

    p_key = sub.add_parser('create-key', help='Create a signing key')
    p_key.add_argument('--seed', help='32-character seed (default: random)')

    p_split = sub.add_parser('split', help='Shard a key seed and store the shards')
    p_split.add_argument('--owner', '-o', required=True, help='Verkey to shard')
    p_split.add_argument('--shares', '-n', type=int, required=True, help='Total shards (N)')
    p_split.add_argument('--threshold', '-m', type=int, required=True, help='Threshold to recover (M)')
    p_split.add_argument('--msg', help='JSON object stored alongside the seed')

    p_shards = sub.add_parser('shards', help='Print all shards of a key')
    p_shards.add_argument('--owner', '-o', required=True, help='Verkey')

    p_shard = sub.add_parser('shard', help='Print one shard of a key')
    p_shard.add_argument('--owner', '-o', required=True, help='Verkey')
    p_shard.add_argument('--index', '-i', type=int, required=True, help='Shard number, from 1')

    p_recover = sub.add_parser('recover', help='Recover the seed from shards')
    p_recover.add_argument('--shards', '-s', nargs='*', help='Shard files (default: stdin)')
    p_recover.add_argument('--output', help='Output file (default: print to stdout)')

    args = parser.parse_args(argv)

    level = logging.INFO if args.verbose else getattr(logging, config.LOG_LEVEL, logging.WARNING)
    logging.basicConfig(level=level, format='%(levelname)s %(name)s: %(message)s')

    if not args.command:
        parser.print_help()
        return 1

    handlers = {
        'wallet-key': cmd_wallet_key,
        'create-key': cmd_create_key,
        'split': cmd_split,
        'shards': cmd_shards,
        'shard': cmd_shard,
        'recover': cmd_recover,
    }

    try:
        return handlers[args.command](args)
    except ShardError as e:
        print(f"Error ({type(e).__name__}): {e}", file=sys.stderr)
        return 1
    except OSError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == '__main__':
    sys.exit(main())
