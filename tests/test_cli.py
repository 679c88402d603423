"""
Seed Shards — CLI tests

Drives cli.main() end to end against a temporary file wallet.
"""

import contextlib
import io
import json
import os
import sys
import tempfile

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

import cli
from seed_shards import crypto

SEED_TEXT = "000000000000000000000000Trustee1"


def _run(*argv):
    out, err = io.StringIO(), io.StringIO()
    with contextlib.redirect_stdout(out), contextlib.redirect_stderr(err):
        code = cli.main(list(argv))
    return code, out.getvalue(), err.getvalue()


def test_cli_full_flow():
    with tempfile.TemporaryDirectory() as tmpdir:
        wallet = os.path.join(tmpdir, 'wallets')

        code, out, _ = _run('--wallet', wallet, 'create-key', '--seed', SEED_TEXT)
        assert code == 0
        verkey = out.strip()

        code, out, _ = _run('--wallet', wallet, 'split', '--owner', verkey,
                            '-n', '3', '-m', '2', '--msg', '{"note": "backup"}')
        assert code == 0
        assert f"sss::{verkey}" in out

        code, out, _ = _run('--wallet', wallet, 'shards', '--owner', verkey)
        assert code == 0
        assert len(json.loads(out)) == 3

        paths = []
        for i in (1, 3):
            code, out, _ = _run('--wallet', wallet, 'shard', '--owner', verkey, '--index', str(i))
            assert code == 0
            assert json.loads(out)['index'] == i
            path = os.path.join(tmpdir, f's{i}.json')
            with open(path, 'w') as f:
                f.write(out)
            paths.append(path)

        code, out, _ = _run('--wallet', wallet, 'recover', '--shards', *paths)
        assert code == 0
        cover = json.loads(out)
        assert cover['verkey'] == verkey
        assert cover['msg'] == {"note": "backup"}


def test_cli_recover_to_file():
    with tempfile.TemporaryDirectory() as tmpdir:
        wallet = os.path.join(tmpdir, 'wallets')
        _, out, _ = _run('--wallet', wallet, 'create-key')
        verkey = out.strip()
        _run('--wallet', wallet, 'split', '--owner', verkey, '-n', '2', '-m', '2')

        _, shards, _ = _run('--wallet', wallet, 'shards', '--owner', verkey)
        shards_path = os.path.join(tmpdir, 'all.json')
        with open(shards_path, 'w') as f:
            f.write(shards)

        output = os.path.join(tmpdir, 'cover.json')
        code, _, _ = _run('--wallet', wallet, 'recover', '--shards', shards_path, '--output', output)
        assert code == 0
        with open(output) as f:
            assert json.load(f)['verkey'] == verkey


def test_cli_errors_exit_nonzero():
    with tempfile.TemporaryDirectory() as tmpdir:
        wallet = os.path.join(tmpdir, 'wallets')

        code, _, err = _run('--wallet', wallet, 'split', '--owner', 'Nobody', '-n', '5', '-m', '6')
        assert code == 1
        assert 'InvalidThreshold' in err

        code, _, err = _run('--wallet', wallet, 'split', '--owner', 'Nobody', '-n', '3', '-m', '2')
        assert code == 1
        assert 'KeyNotFound' in err

        code, _, err = _run('--wallet', wallet, 'shards', '--owner', 'Nobody')
        assert code == 1
        assert 'NotFound' in err

        code, _, err = _run('--wallet', wallet, 'create-key', '--seed', 'short')
        assert code == 1


def test_cli_wallet_key():
    code, out, _ = _run('wallet-key')
    assert code == 0
    assert len(crypto.b58decode(out.strip())) == 32


def test_cli_no_command():
    code, _, _ = _run()
    assert code == 1


def test_cli_recover_ignores_wallet_key():
    """A broken wallet key does not block recovery, which never opens the wallet."""
    with tempfile.TemporaryDirectory() as tmpdir:
        wallet = os.path.join(tmpdir, 'wallets')
        _, out, _ = _run('--wallet', wallet, 'create-key')
        verkey = out.strip()
        _run('--wallet', wallet, 'split', '--owner', verkey, '-n', '2', '-m', '1')
        _, shards, _ = _run('--wallet', wallet, 'shards', '--owner', verkey)
        path = os.path.join(tmpdir, 'all.json')
        with open(path, 'w') as f:
            f.write(shards)

        saved = cli.config.WALLET_KEY
        cli.config.WALLET_KEY = '0OIl'
        try:
            code, _, err = _run('--wallet', wallet, 'shards', '--owner', verkey)
            assert code == 1
            assert 'DecodeError' in err

            code, out, _ = _run('recover', '--shards', path)
            assert code == 0
            assert json.loads(out)['verkey'] == verkey
        finally:
            cli.config.WALLET_KEY = saved


def test_cli_recover_non_utf8_file():
    with tempfile.TemporaryDirectory() as tmpdir:
        path = os.path.join(tmpdir, 'bad.json')
        with open(path, 'wb') as f:
            f.write(b'\xff\xfe[]')
        code, _, err = _run('recover', '--shards', path)
        assert code == 1
        assert 'ParseError' in err
