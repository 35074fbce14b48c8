#!/usr/bin/env python3
"""
UTA Passphrase Tool

Derives a passphrase from the trust anchor, e.g. to unlock an encrypted
volume with a key bound to the device.

Usage:
    uta-get-passphrase                      # key slot 1, "default!", base64
    uta-get-passphrase -d disk -e hex       # custom derivation string
    python -m uta.get_passphrase -k 0 -v    # key slot 0, verbose
"""

import argparse
import base64
import sys
from typing import Optional, Sequence

from . import config
from .api import init_v1
from .backends import BACKENDS
from .constants import LEN_DV_V1, LEN_KEY_MAX, get_return_code_name
from .errors import UtaError
from .logger import Logger

DEFAULT_DERIVATION_STRING = 'default!'
DV_PADDING = b'='


def pad_derivation_string(derivation_string: str) -> bytes:
    """
    Turn a derivation string of up to 8 characters into a derivation value.

    Raises:
        ValueError: If the encoded string is longer than 8 bytes
    """
    dv = derivation_string.encode('utf-8')
    if len(dv) > LEN_DV_V1:
        raise ValueError(f"Derivation string must be {LEN_DV_V1} or less characters long")
    return dv.ljust(LEN_DV_V1, DV_PADDING)


def encode_passphrase(key: bytes, encoding: str) -> str:
    """Render key bytes as base64 (without '=' padding) or lowercase hex."""
    if encoding == 'base64':
        return base64.b64encode(key).decode('ascii').rstrip('=')
    if encoding == 'hex':
        return key.hex()
    raise ValueError(f"Unknown encoding: {encoding}")


def get_passphrase(derivation_string: str, key_slot: int, encoding: str,
                   hardware: Optional[str] = None) -> str:
    """Derive a 32-byte key from the trust anchor and encode it."""
    dv = pad_derivation_string(derivation_string)

    uta = init_v1(hardware)
    with uta.context() as ctx:
        key = ctx.derive_key(key_slot, dv, LEN_KEY_MAX)
    return encode_passphrase(key, encoding)


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        description='Retrieve a passphrase from the UTA trust anchor',
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        '-d', '--derivation-string',
        default=DEFAULT_DERIVATION_STRING,
        help=f"String used in the computation of the passphrase, at most "
             f"{LEN_DV_V1} characters (default: '{DEFAULT_DERIVATION_STRING}')"
    )
    parser.add_argument(
        '-e', '--encoding',
        choices=['base64', 'hex'],
        default='base64',
        help='Encoding of the passphrase (default: base64)'
    )
    parser.add_argument(
        '-k', '--key-slot',
        type=int,
        choices=[0, 1],
        default=1,
        help='Key slot to use (default: 1, key slot containing the device specific key)'
    )
    parser.add_argument(
        '--hardware',
        choices=list(BACKENDS),
        default=config.HARDWARE,
        help=f"Trust anchor backend (default: {config.HARDWARE})"
    )
    parser.add_argument(
        '-v', '--verbose',
        action='store_true',
        help='Enable verbose output'
    )

    args = parser.parse_args(argv)
    Logger.verbose = args.verbose
    Logger.section(f"UTA passphrase ({args.hardware}, key slot {args.key_slot})")

    try:
        passphrase = get_passphrase(
            args.derivation_string, args.key_slot, args.encoding, args.hardware
        )
    except ValueError as e:
        Logger.error(str(e))
        return 1
    except UtaError as e:
        Logger.error(f"Trust anchor error {get_return_code_name(e.rc)} (rc=0x{e.rc:02x}): {e}")
        return 1

    print(passphrase)
    return 0


if __name__ == '__main__':
    sys.exit(main())
