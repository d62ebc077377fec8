"""
LAN Chat - Main entry point for the application.

Created by orpheus497
"""

import argparse
import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import List, Optional

from . import __version__
from .config import Config
from .constants import (
    DEFAULT_DATA_DIR,
    LOG_BACKUP_COUNT,
    LOG_DATE_FORMAT,
    LOG_FILENAME,
    LOG_FORMAT,
    LOG_MAX_BYTES,
    LOGS_DIR,
    MAX_USERNAME_LENGTH,
)
from .crypto import derive_key
from .errors import ConfigError, ErrorCode, TransportBindError
from .message import is_valid_sender
from .session import ChatSession
from .transport import MulticastTransport
from .ui import LanChatApp
from .utils import get_platform_info

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    """Build the command line parser."""
    parser = argparse.ArgumentParser(
        prog='lanchat',
        description='LAN Chat - Encrypted group chat over local multicast',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  lanchat -u alice -p secret          # Join the chat as alice
  lanchat -u bob -p secret -debug     # Show decrypt failures and send notices
  lanchat -u carol -p secret --config ~/lanchat.toml

Everyone using the same passphrase can read each other's messages.

Created by orpheus497
        """
    )

    parser.add_argument(
        '--version',
        action='version',
        version=f'LAN Chat {__version__}'
    )

    parser.add_argument(
        '-u',
        dest='username',
        required=True,
        help=f'Username shown to other peers (printable, no ":", max {MAX_USERNAME_LENGTH} chars)'
    )

    parser.add_argument(
        '-p',
        dest='passphrase',
        required=True,
        help='Shared passphrase used to derive the encryption key'
    )

    parser.add_argument(
        '-debug', '--debug',
        dest='debug',
        action='store_true',
        help='Enable debug mode'
    )

    parser.add_argument(
        '--config',
        type=str,
        default=None,
        help=f'Path to a TOML configuration file (default: {DEFAULT_DATA_DIR}/config.toml)'
    )

    parser.add_argument(
        '--log-file',
        type=str,
        default=None,
        help=f'Write logs to this file (default: {DEFAULT_DATA_DIR}/{LOGS_DIR}/{LOG_FILENAME})'
    )

    return parser


def setup_logging(config: Config, debug: bool = False, log_file: Optional[str] = None) -> Optional[Path]:
    """
    Route package logs to a rotating file.

    The terminal belongs to the UI, so nothing is logged to the console.

    Returns:
        Path of the log file, or None if file logging is disabled
    """
    package_logger = logging.getLogger('lanchat')

    level_name = str(config.get('logging', 'level', 'INFO')).upper()
    level = logging.DEBUG if debug else getattr(logging, level_name, logging.INFO)
    package_logger.setLevel(level)

    if not log_file and not config.get('logging', 'file_logging', True):
        package_logger.addHandler(logging.NullHandler())
        return None

    if log_file:
        path = Path(log_file).expanduser()
    elif config.get('logging', 'file'):
        path = Path(config.get('logging', 'file')).expanduser()
    else:
        path = Path(DEFAULT_DATA_DIR).expanduser() / LOGS_DIR / LOG_FILENAME

    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        handler = RotatingFileHandler(
            path, maxBytes=LOG_MAX_BYTES, backupCount=LOG_BACKUP_COUNT, encoding='utf-8'
        )
    except OSError as e:
        raise ConfigError(
            ErrorCode.E703_INVALID_CONFIG,
            f"Cannot open log file {path}: {e}",
            {"path": str(path)},
        ) from e

    handler.setFormatter(logging.Formatter(LOG_FORMAT, LOG_DATE_FORMAT))
    package_logger.addHandler(handler)
    return path


def main(argv: Optional[List[str]] = None) -> None:
    """Main entry point for LAN Chat."""
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config = Config(Path(args.config) if args.config else None)
        config.validate()
        setup_logging(config, args.debug, args.log_file)

        if not is_valid_sender(args.username):
            raise ConfigError(
                ErrorCode.E703_INVALID_CONFIG,
                f'Invalid username {args.username!r}: must be 1-{MAX_USERNAME_LENGTH} '
                'printable characters without ":"',
            )
        key = derive_key(args.passphrase)

        transport = MulticastTransport(
            group=config.get('network', 'group'),
            port=config.get('network', 'port'),
            interface=config.get('network', 'interface'),
            ttl=config.get('network', 'ttl'),
            loopback=config.get('network', 'loopback'),
            buffer_size=config.get('network', 'buffer_size'),
        )
        transport.open()
    except (ConfigError, TransportBindError) as e:
        print(f"Error: {e.message}", file=sys.stderr)
        sys.exit(1)

    session = None
    try:
        app = LanChatApp(
            args.username,
            debug=args.debug,
            log_dir=config.get('ui', 'log_dir', '.'),
            copy_lines=config.get('ui', 'copy_lines'),
            endpoint=transport.address,
        )
        session = ChatSession(
            args.username,
            key,
            transport,
            app.presenter,
            max_plaintext_size=config.get('limits', 'max_plaintext_size'),
        )
        app.attach(session)

        logger.info(
            f"Starting LAN Chat {__version__} as {args.username} on {transport.address} "
            f"({get_platform_info()})"
        )
        app.run()
    finally:
        if session is not None:
            session.stop()
        # No-op when the session already closed it
        transport.close()


if __name__ == '__main__':
    main()
