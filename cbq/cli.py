"""Command-line interface"""

import argparse
import sys
from typing import List, Optional
from loguru import logger

from . import __version__
from .core.clipboard import SystemClipboard
from .core.exceptions import ClipboardError, EmptyQueueError, StorageError
from .core.queue import QueueManager
from .core.storage import QueueMode, StateStore
from .utils import ConfigManager


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='cbq',
        description='A clipboard manager that works like a stack or queue. '
                    'Copy multiple times, then paste multiple times in order or reversed.'
    )
    parser.add_argument('--version', action='version', version=__version__)
    parser.add_argument('--config', help='Path to settings.yaml')
    parser.add_argument('-v', '--verbose', action='store_true', help='Show debug logging')

    subparsers = parser.add_subparsers(dest='command', required=True)

    subparsers.add_parser('start', help='Start the clipboard monitor')

    p_pop = subparsers.add_parser('pop', help='Pop the next item')
    order = p_pop.add_mutually_exclusive_group()
    order.add_argument('-s', '--stack', dest='order', action='store_const', const=QueueMode.STACK,
                       help='Pop in stack mode (LIFO)')
    order.add_argument('-q', '--queue', dest='order', action='store_const', const=QueueMode.QUEUE,
                       help='Pop in queue mode (FIFO)')

    subparsers.add_parser('status', help='Show current items in queue')
    subparsers.add_parser('clear', help='Clear the queue')
    subparsers.add_parser('sync', help='Put the next item on the clipboard')

    p_mode = subparsers.add_parser('mode', help='Set stack or queue mode')
    p_mode.add_argument('mode', choices=[m.value for m in QueueMode])

    return parser


def _build_manager(config: ConfigManager) -> QueueManager:
    return QueueManager(StateStore(config.state_path), SystemClipboard())


def cmd_pop(manager: QueueManager, args: argparse.Namespace) -> int:
    if args.order is None:
        result = manager.pop_and_sync()
        item = result.item
    else:
        item = manager.pop(args.order == QueueMode.STACK)
        try:
            manager.sync_clipboard()
        except ClipboardError as e:
            logger.warning(f"Could not prepare next item: {e}")

    print(f"Popped: {item}")
    return 0


def cmd_status(manager: QueueManager, args: argparse.Namespace) -> int:
    state = manager.get_status()
    print(f"Active: {'yes' if state.active else 'no'}")
    print(f"Mode:   {state.mode.value}")

    if not state.items:
        print("Queue is empty")
        return 0

    for i, item in enumerate(state.items, start=1):
        print(f"{i}: {item}")
    return 0


def cmd_clear(manager: QueueManager, args: argparse.Namespace) -> int:
    manager.clear()
    print("Queue cleared")
    return 0


def cmd_mode(manager: QueueManager, args: argparse.Namespace) -> int:
    mode = QueueMode(args.mode)
    manager.set_mode(mode)
    # The front item changes identity with the mode
    try:
        manager.sync_clipboard()
    except ClipboardError as e:
        logger.warning(f"Could not update clipboard for new mode: {e}")

    print(f"Mode set to {mode.value}")
    return 0


def cmd_sync(manager: QueueManager, args: argparse.Namespace) -> int:
    if manager.sync_clipboard():
        print("Clipboard updated")
    else:
        print("Queue is empty")
    return 0


COMMANDS = {
    'pop': cmd_pop,
    'status': cmd_status,
    'clear': cmd_clear,
    'mode': cmd_mode,
    'sync': cmd_sync,
}


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point"""
    args = build_parser().parse_args(argv)

    logger.remove()
    logger.add(sys.stderr, level="DEBUG" if args.verbose else "WARNING", format="{level}: {message}")

    config = ConfigManager(args.config)

    if args.command == 'start':
        from .app import run_monitor
        return run_monitor(config, "DEBUG" if args.verbose else None)

    try:
        return COMMANDS[args.command](_build_manager(config), args)
    except EmptyQueueError:
        print("Queue is empty", file=sys.stderr)
        return 1
    except (StorageError, ClipboardError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


def run() -> None:
    sys.exit(main())
