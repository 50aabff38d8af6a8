#!/usr/bin/env python3
"""ircterm - a line-oriented terminal IRC client.

Usage:
    ircterm config.json

Type /help once connected for the list of commands.
"""
import sys
import asyncio
import logging

from common import get_config

from .error import IrcTermError, ConnectionFailed
from .connection import Session
from .session import SessionSupervisor


logger = logging.getLogger(__name__)


async def run_client():
    """Load configuration, connect and run the session until it ends."""
    conf, session_kwargs, supervisor_kwargs = get_config()
    session = Session(**session_kwargs)
    supervisor = SessionSupervisor(session, **supervisor_kwargs)
    await supervisor.run()


def main():
    """Main entry point for the client.

    Returns:
        int: Exit code (0 for success, 1 for error)
    """
    try:
        asyncio.run(run_client())
        return 0
    except KeyboardInterrupt:
        return 0
    except ConnectionFailed as ex:
        print('\nConnection error: %s' % ex, file=sys.stderr)
        return 1
    except IrcTermError as ex:
        print('\nError: %s' % ex, file=sys.stderr)
        return 1
    except Exception as ex:
        logger.exception('session failed')
        print('\nError: %s' % ex, file=sys.stderr)
        return 1


if __name__ == '__main__':
    sys.exit(main())
