#!/usr/bin/env python3
# -*- coding: utf-8 -*-
import sys
import json
import logging

from ircterm.error import ConfigError


DEFAULT_LOG_FORMAT = '[%(asctime).19s] [%(name)s] [%(levelname)s] %(message)s'
DEFAULT_LOG_LEVEL = logging.WARNING


def parse_log_level(level):
    """Turn a level name such as 'debug' into a logging level number.

    Raises:
        ConfigError: If the name is not a logging level
    """
    if isinstance(level, int):
        return level
    value = logging.getLevelName(str(level).upper())
    if not isinstance(value, int):
        raise ConfigError('invalid log_level: %s' % level)
    return value


def configure_logger(logger, log_file=None, log_format=None,
                     log_level=DEFAULT_LOG_LEVEL):
    """Send a logger's records to a file path or a stream (stderr if None).

    Diagnostics never go to stdout, which belongs to the transcript.
    Files are appended to as UTF-8; unencodable text is replaced.
    """
    if isinstance(logger, str):
        logger = logging.getLogger(logger)
    if isinstance(log_file, str):
        handler = logging.FileHandler(log_file, encoding='utf-8',
                                      errors='replace')
    else:
        handler = logging.StreamHandler(log_file)
    handler.setFormatter(logging.Formatter(log_format or DEFAULT_LOG_FORMAT))
    logger.addHandler(handler)
    logger.setLevel(parse_log_level(log_level))
    return logger


def load_config(conf):
    """Extract session parameters from a configuration dictionary

    Args:
        conf: Configuration dictionary

    Returns:
        Tuple of (session_kwargs, supervisor_kwargs)

    Raises:
        ConfigError: If a required key is missing or a value is invalid
    """
    for key in ('host', 'nick'):
        if not conf.get(key):
            raise ConfigError('missing required config key: %s' % key)

    try:
        port = int(conf.get('port', 6667))
        retry = int(conf.get('retry', 0))
        retry_delay = float(conf.get('retry_delay', 1))
        width = conf.get('width', None)
        width = int(width) if width is not None else None
    except (TypeError, ValueError) as ex:
        raise ConfigError('invalid config value: %s' % ex) from ex

    prefix = conf.get('command_prefix', '/')
    if not isinstance(prefix, str) or len(prefix) != 1:
        raise ConfigError('command_prefix must be a single character')

    session = {
        'host': conf['host'],  # Server host (required)
        'port': port,
        'nick': conf['nick'],  # Nickname (required)
        'login': conf.get('login', None),  # Defaults to the nickname
        'password': conf.get('password', None),  # Sent with PASS if set
        'tls': bool(conf.get('tls', False)),
    }
    supervisor = {
        'state_dir': conf.get('state_dir', '~/.ircterm'),
        'retry': retry,  # Connection attempts after the first
        'retry_delay': retry_delay,  # Seconds between attempts
        'command_prefix': prefix,
        'farewell': conf.get('farewell', 'Leaving'),
        'width': width,  # Wrap width (terminal width if None)
        'transcript_log': conf.get('transcript_log', None),
    }
    return session, supervisor


def get_config():
    """Load and parse configuration from JSON file specified in command line

    Returns:
        Tuple of (conf, session_kwargs, supervisor_kwargs)

    Exits:
        Exits with status 1 if incorrect number of arguments
    """
    if len(sys.argv) != 2:
        print('usage: %s <config file>' % sys.argv[0], file=sys.stderr)
        sys.exit(1)

    try:
        with open(sys.argv[1], 'r') as fp:
            conf = json.load(fp)
    except (OSError, ValueError) as ex:
        raise ConfigError('cannot read %s: %s' % (sys.argv[1], ex)) from ex

    log_level = parse_log_level(conf.get('log_level', 'warning'))

    # Logs stay out of the transcript unless they go to stderr
    configure_logger(
        logging.getLogger(),
        log_file=conf.get('log_file', None),
        log_level=log_level
    )

    session, supervisor = load_config(conf)
    return conf, session, supervisor
