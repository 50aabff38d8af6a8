#!/usr/bin/env python3
# -*- coding: utf-8 -*-
class IrcTermError(Exception):
    ''' Base class for all exceptions in the ircterm package '''

class ConfigError(IrcTermError):
    ''' Exception raised when the configuration is missing or invalid '''

class ConnectionFailed(IrcTermError):
    ''' Exception raised when the connection to the server cannot be opened '''

class ConnectionClosed(IrcTermError):
    ''' Exception raised when the connection to the server is closed '''

class BufferIndexError(IrcTermError):
    ''' Exception raised when switching to a buffer index that does not exist '''

class QuitRequested(IrcTermError):
    ''' Exception raised by the quit command to end the session immediately '''
