#!/usr/bin/env python3
"""
Name: cat
Description: concatenate and print files
License: perl

Every source named on the command line (or standard input) is read fully
into memory, run through the line-oriented options (-n, -b, -s, -E) and
appended to one shared output buffer. The buffer is written to standard
output only after every source has been processed, so a failing source
discards everything produced before it.
"""

import sys
import os
import argparse
import re
from enum import Enum
from typing import NamedTuple

# Constants
EX_SUCCESS = 0
EX_FAILURE = 1
PROGRAM = 'cat'

INITIAL_CAPACITY = 256
BUFFER_MAX_CAPACITY = sys.maxsize
CHUNK_SIZE = 8192
NEWLINE = ord('\n')


class CatError(Exception):
    """Base class for every fatal error raised while building the output."""


class AllocationError(CatError):
    pass


class CapacityExceededError(CatError):
    pass


class FileOpenError(CatError):
    pass


class ShortReadError(CatError):
    pass


class InvalidFlagError(CatError):
    pass


class EmptyStdinError(CatError):
    pass


class NumberMode(Enum):
    NONE = 0
    ALL = 1       # -n
    NONBLANK = 2  # -b


class Config(NamedTuple):
    """The options in effect for one invocation. Read-only once built."""
    number: NumberMode = NumberMode.NONE
    squeeze_blank: bool = False
    show_ends: bool = False

    @classmethod
    def from_args(cls, args: argparse.Namespace) -> 'Config':
        return cls(number=args.number, squeeze_blank=args.s, show_ends=args.E)


class Buffer:
    """
    A growable byte buffer.

    Storage is preallocated to `capacity` bytes; `length` of them are in use.
    A NUL byte always sits at offset `length` once a public method returns,
    which is why growth reserves one spare byte. `line_count` is the running
    counter of numbered lines, so numbering carries on across every source
    appended into the same buffer.
    """

    def __init__(self, initial_capacity: int = INITIAL_CAPACITY):
        self.capacity = 0
        self.length = 0
        self.line_count = 0
        self._data = bytearray()
        self._grow(max(initial_capacity, 1))
        self._terminate()

    def __len__(self):
        return self.length

    def _grow(self, capacity: int):
        if capacity > BUFFER_MAX_CAPACITY:
            raise CapacityExceededError(
                f"buffer max capacity of '{BUFFER_MAX_CAPACITY}' reached")
        try:
            self._data.extend(bytes(capacity - self.capacity))
        except (MemoryError, OverflowError):
            raise AllocationError("failed to allocate memory") from None
        self.capacity = capacity

    def _terminate(self):
        self._data[self.length] = 0

    def ensure_capacity(self, needed_extra: int):
        """Make room for `needed_extra` more bytes plus the terminator."""
        if self.length + needed_extra + 1 <= self.capacity:
            return
        self._grow(2 * self.capacity + needed_extra + 1)

    def append(self, data: bytes, count: int = None):
        """Copy `count` bytes of `data` (all of it by default) onto the end."""
        if count is None:
            count = len(data)
        elif count > len(data):
            raise ValueError(f"cannot append {count} bytes from {len(data)}")

        self.ensure_capacity(count)
        self._data[self.length:self.length + count] = data[:count]
        self.length += count
        self._terminate()

    def getvalue(self) -> bytes:
        return bytes(self._data[:self.length])


def read_stdin(stream=None) -> bytes:
    """
    Slurps a binary stream (standard input by default) to end-of-stream.
    An empty stream is an error: the caller reports it with the usage line.
    """
    if stream is None:
        stream = sys.stdin.buffer

    data = Buffer()
    while True:
        chunk = stream.read(CHUNK_SIZE)
        if not chunk:
            break
        data.append(chunk)

    if not len(data):
        raise EmptyStdinError("no input on standard input")
    return data.getvalue()


def read_file(path: str) -> bytes:
    """
    Reads a whole file. The size is probed by seeking to the end first, and
    exactly that many bytes must come back from the read.
    """
    try:
        fh = open(path, 'rb')
    except OSError as e:
        raise FileOpenError(f"{path}: {e.strerror}") from e

    with fh:
        try:
            length = fh.seek(0, os.SEEK_END)
            # An empty file contributes nothing; don't bother reading it.
            if length == 0:
                return b''
            fh.seek(0, os.SEEK_SET)
            data = fh.read(length)
        except OSError as e:
            raise FileOpenError(f"{path}: {e.strerror}") from e

    if len(data) != length:
        raise ShortReadError(f"{path}: file changed during execution")
    return data


def read_source(name: str, stdin=None) -> bytes:
    """'-' is standard input, anything else is a file path."""
    if name == '-':
        return read_stdin(stdin)
    return read_file(name)


def append_with_flags(out: Buffer, config: Config, data: bytes):
    """
    Appends one source to `out`, a line at a time, applying the options in
    `config`. A trailing fragment with no newline is treated as a final
    partial line: it can be numbered, but never gets a '$' end marker.
    """
    pos = 0
    end = len(data)

    while pos < end:
        # -s: jump to the last newline of a run so only one blank line remains.
        if config.squeeze_blank and data[pos] == NEWLINE:
            while pos < end and data[pos] == NEWLINE:
                pos += 1
            pos -= 1

        line_end = data.find(b'\n', pos)
        if line_end == -1:
            line_end = end
        else:
            line_end += 1
        line = data[pos:line_end]

        if config.number is NumberMode.ALL or \
                (config.number is NumberMode.NONBLANK and line != b'\n'):
            out.append(b'%d\t' % (out.line_count + 1))
            out.line_count += 1

        if config.show_ends and line.endswith(b'\n'):
            out.append(line, len(line) - 1)
            out.append(b'$\n')
        else:
            out.append(line)

        pos = line_end


def run(config: Config, sources, stdin=None) -> bytes:
    """Transforms every source, in order, into a single output."""
    out = Buffer()
    for name in sources:
        append_with_flags(out, config, read_source(name, stdin))
    return out.getvalue()


class ArgumentParser(argparse.ArgumentParser):
    """Raises InvalidFlagError instead of printing and exiting."""

    def error(self, message):
        raise InvalidFlagError(message)


def check_flag_tokens(args_list: list):
    """
    argparse takes '--' as end-of-options and '-1' as a file name. Both
    look like flags here, so neither is allowed.
    """
    for arg in args_list:
        if arg == '--' or re.match(r'^-\d*\.?\d+$', arg):
            raise InvalidFlagError(f"invalid flag '{arg}'")


def build_parser() -> ArgumentParser:
    parser = ArgumentParser(
        prog=PROGRAM,
        description="Concatenate and print files.",
        usage="%(prog)s [-bnsE] [file ...]"
    )
    # -n and -b share a destination, so whichever comes last wins.
    parser.add_argument('-n', dest='number', action='store_const', const=NumberMode.ALL,
                        default=NumberMode.NONE, help='Number all output lines.')
    parser.add_argument('-b', dest='number', action='store_const', const=NumberMode.NONBLANK,
                        help='Number non-blank output lines.')
    parser.add_argument('-s', action='store_true', help='Squeeze multiple adjacent blank lines.')
    parser.add_argument('-E', action='store_true', help='Display $ at the end of each line.')

    parser.add_argument('files', nargs='*',
                        help="Files to process; '-' is standard input. Reads from stdin if none are given.")
    return parser


def main(argv=None) -> int:
    """Parses arguments, builds the output and writes it out in one go."""
    parser = build_parser()

    try:
        if argv is None:
            argv = sys.argv[1:]
        check_flag_tokens(argv)
        # Flags may appear anywhere among the files.
        args = parser.parse_intermixed_args(argv)
        config = Config.from_args(args)
        output = run(config, args.files or ['-'])
    except (InvalidFlagError, EmptyStdinError) as e:
        parser.print_usage(sys.stderr)
        print(f"{PROGRAM}: {e}", file=sys.stderr)
        return EX_FAILURE
    except CatError as e:
        print(f"{PROGRAM}: {e}", file=sys.stderr)
        return EX_FAILURE

    try:
        sys.stdout.buffer.write(output)
        sys.stdout.buffer.flush()
    except BrokenPipeError:
        # The reader went away (e.g. `cat file | head`); stay quiet about it.
        sys.stderr.close()
        return EX_FAILURE

    return EX_SUCCESS


if __name__ == "__main__":
    sys.exit(main())
