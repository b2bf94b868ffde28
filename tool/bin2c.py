#!/usr/bin/env python3
import argparse
import sys

import numpy as np

HEX_DUMP_WIDTH = 16  # number of bytes per row
HEX_TOKEN_WIDTH = len("0x00, ")
HEX_DUMP_SPACE_WIDTH = HEX_DUMP_WIDTH * HEX_TOKEN_WIDTH

DEFAULT_NAME = "data"

EXIT_SUCCESS = 0
EXIT_FAILURE = 1


class UsageError(Exception):
    pass


class _ArgumentParser(argparse.ArgumentParser):
    def error(self, message):
        raise UsageError(message)


def _add_help_flag(parser):
    parser.add_argument("-h", "--help", action="store_true", help="Show this help.")


def _build_parser():
    parser = _ArgumentParser(
        prog="bin2c",
        usage="bin2c -f <in> -o <out> -n <name>",
        description="bin2c, binary to C",
        add_help=False,
        allow_abbrev=False,
    )
    parser.add_argument("-f", dest="input", metavar="<file path>", help="Input file path.")
    parser.add_argument("-o", dest="output", metavar="<file path>", help="Output file path.")
    parser.add_argument("-n", dest="name", metavar="<name>", help="Array name.")
    _add_help_flag(parser)
    return parser


def _help_requested(argv):
    # help wins over every other flag, even a malformed one
    parser = _ArgumentParser(add_help=False, allow_abbrev=False)
    _add_help_flag(parser)
    args, _ = parser.parse_known_args(argv)
    return args.help


def print_help(error=None):
    if error is not None:
        print(f"Error:\n{error}\n")
    _build_parser().print_help(sys.stdout)


def parse_args(argv):
    """
    Extract input path, output path and array name from the argument list.

    Unknown arguments are ignored. An empty value counts as absent.

    Raises:
        UsageError: A required flag is missing or the arguments are malformed.
    """
    if _help_requested(argv):
        return argparse.Namespace(input=None, output=None, name=None, help=True)

    args, _ = _build_parser().parse_known_args(argv)
    if not args.input:
        raise UsageError("Input file name must be specified.")
    if not args.output:
        raise UsageError("Output file name must be specified.")
    if not args.name:
        args.name = DEFAULT_NAME
    return args


def ascii_char(value):
    # backslash would turn the trailing comment into a line continuation
    if 0x20 <= value <= 0x7E and value != 0x5C:
        return chr(value)
    return "."


def render_row(row):
    hex_text = "".join(f"0x{value:02x}, " for value in row)
    hex_text = hex_text.ljust(HEX_DUMP_SPACE_WIDTH)[:HEX_DUMP_SPACE_WIDTH]
    ascii_text = "".join(ascii_char(value) for value in row)
    return f"\t{hex_text}// {ascii_text}\n"


def render(data, name=DEFAULT_NAME):
    """
    Convert a byte buffer to a static C array declaration.

    Args:
        data (bytes or numpy.ndarray): Buffer of unsigned 8-bit values.
        name (str): Identifier of the emitted array, used verbatim.

    Returns:
        str: Formatted C source code as a string.
    """
    if isinstance(data, (bytes, bytearray, memoryview)):
        data = np.frombuffer(data, dtype=np.uint8)
    else:
        data = np.asarray(data, dtype=np.uint8)

    lines = [f"static const uint8_t {name}[{data.size}] =\n", "{\n"]
    for i in range(0, data.size, HEX_DUMP_WIDTH):
        lines.append(render_row(data[i : i + HEX_DUMP_WIDTH].tolist()))
    lines.append("};\n")

    return "".join(lines)


def read_buffer(file_path):
    with open(file_path, "rb") as file:
        return np.fromfile(file, dtype=np.uint8)


def write_output(output_file, text):
    # names from argv may carry undecodable bytes; write them back unchanged
    content = text.encode("utf-8", "surrogateescape")
    with open(output_file, "wb") as output:
        output.write(content)


def file_to_c_array(file_path, output_file, name=DEFAULT_NAME):
    """
    Read file_path and write its C array declaration to output_file.

    Returns False without writing anything when the input can't be read, and
    False when the output can't be written. No message is printed either way.
    """
    try:
        data = read_buffer(file_path)
    except OSError:
        return False

    text = render(data, name)
    del data

    try:
        write_output(output_file, text)
    except (OSError, UnicodeEncodeError):
        return False

    return True


def main(argv=None):
    if argv is None:
        argv = sys.argv[1:]

    try:
        args = parse_args(argv)
    except UsageError as e:
        print_help(str(e))
        return EXIT_FAILURE

    if args.help:
        print_help()
        return EXIT_FAILURE

    # I/O failures are not reported through the exit status
    file_to_c_array(args.input, args.output, args.name)
    return EXIT_SUCCESS


def run():
    sys.exit(main())


if __name__ == "__main__":
    run()
