#!/usr/bin/env python3
"""
Disassemble a .NET assembly, replace the bodies of methods marked with
[ILFunc("...")] by the IL given in the attribute, and reassemble it.
"""

import logging
import shutil
import sys
import tempfile
from argparse import ArgumentParser, RawTextHelpFormatter
from pathlib import Path

from . import pe_info, toolchain
from .errors import MalformedInputError, RewriteError
from .il_rewrite import rewrite_il
from .toolchain import BuildType, ToolchainError

logger = logging.getLogger("ilfunc")

EXIT_OK = 0
EXIT_NO_ILASM = 1
EXIT_NO_ILDASM = 2
EXIT_NO_INPUT = 3
EXIT_DISASSEMBLE_FAILED = 4
EXIT_ASSEMBLE_FAILED = 5
EXIT_REWRITE_FAILED = 6


def setup_logging(verbose=False):
    logger.setLevel(logging.DEBUG)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(logging.DEBUG if verbose else logging.INFO)
    console_handler.setFormatter(logging.Formatter("{%(name)s - %(levelname)s} %(message)s"))
    logger.addHandler(console_handler)


def log_tool_failure(e: ToolchainError):
    logger.error(str(e))
    if e.stdout:
        logger.error(f"Output:\n{e.stdout}")
    if e.stderr:
        logger.error(f"Errors:\n{e.stderr}")


def rewrite_file(il: Path, out: Path):
    """Rewrite an .il file in text form; nothing is written if rewriting fails."""
    # newline="" keeps \r\n intact, offsets depend on it
    try:
        with open(il, encoding="utf-8-sig", newline="") as f:
            text = f.read()
    except UnicodeDecodeError as e:
        err = MalformedInputError(f"not UTF-8 text: {e.reason}", offset=e.start)
        logger.error(f"{il}: {err.describe()}")
        raise err from e
    try:
        new_text = rewrite_il(text)
    except RewriteError as e:
        logger.error(f"{il}: {e.describe(text)}")
        raise
    with open(out, "w", encoding="utf-8-sig", newline="") as f:
        f.write(new_text)


def keep_copy(src: Path, keep_dir, name):
    if keep_dir is None:
        return
    keep_dir = Path(keep_dir)
    keep_dir.mkdir(parents=True, exist_ok=True)
    shutil.copyfile(src, keep_dir / name)


def roundtrip(ildasm, ilasm, pe: Path, out: Path, build_type=BuildType.AGNOSTIC,
              platform=None, keep_dir=None) -> int:
    info = pe_info.inspect_input(pe)
    if not info.is_dotnet:
        logger.error(f"{pe} has no CLR header, not a .NET assembly")
        return EXIT_NO_INPUT
    if platform is None and info.is_64bit:
        platform = "x64"

    with tempfile.TemporaryDirectory(prefix="ilfunc_") as tmp:
        il = Path(tmp) / pe.with_suffix(".il").name

        try:
            toolchain.disassemble(ildasm, pe, il)
        except ToolchainError as e:
            log_tool_failure(e)
            return EXIT_DISASSEMBLE_FAILED

        keep_copy(il, keep_dir, il.stem + ".orig.il")
        try:
            rewrite_file(il, il)
        except RewriteError:
            return EXIT_REWRITE_FAILED
        keep_copy(il, keep_dir, il.name)

        try:
            toolchain.assemble(ilasm, il, out, build_type, platform, info.is_dll)
        except ToolchainError as e:
            log_tool_failure(e)
            return EXIT_ASSEMBLE_FAILED

    logger.info(f"processing succeeded: {out}")
    return EXIT_OK


def build_parser():
    p = ArgumentParser(prog="ilfunc", formatter_class=RawTextHelpFormatter,
                       description=__doc__)
    p.add_argument("input", help="path to the .exe or .dll to rewrite;\n"
                                 "an .il file is rewritten as text without ildasm/ilasm")
    p.add_argument("-o", "--out", help="output path, default: overwrite the input")
    p.add_argument("--ilasm", help=f"path to ilasm.exe (or $ILFUNC_ILASM), default:\n{toolchain.DEFAULT_ILASM}")
    p.add_argument("--ildasm", help=f"path to ildasm.exe (or $ILFUNC_ILDASM), default:\n{toolchain.DEFAULT_ILDASM}")
    build = p.add_mutually_exclusive_group()
    build.add_argument("--debug", dest="build_type", action="store_const", const=BuildType.DEBUG,
                       help="reassemble with full debug information")
    build.add_argument("--release", dest="build_type", action="store_const", const=BuildType.RELEASE,
                       help="reassemble with optimized debug information (the default)")
    plat = p.add_mutually_exclusive_group()
    plat.add_argument("--x64", dest="platform", action="store_const", const="x64",
                      help="produce a 64-bit (PE32+) image")
    plat.add_argument("--x86", dest="platform", action="store_const", const="x86",
                      help="produce a 32-bit preferred image")
    p.add_argument("-k", "--keep", metavar="DIR",
                   help="keep the original and rewritten .il files in DIR")
    p.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    p.set_defaults(build_type=BuildType.AGNOSTIC)
    return p


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(args.verbose)

    pe = Path(args.input)
    out = Path(args.out) if args.out else pe

    if pe.suffix.lower() == ".il":
        if not pe.is_file():
            logger.error(f"Cannot find input file '{pe}'")
            return EXIT_NO_INPUT
        try:
            rewrite_file(pe, out)
        except RewriteError:
            return EXIT_REWRITE_FAILED
        logger.info(f"processing succeeded: {out}")
        return EXIT_OK

    ilasm = toolchain.find_tool("ilasm", args.ilasm, "ILFUNC_ILASM", toolchain.DEFAULT_ILASM)
    if ilasm is None or not ilasm.is_file():
        logger.error(f"Cannot find ilasm at '{ilasm}'. Please specify with --ilasm=<path>.")
        return EXIT_NO_ILASM

    ildasm = toolchain.find_tool("ildasm", args.ildasm, "ILFUNC_ILDASM", toolchain.DEFAULT_ILDASM)
    if ildasm is None or not ildasm.is_file():
        logger.error(f"Cannot find ildasm at '{ildasm}'. Please specify with --ildasm=<path>.")
        return EXIT_NO_ILDASM

    if not pe.is_file():
        logger.error(f"Cannot find input file '{pe}'")
        return EXIT_NO_INPUT

    return roundtrip(ildasm, ilasm, pe, out, args.build_type, args.platform, args.keep)


if __name__ == "__main__":
    sys.exit(main())
