# ildasm/ilasm invocation. Both are run to completion with their output
# captured; a non-zero exit code becomes a ToolchainError.

import enum
import logging
import os
import shutil
import subprocess
from pathlib import Path

logger = logging.getLogger(__name__)

DEFAULT_ILASM = r"C:\Windows\Microsoft.NET\Framework\v4.0.30319\ilasm.exe"
DEFAULT_ILDASM = r"C:\Program Files (x86)\Microsoft SDKs\Windows\v8.1A\bin\NETFX 4.5.1 Tools\ildasm.exe"


class BuildType(enum.Enum):
    AGNOSTIC = "agnostic"
    DEBUG = "debug"
    RELEASE = "release"


class ToolchainError(Exception):
    def __init__(self, tool, returncode=None, stdout="", stderr="", message=None):
        self.tool = str(tool)
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr
        if message is None:
            message = f"'{self.tool}' failed with exit code {returncode}"
        super().__init__(message)


def find_tool(name, option=None, env_var=None, default=None):
    """Pick the tool path: explicit option, then $env_var, then PATH, then default."""
    for candidate in (option, os.environ.get(env_var) if env_var else None):
        if candidate:
            return Path(candidate)
    found = shutil.which(name)
    if found:
        return Path(found)
    return Path(default) if default else None


def run_tool(tool, args: list) -> subprocess.CompletedProcess:
    cmd = [str(tool)] + [str(a) for a in args]
    logger.debug(f"running: {cmd}")
    try:
        res = subprocess.run(cmd, capture_output=True, text=True, errors="replace")
    except OSError as e:
        raise ToolchainError(tool, message=f"cannot run '{tool}': {e}") from e
    if res.returncode != 0:
        raise ToolchainError(tool, res.returncode, res.stdout, res.stderr)
    return res


def disassemble(ildasm, pe: Path, il: Path):
    logger.info(f"disassemble: {pe} -> {il}")
    run_tool(ildasm, ["/linenum", "/typelist", "/utf8", "/nobar", str(pe), f"/out={il}"])


def assemble_args(il: Path, out: Path, build_type=BuildType.AGNOSTIC, platform=None,
                  is_dll=False, resource=None) -> list:
    args = ["/highentropyva"]

    if build_type == BuildType.DEBUG:
        args.append("/debug")
    else:
        args.append("/debug=opt")

    if resource is not None:
        args.append(f"/resource={resource}")

    args.append(str(il))

    if is_dll:
        args.append("/dll")

    if platform == "x64":
        args += ["/pe64", "/x64"]
    elif platform == "x86":
        args.append("/32bitpreferred")

    args.append(f"/output={out}")
    return args


def assemble(ilasm, il: Path, out: Path, build_type=BuildType.AGNOSTIC, platform=None,
             is_dll=False):
    # ildasm writes the unmanaged resources next to the .il file
    res = il.with_suffix(".res")
    resource = res if res.exists() else None

    logger.info(f"reassemble: {il} -> {out}")
    run_tool(ilasm, assemble_args(il, out, build_type, platform, is_dll, resource))
