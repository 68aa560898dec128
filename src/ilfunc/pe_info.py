import logging
from dataclasses import dataclass
from pathlib import Path

import pefile

logger = logging.getLogger(__name__)

COM_DESCRIPTOR = "IMAGE_DIRECTORY_ENTRY_COM_DESCRIPTOR"


@dataclass
class PeInfo:
    is_dll: bool
    is_dotnet: bool
    is_64bit: bool


def read_pe_info(path) -> PeInfo:
    """Inspect the PE headers of an assembly; raises pefile.PEFormatError for non-PE files."""
    pe = pefile.PE(str(path), fast_load=True)
    try:
        is_dll = bool(pe.FILE_HEADER.Characteristics & pefile.IMAGE_CHARACTERISTICS["IMAGE_FILE_DLL"])
        clr = pe.OPTIONAL_HEADER.DATA_DIRECTORY[pefile.DIRECTORY_ENTRY[COM_DESCRIPTOR]]
        is_dotnet = clr.VirtualAddress != 0 and clr.Size != 0
        is_64bit = pe.OPTIONAL_HEADER.Magic == pefile.OPTIONAL_HEADER_MAGIC_PE_PLUS
    finally:
        pe.close()
    return PeInfo(is_dll, is_dotnet, is_64bit)


def inspect_input(path) -> PeInfo:
    """
    Like read_pe_info, but falls back to guessing from the file extension
    when the file cannot be parsed as a PE image.
    """
    try:
        info = read_pe_info(path)
    except pefile.PEFormatError as e:
        logger.warning(f"{path}: not a readable PE image ({e}), assuming a .NET assembly")
        return PeInfo(is_dll=Path(path).suffix.lower() == ".dll", is_dotnet=True, is_64bit=False)
    logger.debug(f"{path}: {info}")
    return info
