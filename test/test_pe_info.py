from types import SimpleNamespace

import pefile
import pytest

from ilfunc import pe_info


def fake_pe(characteristics=0, clr=(0x2008, 0x48), magic=pefile.OPTIONAL_HEADER_MAGIC_PE):
    directories = [SimpleNamespace(VirtualAddress=0, Size=0) for _ in range(16)]
    directories[pefile.DIRECTORY_ENTRY[pe_info.COM_DESCRIPTOR]] = SimpleNamespace(
        VirtualAddress=clr[0], Size=clr[1])
    return SimpleNamespace(
        FILE_HEADER=SimpleNamespace(Characteristics=characteristics),
        OPTIONAL_HEADER=SimpleNamespace(DATA_DIRECTORY=directories, Magic=magic),
        close=lambda: None,
    )


@pytest.fixture
def use_pe(monkeypatch):
    def install(pe):
        monkeypatch.setattr(pe_info.pefile, "PE", lambda name, fast_load=False: pe)
    return install


def test_dotnet_exe(use_pe):
    use_pe(fake_pe())
    assert pe_info.read_pe_info("Demo.exe") == pe_info.PeInfo(is_dll=False, is_dotnet=True, is_64bit=False)


def test_dotnet_dll_64bit(use_pe):
    dll = pefile.IMAGE_CHARACTERISTICS["IMAGE_FILE_DLL"]
    use_pe(fake_pe(characteristics=dll, magic=pefile.OPTIONAL_HEADER_MAGIC_PE_PLUS))
    assert pe_info.read_pe_info("Lib.dll") == pe_info.PeInfo(is_dll=True, is_dotnet=True, is_64bit=True)


def test_native_image(use_pe):
    use_pe(fake_pe(clr=(0, 0)))
    assert not pe_info.read_pe_info("native.exe").is_dotnet


@pytest.mark.parametrize("name,is_dll", [("Lib.DLL", True), ("Demo.exe", False)])
def test_inspect_input_falls_back_to_extension(monkeypatch, name, is_dll):
    def not_pe(path, fast_load=False):
        raise pefile.PEFormatError("DOS Header magic not found.")

    monkeypatch.setattr(pe_info.pefile, "PE", not_pe)
    info = pe_info.inspect_input(name)
    assert info.is_dll == is_dll
    assert info.is_dotnet
