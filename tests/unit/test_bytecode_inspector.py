from core.analysis.bytecode_inspector import extract_compiler_version

IPFS_TRAILER = "a2646970667358221220" + "ab" * 32 + "64736f6c6343000813" + "0033"


def test_ipfs_trailer_version():
    bytecode = "0x6080604052348015600f57600080fd5b50" + IPFS_TRAILER
    assert extract_compiler_version(bytecode) == "0.8.19"


def test_bare_solc_marker_without_prefix():
    bytecode = "6080604052" + "64736f6c634300060c" + "0033"
    assert extract_compiler_version(bytecode) == "0.6.12"


def test_uppercase_hex_is_accepted():
    bytecode = ("0x6080" + "64736f6c6343000813").upper().replace("0X", "0x")
    assert extract_compiler_version(bytecode) == "0.8.19"


def test_loose_marker_gives_major_minor():
    bytecode = "0x6080604052" + "64736f6c63" + "0007" + "0033"
    assert extract_compiler_version(bytecode) == "0.7"


def test_no_marker_is_unknown():
    assert extract_compiler_version("0x6080604052348015600f57600080fd5b50") == "Unknown"


def test_empty_or_missing_bytecode_is_unknown():
    assert extract_compiler_version("0x") == "Unknown"
    assert extract_compiler_version("") == "Unknown"
    assert extract_compiler_version(None) == "Unknown"
