import os
import sys
import subprocess
from clang import cindex


_LIBRARY_NAMES = ("libclang.dylib", "libclang.so", "libclang.dll")


def _find_libclang():
    env_path = os.environ.get("LIBCLANG_FILE") or os.environ.get("LIBCLANG_PATH")
    if env_path:
        if os.path.isdir(env_path):
            for name in _LIBRARY_NAMES:
                candidate = os.path.join(env_path, name)
                if os.path.exists(candidate):
                    return candidate
        if os.path.isfile(env_path):
            return env_path

    search_roots = []
    if getattr(sys, "frozen", False):
        base = getattr(sys, "_MEIPASS", None)
        if base:
            search_roots.append(base)
    search_roots.append(os.path.abspath(os.path.dirname(__file__)))

    for root in search_roots:
        for name in _LIBRARY_NAMES:
            for rel in (name, os.path.join("lib", name)):
                candidate = os.path.join(root, rel)
                if os.path.exists(candidate):
                    return candidate

    for candidate in (
        "/opt/homebrew/opt/llvm/lib/libclang.dylib",
        "/usr/local/opt/llvm/lib/libclang.dylib",
    ):
        if os.path.exists(candidate):
            return candidate

    # The libclang wheel knows where its own shared library lives.
    return None


libclang_path = _find_libclang()
if libclang_path:
    cindex.Config.set_library_file(libclang_path)


DEFAULT_ARGS = ["-x", "c++", "-std=gnu++17"]


class ParseCppError(RuntimeError):
    pass


def _translation_unit_failure_hint(filename):
    base = os.path.basename(filename)
    return (
        f"Could not parse '{base}'. "
        "This usually means severe syntax errors or missing C++ headers/toolchain paths. "
        "Try: clang++ -std=gnu++17 -fsyntax-only <file> to see compiler diagnostics."
    )


def _sdk_args():
    """
    Extra include paths for the macOS SDK; empty everywhere xcrun is missing.
    """
    try:
        sdk_path = subprocess.check_output(
            ["xcrun", "--show-sdk-path"],
            stderr=subprocess.DEVNULL,
            text=True,
        ).strip()
    except (OSError, subprocess.CalledProcessError):
        return []

    if not sdk_path:
        return []
    return [
        "-isysroot",
        sdk_path,
        "-I",
        os.path.join(sdk_path, "usr/include/c++/v1"),
    ]


def _parse(filename, extra_args, unsaved_files=None):
    index = cindex.Index.create()
    args = DEFAULT_ARGS + _sdk_args() + (extra_args or [])
    options = cindex.TranslationUnit.PARSE_DETAILED_PROCESSING_RECORD

    try:
        return index.parse(filename, args=args, unsaved_files=unsaved_files, options=options)
    except cindex.TranslationUnitLoadError as exc:
        raise ParseCppError(_translation_unit_failure_hint(filename)) from exc


def parse_cpp_file(filename, extra_args=None):
    if not os.path.exists(filename):
        raise ParseCppError(f"Input file does not exist: {filename}")
    if not os.path.isfile(filename):
        raise ParseCppError(f"Input path is not a file: {filename}")

    return _parse(filename, extra_args)


def parse_cpp_source(text, filename="input.cpp", extra_args=None):
    """
    Parse C++ source held in memory. `filename` only names the buffer;
    nothing is read from or written to disk.
    """
    return _parse(filename, extra_args, unsaved_files=[(filename, text)])
