import json
import os
import sys
import time

from clang.cindex import Diagnostic

from ast_parser import ParseCppError, parse_cpp_file
from ast_walker import walk_ast
from ban_config import BanConfigError, load_ban_config, parse_ban_argument
from engine_factory import build_engine


def _round_ms(value):
    return round(max(0.0, float(value)), 3)


def _clang_hint_for_message(text):
    if "expected ';'" in text:
        return "Add a semicolon to end the previous statement.", 0.96
    if "expected expression" in text:
        return "Complete the expression (for example: value, function call, or operation).", 0.94
    if "use of undeclared identifier" in text:
        return "Declare this identifier first, or fix a misspelled variable/function name.", 0.92
    if "no member named" in text:
        return "Check the class definition and member spelling; verify the object type is correct.", 0.9
    if "file not found" in text:
        return "Check include/file paths and ensure the referenced header/file exists.", 0.9
    if "unknown type name" in text or "no type named" in text:
        return "Include the correct header and verify the type name and namespace.", 0.9
    return "Review this diagnostic and fix the code so it compiles.", 0.88


def _clang_items(translation_unit, target_file):
    severity_map = {
        Diagnostic.Ignored: "info",
        Diagnostic.Note: "info",
        Diagnostic.Warning: "warning",
        Diagnostic.Error: "error",
        Diagnostic.Fatal: "error",
    }
    items = []

    for diag in translation_unit.diagnostics:
        loc = diag.location
        loc_file = loc.file.name if loc and loc.file else None
        if loc_file and os.path.realpath(loc_file) != target_file:
            continue

        severity = severity_map.get(diag.severity, "info")
        suggestion, confidence = _clang_hint_for_message(diag.spelling.lower())
        items.append(
            {
                "severity": severity,
                "source": "clang",
                "rule": None,
                "line": loc.line if loc else None,
                "column": loc.column if loc else None,
                "message": diag.spelling,
                "suggestion": suggestion,
                "confidence": confidence,
            }
        )

    return items


def _has_blocking_parse_errors(clang_items):
    return any(item.get("severity") == "error" for item in clang_items)


def _limited_analysis_item(first_error_line=None):
    return {
        "severity": "warning",
        "source": "runtime",
        "rule": None,
        "line": first_error_line if isinstance(first_error_line, int) else None,
        "column": None,
        "message": (
            "Rule-based checks were limited because parser errors were found. "
            "Fix parser errors first, then run analysis again."
        ),
        "suggestion": "Resolve syntax/parse errors first; banned calls are only reported on code that parses.",
        "confidence": 0.97,
    }


def _summary(items):
    out = {"error": 0, "warning": 0, "info": 0}
    by_rule = {}
    for item in items:
        sev = item.get("severity", "info")
        if sev not in out:
            sev = "info"
        out[sev] += 1

        rule = item.get("rule")
        if rule:
            by_rule[rule] = by_rule.get(rule, 0) + 1

    out["total"] = out["error"] + out["warning"] + out["info"]
    out["by_rule"] = by_rule
    return out


def _sort_items(items):
    severity_rank = {"error": 0, "warning": 1, "info": 2}
    return sorted(
        items,
        key=lambda i: (
            i.get("line") if isinstance(i.get("line"), int) else 10**9,
            i.get("column") if isinstance(i.get("column"), int) else 10**9,
            severity_rank.get(i.get("severity", "info"), 3),
            i.get("source", ""),
        ),
    )


def _timing_ms(parse_ms, traversal_ms, interpretation_ms):
    total = parse_ms + traversal_ms + interpretation_ms
    return {
        "parse": _round_ms(parse_ms),
        "traversal": _round_ms(traversal_ms),
        "interpretation": _round_ms(interpretation_ms),
        "total": _round_ms(total),
    }


def _format_item(item):
    prefix = "[ERROR]" if item.get("severity") == "error" else "[WARN]"
    location_parts = []
    if isinstance(item.get("line"), int):
        location_parts.append(f"line {item['line']}")
    if isinstance(item.get("column"), int):
        location_parts.append(f"column {item['column']}")
    location = f" ({', '.join(location_parts)})" if location_parts else ""
    return f"{prefix} {item.get('message', '').strip()}{location}"


def _usage_error(error, json_mode):
    if json_mode:
        print(json.dumps({"ok": False, "error": error}))
    else:
        print(error)


def _pop_option(args, flag):
    """
    Remove every `flag value` occurrence from args, returning the values.
    A trailing flag without a value is returned as None.
    """
    values = []
    while flag in args:
        idx = args.index(flag)
        if idx + 1 >= len(args):
            args[:] = args[:idx]
            values.append(None)
            break
        values.append(args[idx + 1])
        args[:] = args[:idx] + args[idx + 2 :]
    return values


def analyze_file(filename, ban_pairs, *, debug=False):
    display_name = os.path.basename(filename)
    target_file = os.path.realpath(filename)

    parse_start = time.perf_counter()
    try:
        translation_unit = parse_cpp_file(filename)
    except ParseCppError as exc:
        parse_ms = (time.perf_counter() - parse_start) * 1000.0
        parse_message = f"Failed to parse {display_name}: {exc}"
        return {
            "file": display_name,
            "path": target_file,
            "ok": False,
            "error": parse_message,
            "findings": [],
            "items": [
                {
                    "severity": "error",
                    "source": "runtime",
                    "rule": None,
                    "line": None,
                    "column": None,
                    "message": parse_message,
                    "suggestion": (
                        "Check that the file exists, then run "
                        "clang++ -std=gnu++17 -fsyntax-only <file> for detailed syntax diagnostics."
                    ),
                    "confidence": 1.0,
                }
            ],
            "summary": {"error": 1, "warning": 0, "info": 0, "total": 1, "by_rule": {}},
            "timing_ms": _timing_ms(parse_ms, 0.0, 0.0),
        }
    parse_ms = (time.perf_counter() - parse_start) * 1000.0

    traversal_start = time.perf_counter()
    nodes = []
    walk_ast(translation_unit.cursor, nodes, debug=debug, target_file=target_file)
    traversal_ms = (time.perf_counter() - traversal_start) * 1000.0

    clang_items = _clang_items(translation_unit, target_file)
    blocking_parse_errors = _has_blocking_parse_errors(clang_items)

    interpretation_ms = 0.0
    findings = []
    if not blocking_parse_errors:
        interpretation_start = time.perf_counter()
        engine = build_engine(ban_pairs)
        findings = engine.run(nodes)
        interpretation_ms = (time.perf_counter() - interpretation_start) * 1000.0

    combined_items = list(clang_items) + [f.to_item() for f in findings]
    if blocking_parse_errors:
        error_lines = [item.get("line") for item in clang_items if item.get("severity") == "error"]
        first_error_line = min((ln for ln in error_lines if isinstance(ln, int)), default=None)
        combined_items.append(_limited_analysis_item(first_error_line))

    items = _sort_items(combined_items)
    return {
        "file": display_name,
        "path": target_file,
        "ok": True,
        "error": None,
        "findings": [f.message for f in findings],
        "items": items,
        "summary": _summary(items),
        "timing_ms": _timing_ms(parse_ms, traversal_ms, interpretation_ms),
    }


def main(argv=None):
    args = list(sys.argv[1:] if argv is None else argv)
    json_mode = True
    if "--text" in args:
        json_mode = False
        args = [a for a in args if a != "--text"]

    debug = False
    if "--debug" in args:
        debug = True
        args = [a for a in args if a != "--debug"]

    ban_pairs = []
    try:
        for path in _pop_option(args, "--config"):
            if path is None:
                raise BanConfigError("Missing value after --config (expected a JSON file path).")
            ban_pairs.extend(load_ban_config(path))
        for value in _pop_option(args, "--ban"):
            if value is None:
                raise BanConfigError("Missing value after --ban (expected comma-separated object.function names).")
            ban_pairs.extend(parse_ban_argument(value))
    except BanConfigError as exc:
        _usage_error(str(exc), json_mode)
        return 2

    files = args
    if not files:
        _usage_error("No files provided.", json_mode)
        return 2

    overall_start = time.perf_counter()
    results = []

    for idx, filename in enumerate(files):
        result = analyze_file(filename, ban_pairs, debug=debug)
        results.append(result)
        if json_mode:
            continue

        if len(files) > 1:
            print(f"=== {result['file']} ===")
        for item in result["items"]:
            if item.get("severity") in {"error", "warning"}:
                print(_format_item(item))

        timing = result["timing_ms"]
        print(
            f"[timing] parse: {timing['parse']} ms, traversal: {timing['traversal']} ms, "
            f"interpretation: {timing['interpretation']} ms, total: {timing['total']} ms."
        )
        if idx < len(files) - 1:
            print()

    if json_mode:
        total_ms = _round_ms((time.perf_counter() - overall_start) * 1000.0)
        print(
            json.dumps(
                {
                    "ok": True,
                    "results": results,
                    "timing_ms": {"total": total_ms},
                    "ban": [list(pair) for pair in ban_pairs],
                }
            )
        )
    return 0


if __name__ == "__main__":
    sys.exit(main())
