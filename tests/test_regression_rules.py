import json
import os
import subprocess
import sys
import tempfile
import textwrap
import unittest
from pathlib import Path


ROOT = Path(__file__).resolve().parents[1]
ENGINE = ROOT / "lint_engine.py"

CONSOLE_PROGRAM = """
struct Console {
    void log(const char *) {}
    void error(const char *) {}
};
Console console;

int main() {
    console.log("x");
    console.error("x");
    return 0;
}
"""


def run_cli(args):
    proc = subprocess.run(
        [sys.executable, str(ENGINE)] + list(args),
        cwd=ROOT,
        capture_output=True,
        text=True,
        check=False,
    )
    return proc


def run_engine(code, ban=None, filename="fixture.cpp", extra_args=None):
    with tempfile.TemporaryDirectory() as td:
        src = Path(td) / filename
        src.write_text(textwrap.dedent(code), encoding="utf-8")

        cmd = list(extra_args or [])
        if ban is not None:
            cmd.extend(["--ban", ",".join(ban)])
        cmd.append(str(src))

        proc = run_cli(cmd)
        if proc.returncode != 0:
            raise RuntimeError(f"Engine failed:\nSTDOUT:\n{proc.stdout}\nSTDERR:\n{proc.stderr}")

        payload = json.loads(proc.stdout)
        if payload.get("ok") is not True:
            raise RuntimeError(f"Unexpected payload: {payload}")

        results = payload.get("results", [])
        if len(results) != 1:
            raise RuntimeError(f"Expected one result entry, got {len(results)}")

        return payload, results[0]


class RegressionRulesTest(unittest.TestCase):
    def test_banned_call_is_reported_with_location(self):
        payload, result = run_engine(CONSOLE_PROGRAM, ban=["console.log"])

        self.assertEqual(payload.get("ban"), [["console", "log"]])
        self.assertEqual(result.get("findings"), ["function invocation disallowed: console.log"])

        rule_items = [i for i in result.get("items", []) if i.get("source") == "rule"]
        self.assertEqual(len(rule_items), 1)
        item = rule_items[0]
        self.assertEqual(item.get("severity"), "warning")
        self.assertEqual(item.get("rule"), "ban")
        self.assertEqual(item.get("line"), 9)
        self.assertEqual(item.get("column"), 5)
        self.assertEqual(item.get("width"), len("console.log"))
        self.assertIsNotNone(item.get("suggestion"))

        self.assertEqual(result["summary"]["by_rule"], {"ban": 1})

    def test_no_ban_list_reports_nothing(self):
        _payload, result = run_engine(CONSOLE_PROGRAM)
        self.assertEqual(result.get("findings"), [])

    def test_config_file_is_combined_with_command_line(self):
        with tempfile.TemporaryDirectory() as td:
            config = Path(td) / "ban.json"
            config.write_text(json.dumps({"ban": [True, ["console", "error"]]}), encoding="utf-8")

            payload, result = run_engine(
                CONSOLE_PROGRAM,
                ban=["console.log"],
                extra_args=["--config", str(config)],
            )

        self.assertEqual(payload.get("ban"), [["console", "error"], ["console", "log"]])
        self.assertEqual(
            result.get("findings"),
            [
                "function invocation disallowed: console.log",
                "function invocation disallowed: console.error",
            ],
        )

    def test_timing_metadata_exists(self):
        payload, result = run_engine(CONSOLE_PROGRAM, ban=["console.log"])

        timing = result.get("timing_ms", {})
        for key in ("parse", "traversal", "interpretation", "total"):
            self.assertIn(key, timing)
            self.assertIsInstance(timing[key], (int, float))
            self.assertGreaterEqual(timing[key], 0)

        self.assertIsInstance(payload.get("timing_ms", {}).get("total"), (int, float))

    def test_parse_errors_suppress_rule_checks(self):
        _payload, result = run_engine(
            """
            int main() {
                console.log("x");
                return 0;
            }
            """,
            ban=["console.log"],
        )

        items = result.get("items", [])
        clang_errors = [i for i in items if i.get("source") == "clang" and i.get("severity") == "error"]
        self.assertTrue(clang_errors, "Expected clang errors for the undeclared receiver")
        self.assertTrue(
            any("Declare this identifier first" in (i.get("suggestion") or "") for i in clang_errors)
        )
        self.assertTrue(
            any(
                i.get("source") == "runtime" and "Rule-based checks were limited" in (i.get("message") or "")
                for i in items
            )
        )
        self.assertEqual(result.get("findings"), [])

    def test_missing_file_is_reported_per_file(self):
        proc = run_cli(["--ban", "console.log", str(ROOT / "does_not_exist.cpp")])
        self.assertEqual(proc.returncode, 0)

        payload = json.loads(proc.stdout)
        result = payload["results"][0]
        self.assertFalse(result["ok"])
        self.assertIn("Input file does not exist", result["error"])

    def test_result_names_the_file_and_its_real_path(self):
        with tempfile.TemporaryDirectory() as td:
            src = Path(td) / "pasted.cpp"
            src.write_text(CONSOLE_PROGRAM, encoding="utf-8")
            proc = run_cli(["--ban", "console.log", str(src)])
            real_path = os.path.realpath(src)

        self.assertEqual(proc.returncode, 0)
        result = json.loads(proc.stdout)["results"][0]
        self.assertEqual(result["file"], "pasted.cpp")
        self.assertEqual(result["path"], real_path)
        self.assertNotIn("is_pasted", result)

    def test_text_mode_prints_parse_failure_once(self):
        missing = str(ROOT / "does_not_exist.cpp")
        proc = run_cli(["--text", "--ban", "console.log", missing])

        self.assertEqual(proc.returncode, 0)
        self.assertEqual(proc.stdout.count("Failed to parse does_not_exist.cpp"), 1)
        self.assertIn("[ERROR] Failed to parse does_not_exist.cpp", proc.stdout)

    def test_invalid_ban_argument_is_a_usage_error(self):
        proc = run_cli(["--ban", "a.obj.fn", "whatever.cpp"])
        self.assertEqual(proc.returncode, 2)

        payload = json.loads(proc.stdout)
        self.assertFalse(payload["ok"])
        self.assertIn("exactly one dot", payload["error"])

    def test_text_mode_prints_warnings(self):
        with tempfile.TemporaryDirectory() as td:
            src = Path(td) / "fixture.cpp"
            src.write_text(CONSOLE_PROGRAM, encoding="utf-8")
            proc = run_cli(["--text", "--ban", "console.log", str(src)])

        self.assertEqual(proc.returncode, 0)
        self.assertIn(
            "[WARN] function invocation disallowed: console.log (line 9, column 5)",
            proc.stdout,
        )
        self.assertIn("[timing]", proc.stdout)


if __name__ == "__main__":
    unittest.main()
