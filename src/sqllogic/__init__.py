"""sqllogic - A runner for SQL logic test scripts."""

from sqllogic.adapters import (
    AdapterUnavailable,
    DuckDBAdapter,
    ExecutionAdapter,
    SQLiteAdapter,
    create_adapter,
)
from sqllogic.comparator import compare
from sqllogic.model import (
    ColumnType,
    Comment,
    Condition,
    Expect,
    Failure,
    HaltDirective,
    Outcome,
    QueryDirective,
    SortMode,
    StatementDirective,
    Success,
    TestScript,
    Verdict,
)
from sqllogic.parsing import ParseError, parse_file, parse_script
from sqllogic.report import Reporter
from sqllogic.runner import CancelToken, Runner, RunnerConfig, ScriptRunner
from sqllogic.values import canonical

__all__ = [
    # Main API
    "parse_script",
    "parse_file",
    "Runner",
    "RunnerConfig",
    "ScriptRunner",
    "CancelToken",
    "Reporter",
    "compare",
    "canonical",
    # Adapters
    "ExecutionAdapter",
    "SQLiteAdapter",
    "DuckDBAdapter",
    "create_adapter",
    "AdapterUnavailable",
    # Model
    "TestScript",
    "StatementDirective",
    "QueryDirective",
    "HaltDirective",
    "Comment",
    "Condition",
    "ColumnType",
    "SortMode",
    "Expect",
    "Success",
    "Failure",
    "Outcome",
    "Verdict",
    "ParseError",
]

__version__ = "0.1.0"
