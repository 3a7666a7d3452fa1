"""Drive test scripts through an execution adapter and collect verdicts."""

from __future__ import annotations

import hashlib
import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from concurrent.futures import TimeoutError as FuturesTimeout
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterable

from sqllogic.adapters import MEMORY, AdapterUnavailable, ExecutionAdapter, create_adapter
from sqllogic.comparator import compare
from sqllogic.model import ExecutionResult, Failure, HaltDirective, Outcome, TestScript, Verdict
from sqllogic.parsing import ParseError, ScriptParser
from sqllogic.report import Reporter

logger = logging.getLogger(__name__)

TIMEOUT_MESSAGE = "timeout"


class AdapterCrash(RuntimeError):
    """The adapter failed in a way that leaves its session unusable."""


@dataclass
class RunnerConfig:
    """Settings for one run.

    Attributes:
        engine: Name of a bundled adapter (see ``sqllogic.adapters.ADAPTERS``).
        database: ``:memory:`` for a fresh in-memory database per script, or a
            directory in which each script gets its own database file,
            recreated on every run.
        workers: Number of scripts executed in parallel.
        timeout: Seconds allowed per adapter call, or None for no limit.
        grace: Seconds to wait for an interrupted call to return.
    """

    engine: str = "sqlite"
    database: str = MEMORY
    workers: int = 1
    timeout: float | None = None
    grace: float = 1.0

    def adapter_for(self, script: TestScript) -> ExecutionAdapter:
        """Open an isolated adapter session for *script*."""
        if self.database == MEMORY:
            return create_adapter(self.engine, MEMORY)
        directory = Path(self.database)
        try:
            directory.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise AdapterUnavailable(f"Cannot create database directory '{directory}': {e}") from e
        db_path = directory / database_name(script.path)
        try:
            for stale in (db_path, db_path.with_name(db_path.name + ".wal")):
                stale.unlink(missing_ok=True)
        except OSError as e:
            raise AdapterUnavailable(f"Cannot remove stale database '{db_path}': {e}") from e
        return create_adapter(self.engine, str(db_path))


def database_name(script_path: str) -> str:
    """Return the database file name for the script at *script_path*.

    Scripts with the same name in different directories get distinct files.
    """
    digest = hashlib.sha1(str(Path(script_path).resolve()).encode("utf-8")).hexdigest()[:10]
    return f"{Path(script_path).stem}-{digest}.db"


class CancelToken:
    """Cooperative cancellation flag checked between scripts."""

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()


class ScriptRunner:
    """Run the directives of one script, in order, against one adapter."""

    def __init__(self, adapter: ExecutionAdapter, timeout: float | None = None, grace: float = 1.0) -> None:
        self.adapter = adapter
        self.timeout = timeout
        self.grace = grace
        self._pool: ThreadPoolExecutor | None = None

    def run(self, script: TestScript) -> list[Verdict]:
        """Execute every directive of *script* and return one verdict each.

        A failing directive never stops the script. A ``halt`` directive or an
        adapter crash marks every remaining directive as skipped.
        """
        verdicts: list[Verdict] = []
        stop_reason: str | None = None
        if self.timeout is not None:
            self._pool = ThreadPoolExecutor(max_workers=1, thread_name_prefix="sqllogic-exec")
        try:
            for case in script.cases:
                if stop_reason is not None:
                    verdicts.append(Verdict.for_case(script.path, case, Outcome.SKIPPED, reason=stop_reason))
                    continue

                if not all(c.allows(self.adapter.name) for c in case.conditions):
                    verdicts.append(
                        Verdict.for_case(
                            script.path, case, Outcome.SKIPPED,
                            reason=f"Not run on engine '{self.adapter.name}'",
                        )
                    )
                    continue

                if isinstance(case, HaltDirective):
                    logger.info("%s:%d: halt", script.path, case.line)
                    stop_reason = f"Halted at line {case.line}"
                    continue

                try:
                    result = self.execute(case.sql)
                except AdapterCrash as e:
                    logger.warning("%s:%d: adapter crashed: %s", script.path, case.line, e)
                    verdicts.append(
                        Verdict.for_case(script.path, case, Outcome.FAIL, reason=f"Adapter crashed: {e}")
                    )
                    stop_reason = f"Adapter crashed at line {case.line}"
                    continue

                verdict = compare(case, result, script.path)
                logger.debug("%s:%d: %s", script.path, case.line, verdict.outcome.value)
                verdicts.append(verdict)
        finally:
            if self._pool is not None:
                # A call that ignored its interrupt cannot be joined
                self._pool.shutdown(wait=False)
                self._pool = None
        return verdicts

    def execute(self, sql: str) -> ExecutionResult:
        """Run one statement, bounded by the timeout when one is set.

        Raises:
            AdapterCrash: If the adapter raised, or did not stop after a
                timeout interrupt.
        """
        if self._pool is None:
            try:
                return self.adapter.execute(sql)
            except Exception as e:
                raise AdapterCrash(f"{type(e).__name__}: {e}") from e

        future: Future[ExecutionResult] = self._pool.submit(self.adapter.execute, sql)
        try:
            return future.result(timeout=self.timeout)
        except FuturesTimeout:
            logger.warning("Statement timed out after %ss: %s", self.timeout, sql)
            self._interrupt()
            try:
                future.exception(timeout=self.grace)
            except FuturesTimeout as e:
                raise AdapterCrash("Adapter did not stop after timeout") from e
            return Failure(TIMEOUT_MESSAGE)
        except Exception as e:
            raise AdapterCrash(f"{type(e).__name__}: {e}") from e

    def _interrupt(self) -> None:
        interrupt = getattr(self.adapter, "interrupt", None)
        if interrupt is not None:
            interrupt()


class Runner:
    """Run many scripts, each in its own adapter session."""

    def __init__(
        self,
        config: RunnerConfig | None = None,
        reporter: Reporter | None = None,
        adapter_factory: Callable[[TestScript], ExecutionAdapter] | None = None,
        cancel: CancelToken | None = None,
    ) -> None:
        self.config = config or RunnerConfig()
        self.reporter = reporter or Reporter()
        self.adapter_factory = adapter_factory or self.config.adapter_for
        self.cancel = cancel or CancelToken()

    def run(self, paths: Iterable[Path | str]) -> Reporter:
        """Parse and run the scripts at *paths*.

        Malformed scripts are reported as parse errors and skipped.

        Raises:
            AdapterUnavailable: If the backend cannot be opened.
        """
        parser = ScriptParser()
        scripts: list[TestScript] = []
        for path in paths:
            try:
                scripts.append(parser.parse_file(path))
            except ParseError as e:
                logger.warning("Parse error: %s", e)
                self.reporter.record_parse_error(str(path), e.message, e.lineno)
            except (OSError, UnicodeDecodeError) as e:
                logger.warning("Cannot read %s: %s", path, e)
                self.reporter.record_parse_error(str(path), f"Cannot read script: {e}", 0)
        return self.run_scripts(scripts)

    def run_scripts(self, scripts: Iterable[TestScript]) -> Reporter:
        """Run already-parsed scripts, up to ``config.workers`` at a time."""
        workers = max(1, self.config.workers)
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="sqllogic-script") as pool:
            futures = [pool.submit(self._run_one, script) for script in scripts]
            try:
                for future in futures:
                    future.result()
            except KeyboardInterrupt:
                logger.warning("Interrupted; finishing running scripts")
                self.cancel.cancel()
                for future in futures:
                    future.exception()
        return self.reporter

    def _run_one(self, script: TestScript) -> None:
        if self.cancel.cancelled:
            self.reporter.record_cancelled(script.path)
            return
        logger.info("Running %s", script.path)
        try:
            adapter = self.adapter_factory(script)
        except AdapterUnavailable:
            self.cancel.cancel()
            raise
        try:
            verdicts = ScriptRunner(adapter, self.config.timeout, self.config.grace).run(script)
        finally:
            adapter.close()
        self.reporter.record_script(script.path, verdicts)
